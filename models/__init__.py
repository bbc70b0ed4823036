"""
Domain models.

Each resource type is a pydantic record plus a descriptor consumed by the
generic store and service layers.
"""
from models.resource import ADMIN_ROLE, ROLES, ResourceDescriptor, ResourceRecord
from models.patient import GENDERS, PATIENT, Patient
from models.specialist import SPECIALIST, Specialist

__all__ = [
    "ADMIN_ROLE",
    "ROLES",
    "ResourceDescriptor",
    "ResourceRecord",
    "GENDERS",
    "PATIENT",
    "Patient",
    "SPECIALIST",
    "Specialist",
]
