"""
Pydantic schemas for API request/response validation.

This module contains all Pydantic models used at API boundaries.
"""
from schemas.patient import PatientCreate, PatientReplace, PatientResponse, PatientUpdate
from schemas.specialist import (
    SpecialistCreate,
    SpecialistReplace,
    SpecialistResponse,
    SpecialistUpdate,
)

__all__ = [
    # Patient schemas
    "PatientCreate",
    "PatientReplace",
    "PatientUpdate",
    "PatientResponse",
    # Specialist schemas
    "SpecialistCreate",
    "SpecialistReplace",
    "SpecialistUpdate",
    "SpecialistResponse",
]
