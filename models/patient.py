"""
Domain model for patients.
"""
from typing import ClassVar, Literal, Tuple

from pydantic import Field

from models.resource import (
    EMAIL_PATTERN,
    OBJECT_ID_PATTERN,
    ResourceDescriptor,
    ResourceRecord,
    Role,
)

GENDERS = ("masculino", "feminino", "nao_binario", "nao_informado")

Gender = Literal["masculino", "feminino", "nao_binario", "nao_informado"]


class Patient(ResourceRecord):
    """A patient, linked to the specialist who follows them."""

    REFERENCE_FIELDS: ClassVar[Tuple[str, ...]] = ("specialistid",)
    LOWERCASE_FIELDS: ClassVar[Tuple[str, ...]] = ("email", "cpf", "address", "city", "state", "phone")

    specialist_id: str = Field(..., alias="specialistid", pattern=OBJECT_ID_PATTERN)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    name: str = Field(..., max_length=128)
    cpf: str = Field(..., min_length=1, max_length=16)
    gender: Gender = "nao_informado"
    birthday: str = Field(..., min_length=10, max_length=10)
    address: str = Field(..., max_length=128)
    city: str = Field(..., max_length=56)
    state: str = Field(..., max_length=56)
    phone: str = Field(..., max_length=16)
    role: Role = "patient"


PATIENT = ResourceDescriptor(
    name="Patient",
    collection="patients",
    record_cls=Patient,
    public_fields=(
        "id", "specialistid", "name", "email", "cpf", "gender", "birthday",
        "address", "city", "state", "phone", "role", "createdAt",
    ),
    unique_fields=("cpf",),
    duplicate_priority=("email", "cpf"),
    duplicate_fallback="cpf",
    filter_fields=(
        "specialistid", "email", "name", "cpf", "gender", "birthday",
        "phone", "address", "city", "state",
    ),
    indexed_fields=("name",),
)
