"""
Pydantic schemas for patient-related API operations.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.patient import Gender
from models.resource import EMAIL_PATTERN, OBJECT_ID_PATTERN, Role


class PatientCreate(BaseModel):
    """Schema for creating a new patient.

    Patient CPFs must be unique.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "specialistid": "5f8d0d55b54764421b7156c3",
                "email": "maria@example.com",
                "name": "Maria Silva",
                "cpf": "12345678900",
                "birthday": "1990-01-31",
                "phone": "11999990000",
                "address": "Rua das Flores, 10",
                "city": "Sao Paulo",
                "state": "SP",
                "gender": "feminino",
            }
        },
    )

    specialist_id: str = Field(..., alias="specialistid", pattern=OBJECT_ID_PATTERN, description="Specialist following the patient")
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Patient e-mail")
    name: str = Field(..., min_length=1, max_length=128, description="Patient full name")
    cpf: str = Field(..., min_length=1, max_length=16, description="CPF (must be unique)")
    birthday: str = Field(..., min_length=10, max_length=10, description="Birth date, 10 characters (YYYY-MM-DD)")
    phone: str = Field(..., min_length=1, max_length=16)
    address: str = Field(..., min_length=1, max_length=128)
    city: str = Field(..., min_length=1, max_length=56)
    state: str = Field(..., min_length=1, max_length=56)
    gender: Optional[Gender] = None
    role: Optional[Role] = Field(default=None, description="Only honored for admin records on replace")


class PatientReplace(PatientCreate):
    """Schema for replacing a patient; every required field must be sent again."""


class PatientUpdate(BaseModel):
    """Schema for partially updating a patient. Omitted fields are kept."""
    model_config = ConfigDict(populate_by_name=True)

    specialist_id: Optional[str] = Field(default=None, alias="specialistid", pattern=OBJECT_ID_PATTERN)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    cpf: Optional[str] = Field(default=None, min_length=1, max_length=16)
    birthday: Optional[str] = Field(default=None, min_length=10, max_length=10)
    phone: Optional[str] = Field(default=None, min_length=1, max_length=16)
    address: Optional[str] = Field(default=None, min_length=1, max_length=128)
    city: Optional[str] = Field(default=None, min_length=1, max_length=56)
    state: Optional[str] = Field(default=None, min_length=1, max_length=56)
    gender: Optional[Gender] = None
    role: Optional[Role] = Field(default=None, description="Only honored for admin records")


class PatientResponse(BaseModel):
    """Schema for patient response (public view).

    Fields absent from the stored record are omitted from the response.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, description="Unique patient identifier", examples=["5f8d0d55b54764421b7156c4"])
    specialist_id: Optional[str] = Field(default=None, alias="specialistid")
    name: Optional[str] = None
    email: Optional[str] = None
    cpf: Optional[str] = None
    gender: Optional[str] = None
    birthday: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt", description="ISO 8601 UTC creation timestamp")
