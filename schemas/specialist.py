"""
Pydantic schemas for specialist-related API operations.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from models.resource import EMAIL_PATTERN, OBJECT_ID_PATTERN, Role


class SpecialistCreate(BaseModel):
    """Schema for creating a new specialist.

    E-mail and CRP must both be unique.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "name": "Dr. Ana Souza",
                "email": "ana@example.com",
                "crp": "06/123456",
                "approach": "cognitive behavioral therapy",
                "phone": "11988887777",
            }
        },
    )

    user_id: Optional[str] = Field(default=None, alias="userId", pattern=OBJECT_ID_PATTERN, description="Linked user account")
    name: Optional[str] = Field(default=None, max_length=128)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    crp: str = Field(..., min_length=1, max_length=56, description="Professional registry number (must be unique)")
    approach: str = Field(..., min_length=1, max_length=256)
    phone: str = Field(..., min_length=1, max_length=128)
    role: Optional[Role] = Field(default=None, description="Only honored for admin records on replace")


class SpecialistReplace(SpecialistCreate):
    """Schema for replacing a specialist; every required field must be sent again."""


class SpecialistUpdate(BaseModel):
    """Schema for partially updating a specialist. Omitted fields are kept."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(default=None, alias="userId", pattern=OBJECT_ID_PATTERN)
    name: Optional[str] = Field(default=None, max_length=128)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    crp: Optional[str] = Field(default=None, min_length=1, max_length=56)
    approach: Optional[str] = Field(default=None, min_length=1, max_length=256)
    phone: Optional[str] = Field(default=None, min_length=1, max_length=128)
    role: Optional[Role] = Field(default=None, description="Only honored for admin records")


class SpecialistResponse(BaseModel):
    """Schema for specialist response (public view)."""
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = Field(default=None, description="Unique specialist identifier")
    user_id: Optional[str] = Field(default=None, alias="userId")
    name: Optional[str] = None
    email: Optional[str] = None
    crp: Optional[str] = None
    approach: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")
