"""
Domain model for specialists.
"""
from typing import ClassVar, Optional, Tuple

from pydantic import Field

from models.resource import (
    EMAIL_PATTERN,
    OBJECT_ID_PATTERN,
    ResourceDescriptor,
    ResourceRecord,
    Role,
)


class Specialist(ResourceRecord):
    """A specialist, optionally linked to the user account they log in with."""

    REFERENCE_FIELDS: ClassVar[Tuple[str, ...]] = ("userId",)
    LOWERCASE_FIELDS: ClassVar[Tuple[str, ...]] = ("email", "crp", "approach")

    user_id: Optional[str] = Field(default=None, alias="userId", pattern=OBJECT_ID_PATTERN)
    name: Optional[str] = Field(default=None, max_length=128)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    crp: str = Field(..., min_length=1, max_length=56)
    approach: str = Field(..., max_length=256)
    phone: str = Field(..., max_length=128)
    role: Role = "specialist"


SPECIALIST = ResourceDescriptor(
    name="Specialist",
    collection="specialists",
    record_cls=Specialist,
    public_fields=("id", "userId", "name", "email", "crp", "approach", "phone", "role", "createdAt"),
    unique_fields=("email", "crp"),
    duplicate_priority=("email", "crp"),
    duplicate_fallback="crp",
    filter_fields=("userId", "email", "name", "crp", "approach", "phone"),
)
