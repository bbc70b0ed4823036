"""
Service layer for business logic.

This module contains the CRUD orchestration shared by all resource types,
the duplicate-key translator and the role field-access policy.
"""
from services.duplicate_key import translate_duplicate_key
from services.field_policy import apply_role_policy
from services.resource_service import ResourceService

__all__ = [
    "ResourceService",
    "apply_role_policy",
    "translate_duplicate_key",
]
