"""
Service layer for resource operations.

This service contains the per-verb CRUD logic shared by patients and
specialists and orchestrates calls to the repository.

Architecture:
    API Layer (routers) → ResourceService → ResourceRepository → MongoDB

Dependency Injection:
    ResourceService receives its repository via constructor injection.
    Use core.dependencies.get_patient_service() or get_specialist_service()
    in routers with Depends().
"""
import logging
from typing import Any, Dict, List, Mapping

from core.exceptions import DuplicateKeyError
from models.resource import ResourceRecord
from repositories.resource_repository import ResourceRepository
from services.duplicate_key import translate_duplicate_key
from services.field_policy import apply_role_policy

logger = logging.getLogger(__name__)


class ResourceService:
    """
    Service layer for one resource type.

    Handles role masking, response shaping (Public View) and duplicate-key
    translation. All other errors raised by the repository propagate to the
    exception handlers registered in main.py.
    """

    def __init__(self, repository: ResourceRepository):
        """
        Initialize the resource service.

        Args:
            repository: ResourceRepository instance for data access.
                        Injected via core.dependencies.
        """
        self._repo = repository
        self._descriptor = repository.descriptor

    def public_view(self, record: ResourceRecord) -> Dict[str, Any]:
        """Project a record onto the resource's public fields."""
        return record.public_view(self._descriptor.public_fields)

    def load(self, record_id: str) -> ResourceRecord:
        """
        Resolve a path id to a stored record.

        Raises:
            NotFoundError: If the id is malformed or unknown.
        """
        return self._repo.get_by_id(record_id)

    def list_records(
        self,
        filters: Mapping[str, Any],
        page: int,
        per_page: int,
    ) -> List[Dict[str, Any]]:
        """List records newest first, as public views."""
        records = self._repo.list(filters, page=page, per_page=per_page)
        return [self.public_view(record) for record in records]

    def get_record(self, record: ResourceRecord) -> Dict[str, Any]:
        return self.public_view(record)

    def get_profile(self, caller_id: str) -> Dict[str, Any]:
        """
        Get the caller's own record.

        Raises:
            NotFoundError: If the caller has no record of this resource type.
        """
        return self.public_view(self._repo.get_by_id(caller_id))

    def create_record(self, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Create a new record.

        Returns:
            The created record's public view.

        Raises:
            ValidationError: 400 on invalid fields, 409 on a duplicate unique field.
        """
        logger.info(f"Creating {self._descriptor.name.lower()}")
        try:
            record = self._repo.create(fields)
        except DuplicateKeyError as exc:
            raise translate_duplicate_key(exc, self._descriptor) from exc

        logger.info(
            f"{self._descriptor.name} created successfully",
            extra={"record_id": record.id}
        )
        return self.public_view(record)

    def replace_record(self, existing: ResourceRecord, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Replace every mutable field of ``existing``.

        ``role`` is honored only when ``existing`` is an admin record.
        """
        allowed = apply_role_policy(existing.role, fields)
        if len(allowed) != len(fields):
            logger.warning(
                "Ignoring role change on non-admin record",
                extra={"record_id": existing.id, "collection": self._descriptor.collection}
            )
        try:
            record = self._repo.replace(existing.id, allowed)
        except DuplicateKeyError as exc:
            raise translate_duplicate_key(exc, self._descriptor) from exc

        logger.info(f"{self._descriptor.name} replaced", extra={"record_id": record.id})
        return self.public_view(record)

    def update_record(self, existing: ResourceRecord, fields: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Merge ``fields`` into ``existing``.

        ``role`` is honored only when ``existing`` is an admin record.
        """
        allowed = apply_role_policy(existing.role, fields)
        if len(allowed) != len(fields):
            logger.warning(
                "Ignoring role change on non-admin record",
                extra={"record_id": existing.id, "collection": self._descriptor.collection}
            )
        try:
            record = self._repo.update(existing.id, allowed)
        except DuplicateKeyError as exc:
            raise translate_duplicate_key(exc, self._descriptor) from exc

        logger.info(f"{self._descriptor.name} updated", extra={"record_id": record.id})
        return self.public_view(record)

    def delete_record(self, existing: ResourceRecord) -> None:
        self._repo.delete(existing.id)
        logger.info(f"{self._descriptor.name} deleted", extra={"record_id": existing.id})
