"""
Repository for resource database operations.

One ResourceRepository serves one collection; the ResourceDescriptor it is
built with decides which record model validates documents, which fields are
unique and which may be used as list filters.

Architecture:
    ResourceRepository is the data access layer for patients and specialists.
    It should be injected via core.dependencies.get_patient_repository()
    or core.dependencies.get_specialist_repository().

All MongoDB queries are encapsulated in this repository - no queries in
service or API layers. Driver duplicate-key errors are converted here into
the typed DuplicateKeyError the service layer understands.
"""
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from bson import ObjectId
from pydantic import ValidationError as PydanticValidationError
from pymongo import DESCENDING
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError

from core.datetime_utils import utc_now
from core.exceptions import DuplicateKeyError, NotFoundError, ValidationError
from models.resource import SYSTEM_FIELDS, ResourceDescriptor, ResourceRecord
from repositories.base import Database

logger = logging.getLogger(__name__)

_OBJECT_ID_RE = re.compile(r"^[a-fA-F0-9]{24}$")


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse a 24-hex-character id; anything else gives None."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and _OBJECT_ID_RE.match(value):
        return ObjectId(value)
    return None


class ResourceRepository:
    """
    Repository for CRUD operations over one resource collection.

    Records are returned as validated ResourceRecord instances. Every write
    rereads the stored document so callers always see what the database holds.
    """

    def __init__(self, db: Database, descriptor: ResourceDescriptor):
        """
        Initialize the repository.

        Args:
            db: Database instance for data access.
            descriptor: Resource type served by this repository.
        """
        self._db = db
        self._descriptor = descriptor
        self._collection = db.collection(descriptor.collection)

    @property
    def descriptor(self) -> ResourceDescriptor:
        return self._descriptor

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_by_id(self, record_id: str) -> ResourceRecord:
        """
        Get a record by id.

        Raises:
            NotFoundError: If the id is malformed or matches no document.
        """
        document = None
        object_id = to_object_id(record_id)
        if object_id is not None:
            document = self._collection.find_one({"_id": object_id})
        if document is None:
            raise NotFoundError(resource=self._descriptor.name, resource_id=record_id)
        return self._descriptor.record_cls.from_document(document)

    def list(
        self,
        filters: Mapping[str, Any],
        page: int = 1,
        per_page: int = 30,
    ) -> List[ResourceRecord]:
        """
        List records newest first.

        Args:
            filters: Exact-match values by field, normalized the way stored
                     values are. None values are skipped, so an omitted
                     filter never excludes a record.
            page: 1-based page number.
            per_page: Page size.

        Returns:
            At most ``per_page`` records, sorted by createdAt descending.
        """
        record_cls = self._descriptor.record_cls
        query: Dict[str, Any] = {}
        for field, value in filters.items():
            if value is None or field not in self._descriptor.filter_fields:
                continue
            if field in self._descriptor.reference_fields:
                value = to_object_id(value) or value
            else:
                value = record_cls.normalize_filter(field, value)
            query[field] = value

        cursor = (
            self._collection.find(query)
            .sort([("createdAt", DESCENDING), ("_id", DESCENDING)])
            .skip(per_page * (page - 1))
            .limit(per_page)
        )
        return [self._descriptor.record_cls.from_document(document) for document in cursor]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create(self, fields: Mapping[str, Any]) -> ResourceRecord:
        """
        Validate and insert a new record.

        Raises:
            ValidationError: Required or format constraints failed.
            DuplicateKeyError: A unique index rejected the insert.
        """
        document = self._validate(fields).to_document()
        now = utc_now()
        document["createdAt"] = now
        document["updatedAt"] = now

        try:
            result = self._collection.insert_one(document)
        except MongoDuplicateKeyError as exc:
            raise self._duplicate_key_error(exc, document) from exc

        return self.get_by_id(str(result.inserted_id))

    def replace(self, record_id: str, fields: Mapping[str, Any]) -> ResourceRecord:
        """
        Overwrite every mutable field of a record.

        Identity and createdAt are preserved. ``role`` is only written when
        present in ``fields``; otherwise the stored role is kept. Optional
        fields missing from ``fields`` are removed.

        Raises:
            ValidationError, DuplicateKeyError: As for create.
            NotFoundError: The record is gone at write time or on reread.
        """
        object_id = self._require_object_id(record_id)
        document = self._validate(fields).to_document()
        if "role" not in fields:
            document.pop("role", None)

        update: Dict[str, Any] = {"$set": {**document, "updatedAt": utc_now()}}
        cleared = [
            field for field in self._descriptor.record_cls.mutable_fields()
            if field not in document and field != "role"
        ]
        if cleared:
            update["$unset"] = {field: "" for field in cleared}

        self._write(object_id, update, document)
        return self.get_by_id(record_id)

    def update(self, record_id: str, partial_fields: Mapping[str, Any]) -> ResourceRecord:
        """
        Merge ``partial_fields`` into a record.

        The merged record is validated as a whole, then only the supplied
        keys are written. A supplied None clears an optional field.

        Raises:
            ValidationError, DuplicateKeyError: As for create.
            NotFoundError: The record does not exist or vanished before reread.
        """
        current = self.get_by_id(record_id)
        mutable = self._descriptor.record_cls.mutable_fields()
        changes = {key: value for key, value in partial_fields.items() if key in mutable}

        merged = current.model_dump(by_alias=True, exclude={"id", "created_at", "updated_at"})
        merged.update(changes)
        document = self._validate(merged).to_document()

        to_set = {key: document[key] for key in changes if key in document}
        to_unset = [key for key in changes if key not in document]
        update: Dict[str, Any] = {"$set": {**to_set, "updatedAt": utc_now()}}
        if to_unset:
            update["$unset"] = {key: "" for key in to_unset}

        self._write(ObjectId(current.id), update, to_set)
        return self.get_by_id(record_id)

    def delete(self, record_id: str) -> None:
        """Remove a record. Deleting a missing record is a no-op."""
        object_id = to_object_id(record_id)
        if object_id is None:
            return
        self._collection.delete_one({"_id": object_id})

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _validate(self, fields: Mapping[str, Any]) -> ResourceRecord:
        data = {key: value for key, value in fields.items() if key not in SYSTEM_FIELDS}
        try:
            return self._descriptor.record_cls.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc.errors(), location="body") from exc

    def _require_object_id(self, record_id: str) -> ObjectId:
        object_id = to_object_id(record_id)
        if object_id is None:
            raise NotFoundError(resource=self._descriptor.name, resource_id=record_id)
        return object_id

    def _write(self, object_id: ObjectId, update: Dict[str, Any], written: Mapping[str, Any]) -> None:
        try:
            result = self._collection.update_one({"_id": object_id}, update)
        except MongoDuplicateKeyError as exc:
            raise self._duplicate_key_error(exc, written, exclude_id=object_id) from exc
        if result.matched_count == 0:
            raise NotFoundError(resource=self._descriptor.name, resource_id=str(object_id))

    def _duplicate_key_error(
        self,
        exc: MongoDuplicateKeyError,
        document: Mapping[str, Any],
        exclude_id: Optional[ObjectId] = None,
    ) -> DuplicateKeyError:
        """
        Convert a driver duplicate-key error into a DuplicateKeyError.

        The server reports the index keys in ``keyPattern``/``keyValue``.
        When those details are missing, the unique fields that were written
        are checked for a conflicting document instead.
        """
        details = exc.details if isinstance(exc.details, dict) else {}
        key_pattern = details.get("keyPattern")
        key_value = details.get("keyValue")
        fields: Sequence[str] = []
        if isinstance(key_pattern, dict) and key_pattern:
            fields = list(key_pattern)
        elif isinstance(key_value, dict) and key_value:
            fields = list(key_value)
        else:
            fields = self._conflicting_fields(document, exclude_id)

        logger.warning(
            "Duplicate key rejected",
            extra={"collection": self._descriptor.collection, "fields": list(fields)}
        )
        return DuplicateKeyError(fields=fields)

    def _conflicting_fields(
        self,
        document: Mapping[str, Any],
        exclude_id: Optional[ObjectId],
    ) -> List[str]:
        conflicts = []
        for field in self._descriptor.unique_fields:
            if field not in document:
                continue
            query: Dict[str, Any] = {field: document[field]}
            if exclude_id is not None:
                query["_id"] = {"$ne": exclude_id}
            elif "_id" in document:
                query["_id"] = {"$ne": document["_id"]}
            if self._collection.find_one(query, {"_id": 1}) is not None:
                conflicts.append(field)
        return conflicts
