"""
Shared record model and resource descriptor.

Every resource type (patient, specialist) is a ResourceRecord subclass plus
a ResourceDescriptor that tells the generic store and service how to treat
it: which collection it lives in, which fields are public, which are unique
and which can be used as list filters.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Dict, Literal, Mapping, Optional, Tuple, Type

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from core.datetime_utils import format_iso, to_utc

ROLES = ("patient", "specialist", "admin")
ADMIN_ROLE = "admin"

Role = Literal["patient", "specialist", "admin"]

OBJECT_ID_PATTERN = r"^[a-fA-F0-9]{24}$"
EMAIL_PATTERN = r"^\S+@\S+\.\S+$"

# Fields the database owns; never taken from client input.
SYSTEM_FIELDS = ("id", "createdAt", "updatedAt")
_SYSTEM_ATTRS = ("id", "created_at", "updated_at")


class ResourceRecord(BaseModel):
    """
    Base model for a persisted record.

    Field names follow the document keys through aliases (``createdAt``,
    ``userId`` ...), so ``model_dump(by_alias=True)`` yields storage/API keys.
    Subclasses declare their scalar fields and the ``REFERENCE_FIELDS``
    holding ObjectId references to other documents. Values of
    ``LOWERCASE_FIELDS`` are stored lowercased, and list filters on those
    fields go through the same normalization (``normalize_filter``).
    """

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    REFERENCE_FIELDS: ClassVar[Tuple[str, ...]] = ()
    LOWERCASE_FIELDS: ClassVar[Tuple[str, ...]] = ()

    id: Optional[str] = None
    role: Role = "patient"
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_utc(value) if value is not None else None

    @model_validator(mode="before")
    @classmethod
    def lowercase_fields(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        for key in cls.LOWERCASE_FIELDS:
            if isinstance(data.get(key), str):
                data[key] = data[key].lower()
        return data

    @classmethod
    def normalize_filter(cls, field: str, value: Any) -> Any:
        """Normalize a filter value the way the field is normalized on write."""
        if not isinstance(value, str):
            return value
        value = value.strip()
        return value.lower() if field in cls.LOWERCASE_FIELDS else value

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "ResourceRecord":
        """Build a record from a stored MongoDB document."""
        data = {}
        for key, value in document.items():
            if key == "_id":
                data["id"] = str(value)
            elif isinstance(value, ObjectId):
                data[key] = str(value)
            else:
                data[key] = value
        return cls.model_validate(data)

    def to_document(self) -> Dict[str, Any]:
        """
        Mutable fields in storage form.

        System fields are left out, unset optional fields are omitted and
        reference ids are converted to ObjectId.
        """
        document = self.model_dump(by_alias=True, exclude_none=True, exclude=set(_SYSTEM_ATTRS))
        for key in self.REFERENCE_FIELDS:
            if key in document:
                document[key] = ObjectId(document[key])
        return document

    def public_view(self, fields: Tuple[str, ...]) -> Dict[str, Any]:
        """
        Project the record onto a whitelist of fields, in whitelist order.

        Absent optional fields are omitted rather than null-filled.
        """
        dumped = self.model_dump(by_alias=True)
        view: Dict[str, Any] = {}
        for field in fields:
            value = dumped.get(field)
            if value is None:
                continue
            view[field] = format_iso(value) if isinstance(value, datetime) else value
        return view

    @classmethod
    def mutable_fields(cls) -> Tuple[str, ...]:
        """Document keys a client may write (role included)."""
        return tuple(
            info.alias or name
            for name, info in cls.model_fields.items()
            if name not in _SYSTEM_ATTRS
        )

    @classmethod
    def required_fields(cls) -> Tuple[str, ...]:
        return tuple(
            info.alias or name
            for name, info in cls.model_fields.items()
            if info.is_required()
        )


@dataclass(frozen=True)
class ResourceDescriptor:
    """
    Static description of one resource type.

    Attributes:
        name: Display name used in messages ("Patient").
        collection: MongoDB collection name.
        record_cls: ResourceRecord subclass validating stored documents.
        public_fields: Public View whitelist, in output order.
        unique_fields: Fields backed by a unique index.
        duplicate_priority: Order in which duplicate-key fields are reported.
        duplicate_fallback: Field reported when the error names none of the above.
        filter_fields: Fields accepted as exact-match list filters.
        indexed_fields: Non-unique fields that get a plain index.
    """

    name: str
    collection: str
    record_cls: Type[ResourceRecord]
    public_fields: Tuple[str, ...]
    unique_fields: Tuple[str, ...]
    duplicate_priority: Tuple[str, ...]
    duplicate_fallback: str
    filter_fields: Tuple[str, ...]
    indexed_fields: Tuple[str, ...] = ()

    @property
    def reference_fields(self) -> Tuple[str, ...]:
        return self.record_cls.REFERENCE_FIELDS
