"""
Base database connection and initialization.

This module handles MongoDB connection management and index creation.

IMPORTANT: Database instantiation should be done through the DI layer.
Use core.dependencies.get_database() instead of instantiating directly.
This ensures proper lifecycle management and testability.
"""
import logging
from typing import Iterable, Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection

from core.config import settings
from models.resource import ResourceDescriptor

logger = logging.getLogger(__name__)


class Database:
    """
    MongoDB connection manager.

    Features:
    - One client per process (the driver pools connections internally)
    - Timezone-aware datetimes on read
    - Unique and lookup indexes created from resource descriptors

    Usage:
        # Via dependency injection (recommended):
        from core.dependencies import get_database
        db = get_database()

        # Direct instantiation (for testing):
        db = Database(client=mongomock.MongoClient(tz_aware=True))
    """

    def __init__(
        self,
        uri: Optional[str] = None,
        db_name: Optional[str] = None,
        client: Optional[MongoClient] = None,
    ):
        """
        Initialize database connection.

        Args:
            uri: MongoDB connection URI. Defaults to config value.
            db_name: Database name. Defaults to config value.
            client: Pre-built client (tests inject an in-memory one).
        """
        self.uri = uri or settings.clinic_svc_mongo_uri
        self.db_name = db_name or settings.clinic_svc_mongo_db
        self.client = client or MongoClient(
            self.uri,
            tz_aware=True,
            serverSelectionTimeoutMS=settings.clinic_svc_mongo_timeout_ms,
        )
        self._db = self.client[self.db_name]

    def collection(self, name: str) -> Collection:
        """Get a collection handle by name."""
        return self._db[name]

    def ensure_indexes(self, descriptors: Iterable[ResourceDescriptor]) -> None:
        """
        Create the indexes every resource relies on.

        Unique fields get a unique index (duplicates then fail at write time),
        and every collection gets a descending createdAt index for list ordering.
        """
        for descriptor in descriptors:
            collection = self.collection(descriptor.collection)
            for field in descriptor.unique_fields:
                collection.create_index([(field, ASCENDING)], unique=True)
            for field in descriptor.indexed_fields:
                collection.create_index([(field, ASCENDING)])
            collection.create_index([("createdAt", DESCENDING)])
            logger.info(
                "Indexes ensured",
                extra={"collection": descriptor.collection, "unique": list(descriptor.unique_fields)}
            )

    def ping(self) -> None:
        """Round-trip to the server; raises if it is unreachable."""
        self.client.admin.command("ping")

    def close(self) -> None:
        self.client.close()
