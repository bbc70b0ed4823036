"""
FastAPI Dependency Injection configuration for Clinic Service API.

This module provides the dependency injection (DI) infrastructure following
the Dependency Inversion Principle. It enables:
- Clean separation between API, Service, and Repository layers
- Easy testing with mock/fake dependencies
- Centralized configuration of all dependencies

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    Service Layer (ResourceService)
         ↓ Injected
    Repository Layer (ResourceRepository)
         ↓ Injected
    Database (MongoDB client)

Usage in Routers:
    from core.dependencies import get_patient_service

    @router.post("")
    async def create_patient(
        body: PatientCreate,
        service: ResourceService = Depends(get_patient_service)
    ):
        return service.create_record(...)

Testing:
    # Override dependencies in tests
    app.dependency_overrides[get_database] = lambda: test_database
"""
import logging
from typing import TYPE_CHECKING, Optional

from core.config import settings

if TYPE_CHECKING:
    from repositories import Database, ResourceRepository
    from services import ResourceService

logger = logging.getLogger(__name__)


# =============================================================================
# DATABASE DEPENDENCY
# =============================================================================

# Lazy import to avoid circular dependencies
# The Database class is imported when first needed
_database_instance: Optional["Database"] = None


def get_database() -> "Database":
    """
    Get the database instance (singleton pattern via FastAPI DI).

    The MongoDB client is created once and its indexes ensured; the driver
    pools connections internally.

    Returns:
        Database: The configured database instance.
    """
    global _database_instance

    if _database_instance is None:
        from models import PATIENT, SPECIALIST
        from repositories import Database

        logger.info(
            "Connecting to MongoDB",
            extra={"db_name": settings.clinic_svc_mongo_db}
        )
        _database_instance = Database(
            uri=settings.clinic_svc_mongo_uri,
            db_name=settings.clinic_svc_mongo_db,
        )
        _database_instance.ensure_indexes([PATIENT, SPECIALIST])
        logger.info("Database initialized successfully")

    return _database_instance


def reset_database() -> None:
    """
    Reset the database instance (for testing only).

    This allows tests to inject a fresh database instance.
    """
    global _database_instance
    if _database_instance is not None:
        _database_instance.close()
    _database_instance = None


# =============================================================================
# REPOSITORY DEPENDENCIES
# =============================================================================

def get_patient_repository() -> "ResourceRepository":
    """
    Get a ResourceRepository for patients with database injected.

    Returns:
        ResourceRepository: Repository for patient CRUD operations.
    """
    from models import PATIENT
    from repositories import ResourceRepository

    return ResourceRepository(db=get_database(), descriptor=PATIENT)


def get_specialist_repository() -> "ResourceRepository":
    """
    Get a ResourceRepository for specialists with database injected.

    Returns:
        ResourceRepository: Repository for specialist CRUD operations.
    """
    from models import SPECIALIST
    from repositories import ResourceRepository

    return ResourceRepository(db=get_database(), descriptor=SPECIALIST)


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_patient_service() -> "ResourceService":
    """
    Get a ResourceService for patients with repository injected.

    Returns:
        ResourceService: Service for patient operations.
    """
    from services import ResourceService

    return ResourceService(repository=get_patient_repository())


def get_specialist_service() -> "ResourceService":
    """
    Get a ResourceService for specialists with repository injected.

    Returns:
        ResourceService: Service for specialist operations.
    """
    from services import ResourceService

    return ResourceService(repository=get_specialist_repository())
