"""
Core module for application configuration, logging, auth and shared errors.

This module provides:
- Settings: Application configuration via pydantic-settings
- Dependency injection: FastAPI Depends() functions for services and repositories
- Exceptions: Domain-specific exception classes with HTTP status codes
- Datetime utilities: UTC-first datetime handling
"""
from core.config import settings, Settings

# Dependency injection - import functions for FastAPI Depends()
from core.dependencies import (
    get_database,
    get_patient_repository,
    get_specialist_repository,
    get_patient_service,
    get_specialist_service,
    reset_database,
)

# Exception classes for consistent error handling
from core.exceptions import (
    ClinicServiceError,
    ValidationError,
    DuplicateKeyError,
    NotFoundError,
    AuthenticationError,
    AuthorizationError,
    DatabaseError,
    setup_exception_handlers,
)

# UTC datetime utilities
from core.datetime_utils import utc_now, to_utc, format_iso

__all__ = [
    "settings",
    "Settings",
    "get_database",
    "get_patient_repository",
    "get_specialist_repository",
    "get_patient_service",
    "get_specialist_service",
    "reset_database",
    "ClinicServiceError",
    "ValidationError",
    "DuplicateKeyError",
    "NotFoundError",
    "AuthenticationError",
    "AuthorizationError",
    "DatabaseError",
    "setup_exception_handlers",
    "utc_now",
    "to_utc",
    "format_iso",
]
