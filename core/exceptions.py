"""
Shared exception classes and error handling utilities for Clinic Service API.

This module provides:
- Custom exception hierarchy for domain-specific errors
- Consistent error response formatting
- Exception handlers for FastAPI integration

Usage:
    from core.exceptions import NotFoundError, ValidationError

    # In store/service layer - raise domain exceptions
    raise NotFoundError(resource="Patient", resource_id=patient_id)

    # In FastAPI - register handlers via setup_exception_handlers(app)
"""
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION CLASSES
# =============================================================================

class ClinicServiceError(Exception):
    """
    Base exception for all Clinic Service domain errors.

    All custom exceptions should inherit from this class.
    Provides consistent error structure with status code and detail message.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"
    headers: Optional[Dict[str, str]] = None

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ):
        """
        Initialize the exception.

        Args:
            detail: Human-readable error message. Uses class default if not provided.
            status_code: HTTP status code. Uses class default if not provided.
            **kwargs: Additional context to include in error response.
        """
        self.detail = detail or self.__class__.detail
        self.status_code = status_code or self.__class__.status_code
        self.context = kwargs
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result = {"detail": self.detail}
        if self.context:
            result["context"] = self.context
        return result


# =============================================================================
# VALIDATION EXCEPTIONS
# =============================================================================

class ValidationError(ClinicServiceError):
    """
    Raised when input fails shape, format or uniqueness checks.

    Carries one entry per offending field:
        {"field": "cpf", "location": "body", "messages": ['"cpf" already exists']}
    """

    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Validation Error"

    def __init__(
        self,
        errors: Optional[List[Dict[str, Any]]] = None,
        status_code: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(detail=detail, status_code=status_code)
        self.errors = errors or []

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.detail, "errors": self.errors}

    @classmethod
    def from_pydantic(
        cls,
        errors: Iterable[Dict[str, Any]],
        location: Optional[str] = None,
    ) -> "ValidationError":
        """
        Build a ValidationError from pydantic error dicts.

        Messages for the same field are grouped into one entry. When
        ``location`` is not given, the first element of each error's
        ``loc`` (body, query, path, header) is used as the location.
        """
        grouped: Dict[tuple, List[str]] = {}
        for error in errors:
            loc: Sequence[Any] = error.get("loc") or ()
            if location is None and loc:
                where, path = str(loc[0]), loc[1:]
            else:
                where, path = location or "body", loc
            field = ".".join(str(part) for part in path) or where
            grouped.setdefault((field, where), []).append(error.get("msg", "Invalid value"))

        return cls(errors=[
            {"field": field, "location": where, "messages": messages}
            for (field, where), messages in grouped.items()
        ])


class DuplicateKeyError(ClinicServiceError):
    """
    Raised by a store when a unique index rejects a write.

    ``fields`` names the indexed fields involved; it may be empty when the
    database did not report them. Services translate this into a
    ValidationError before it reaches the client.
    """

    status_code = status.HTTP_409_CONFLICT
    detail = "Duplicate key"

    def __init__(self, fields: Sequence[str] = (), **kwargs: Any):
        super().__init__(fields=list(fields), **kwargs)
        self.fields = tuple(fields)


# =============================================================================
# LOOKUP EXCEPTIONS
# =============================================================================

class NotFoundError(ClinicServiceError):
    """Raised when a record id does not resolve to a stored record."""

    status_code = status.HTTP_404_NOT_FOUND
    detail = "Resource does not exist"

    def __init__(self, resource: Optional[str] = None, resource_id: Optional[str] = None, **kwargs: Any):
        detail = f"{resource} does not exist" if resource else self.detail
        super().__init__(detail=detail, resource_id=resource_id, **kwargs)


# =============================================================================
# AUTH EXCEPTIONS
# =============================================================================

class AuthenticationError(ClinicServiceError):
    """Raised when the bearer token is missing, malformed or expired."""

    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Unauthorized"
    headers = {"WWW-Authenticate": "Bearer"}


class AuthorizationError(ClinicServiceError):
    """Raised when an authenticated caller may not access a resource."""

    status_code = status.HTTP_403_FORBIDDEN
    detail = "Forbidden"


# =============================================================================
# DATABASE EXCEPTIONS
# =============================================================================

class DatabaseError(ClinicServiceError):
    """Raised when a database operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail = "Database operation failed"

    def __init__(self, operation: Optional[str] = None, **kwargs: Any):
        detail = f"Database error during {operation}" if operation else self.detail
        super().__init__(detail=detail, operation=operation, **kwargs)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def clinic_service_exception_handler(
    request: Request,
    exc: ClinicServiceError
) -> JSONResponse:
    """
    Handle ClinicServiceError exceptions and return consistent JSON responses.

    This handler logs the error and returns a standardized JSON error response.
    """
    logger.warning(
        f"ClinicServiceError: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "context": exc.context
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Render FastAPI request validation failures as 400 Validation Errors."""
    error = ValidationError.from_pydantic(exc.errors())
    logger.info(
        "Request validation failed",
        extra={"path": request.url.path, "method": request.method, "errors": error.errors}
    )
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def database_exception_handler(
    request: Request,
    exc: PyMongoError
) -> JSONResponse:
    """
    Handle driver errors that no layer translated.

    The driver message stays in the logs; the client gets a generic 500.
    """
    error = DatabaseError(operation=f"{request.method} {request.url.path}")
    logger.error(
        f"Database error: {exc}",
        extra={"path": request.url.path, "method": request.method, "error_type": type(exc).__name__}
    )
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions with a generic error response.

    Logs the full exception for debugging but returns a safe error message.
    """
    logger.exception(
        f"Unhandled exception: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An internal server error occurred"}
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Call this function during app initialization to enable consistent
    error handling across all endpoints.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(ClinicServiceError, clinic_service_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(PyMongoError, database_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
