"""
Authentication module for Clinic Service API.

Provides bearer-token (JWT) authentication and the role checks used by
routers. A token's ``sub`` claim is the caller's record id and its
``role`` claim the caller's role.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import jwt
from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.config import settings
from core.datetime_utils import utc_now
from core.exceptions import AuthenticationError, AuthorizationError
from models.resource import ADMIN_ROLE, ROLES

logger = logging.getLogger(__name__)

# Create the bearer token security scheme
bearer_scheme = HTTPBearer(
    auto_error=False,  # We'll handle the error ourselves for consistent responses
    description="Access token. Send it as 'Authorization: Bearer <token>'.",
)


@dataclass(frozen=True)
class Caller:
    """Identity of the authenticated caller."""

    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def create_access_token(subject: str, role: str, expires_minutes: Optional[int] = None) -> str:
    """
    Issue a signed access token.

    Args:
        subject: Record id of the token holder.
        role: Role granted to the holder.
        expires_minutes: Lifetime; defaults to the configured expiration.
    """
    now = utc_now()
    lifetime = expires_minutes if expires_minutes is not None else settings.clinic_svc_jwt_expiration_minutes
    payload = {
        "sub": subject,
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=lifetime),
    }
    return jwt.encode(payload, settings.clinic_svc_jwt_secret, algorithm=settings.clinic_svc_jwt_algorithm)


async def get_current_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
) -> Caller:
    """
    Resolve the caller from the Authorization header.

    Raises:
        AuthenticationError: 401 if the token is missing, invalid or expired.
    """
    if credentials is None:
        logger.warning("API request without bearer token")
        raise AuthenticationError("Missing bearer token")

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.clinic_svc_jwt_secret,
            algorithms=[settings.clinic_svc_jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        logger.warning("API request with expired token")
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        logger.warning("API request with invalid token")
        raise AuthenticationError("Invalid token")

    subject = payload.get("sub")
    role = payload.get("role")
    if not subject or role not in ROLES:
        logger.warning("API request with incomplete token claims")
        raise AuthenticationError("Invalid token")

    return Caller(id=str(subject), role=role)


async def require_admin(caller: Caller = Depends(get_current_caller)) -> Caller:
    """
    Allow admins only.

    Raises:
        AuthorizationError: 403 for non-admin callers.
    """
    if not caller.is_admin:
        raise AuthorizationError("Only admins can access this resource")
    return caller


async def require_self_or_admin(
    request: Request,
    caller: Caller = Depends(get_current_caller),
) -> Caller:
    """
    Allow admins, or callers addressing their own record.

    The record id is read from the route's ``record_id`` path parameter.

    Raises:
        AuthorizationError: 403 when a non-admin addresses another record.
    """
    record_id = request.path_params.get("record_id")
    if not caller.is_admin and record_id != caller.id:
        raise AuthorizationError("Only the record owner or admins can access this resource")
    return caller
