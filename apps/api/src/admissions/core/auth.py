"""
Authentication and Authorization

Sessions and token issuance live outside this service. Here the bearer
token is only decoded into a CurrentUser; services decide what that user
may do via require_reviewer / require_admin.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from admissions.core.exceptions import AuthorizationError
from admissions.core.security import decode_token

logger = logging.getLogger(__name__)

# Optional bearer: public endpoints accept anonymous callers
security = HTTPBearer(
    auto_error=False,
    description="JWT Bearer token for authentication",
)

ADMIN_ROLES = frozenset({"ADMIN", "SUPER_ADMIN"})
REVIEWER_ROLES = ADMIN_ROLES | {"STAFF"}


@dataclass
class CurrentUser:
    """
    Authenticated caller, populated from JWT claims.

    Attributes:
        id: User's unique identifier
        email: User's email address
        role: One of STUDENT, STAFF, ADMIN, SUPER_ADMIN
        name: Display name (optional)
    """

    id: UUID
    email: str
    role: str
    name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_reviewer(self) -> bool:
        return self.role in REVIEWER_ROLES

    def __str__(self) -> str:
        return f"CurrentUser(id={self.id}, email={self.email}, role={self.role})"


def _unauthorized(error: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"error": error, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def user_from_token(token: str) -> CurrentUser:
    """
    Validate a JWT and build the CurrentUser from its claims.

    Raises:
        HTTPException 401: If the token is invalid, expired or malformed
    """
    payload = decode_token(token)

    if payload is None:
        logger.warning("Invalid or expired JWT token")
        raise _unauthorized("INVALID_TOKEN", "Invalid or expired authentication token.")

    if payload.get("type", "access") != "access":
        logger.warning(f"Invalid token type: {payload.get('type')}")
        raise _unauthorized("INVALID_TOKEN_TYPE", "This endpoint requires an access token.")

    try:
        subject = payload.get("sub")
        if not subject:
            raise ValueError("Missing 'sub' claim in token")

        return CurrentUser(
            id=UUID(subject),
            email=payload.get("email", ""),
            role=str(payload.get("role", "")).upper(),
            name=payload.get("name"),
        )
    except (ValueError, TypeError) as e:
        logger.warning(f"Invalid token claims: {e}")
        raise _unauthorized(
            "INVALID_TOKEN_CLAIMS", "Token contains invalid or missing claims."
        ) from e


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> CurrentUser | None:
    """
    FastAPI dependency returning the caller, or None for anonymous requests.

    A token that is present but invalid is still rejected with 401.
    """
    if not credentials:
        return None
    return user_from_token(credentials.credentials)


def require_reviewer(actor: CurrentUser | None) -> CurrentUser:
    """Allow staff and admins; raise AuthorizationError otherwise."""
    if actor is None or not actor.is_reviewer:
        logger.warning(f"Reviewer access denied for {actor or 'anonymous caller'}")
        raise AuthorizationError()
    return actor


def require_admin(actor: CurrentUser | None) -> CurrentUser:
    """Allow admins only; raise AuthorizationError otherwise."""
    if actor is None or not actor.is_admin:
        logger.warning(f"Admin access denied for {actor or 'anonymous caller'}")
        raise AuthorizationError()
    return actor


__all__ = [
    "ADMIN_ROLES",
    "REVIEWER_ROLES",
    "CurrentUser",
    "get_current_user",
    "require_admin",
    "require_reviewer",
    "user_from_token",
]
