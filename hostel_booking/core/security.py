"""
Bearer token verification.

Tokens are issued by the accounts service; this module only verifies them
and resolves the caller's identity.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from uuid import UUID

import jwt

from hostel_booking.config.settings import settings
from hostel_booking.core.exceptions import AuthenticationError
from hostel_booking.core.logging import get_logger
from hostel_booking.models.enums import ADMIN_ROLES, UserRole

logger = get_logger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated caller."""
    id: UUID
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return is_admin_role(self.role)


def is_admin_role(role: Union[UserRole, str, None]) -> bool:
    if role is None:
        return False
    try:
        return UserRole(role) in ADMIN_ROLES
    except ValueError:
        return False


def decode_access_token(
    token: str,
    secret_key: Optional[str] = None,
    algorithm: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Verify signature and expiry of ``token``.

    Raises:
        AuthenticationError: If the token is expired, malformed or unsigned
    """
    secret_key = secret_key if secret_key is not None else settings.JWT_SECRET_KEY
    algorithm = algorithm or settings.JWT_ALGORITHM
    if not secret_key:
        logger.error("JWT_SECRET_KEY is not configured; rejecting token")
        raise AuthenticationError("Unauthorized - Invalid or expired token")

    try:
        return jwt.decode(token, secret_key, algorithms=[algorithm])
    except jwt.ExpiredSignatureError:
        logger.warning("Token verification failed: token expired")
        raise AuthenticationError("Unauthorized - Invalid or expired token")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Token verification failed: {e}")
        raise AuthenticationError("Unauthorized - Invalid or expired token")


def subject_from_payload(payload: Dict[str, Any]) -> UUID:
    """User id carried by the token, under ``userId`` or ``sub``."""
    raw = payload.get("userId") or payload.get("sub")
    try:
        return UUID(str(raw))
    except (TypeError, ValueError):
        raise AuthenticationError("Unauthorized - Invalid or expired token")
