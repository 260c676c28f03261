"""Bearer-token identity gate.

Every authenticated route resolves its caller here. Failures are raised as
``AuthError`` carrying one of four codes so clients can tell a missing token
from an expired one, a malformed one, or one whose user no longer exists.
"""

from __future__ import annotations

import logging
from enum import Enum

import jwt
from sqlalchemy.ext.asyncio import AsyncSession

from core import decode_token
from core.security import ACCESS_TOKEN_TYPE
from models import User

logger = logging.getLogger(__name__)


class AuthErrorCode(str, Enum):
    MISSING = "MISSING"
    EXPIRED = "EXPIRED"
    INVALID = "INVALID"
    NOT_FOUND = "NOT_FOUND"


AUTH_ERROR_MESSAGES: dict[AuthErrorCode, str] = {
    AuthErrorCode.MISSING: "Authentication token is required",
    AuthErrorCode.EXPIRED: "Authentication token has expired",
    AuthErrorCode.INVALID: "Authentication token is invalid",
    AuthErrorCode.NOT_FOUND: "User for this token no longer exists",
}


class AuthError(Exception):
    """Raised when a request cannot be attributed to an existing user."""

    def __init__(self, code: AuthErrorCode) -> None:
        self.code = code
        self.message = AUTH_ERROR_MESSAGES[code]
        super().__init__(self.message)

    def to_body(self) -> dict[str, object]:
        return {"success": False, "message": self.message, "error": self.code.value}


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = value.strip()
    return token or None


async def resolve_bearer(session: AsyncSession, authorization: str | None) -> User:
    """Resolve the caller of a request from its Authorization header."""
    token = extract_bearer_token(authorization)
    if token is None:
        raise AuthError(AuthErrorCode.MISSING)

    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise AuthError(AuthErrorCode.EXPIRED) from exc
    except ValueError as exc:
        raise AuthError(AuthErrorCode.INVALID) from exc

    subject = payload.get("sub")
    if payload.get("type") != ACCESS_TOKEN_TYPE or not isinstance(subject, str) or not subject:
        raise AuthError(AuthErrorCode.INVALID)

    user = await session.get(User, subject)
    if user is None:
        logger.info("Token subject not found", extra={"user_id": subject})
        raise AuthError(AuthErrorCode.NOT_FOUND)
    return user
