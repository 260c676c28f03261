"""Authentication domain services."""

from .identity_gate import (
    AUTH_ERROR_MESSAGES,
    AuthError,
    AuthErrorCode,
    extract_bearer_token,
    resolve_bearer,
)
from .identity_resolution import (
    normalize_email,
    registration_conflict_exists,
    resolve_login_user,
)

__all__ = [
    "AUTH_ERROR_MESSAGES",
    "AuthError",
    "AuthErrorCode",
    "extract_bearer_token",
    "resolve_bearer",
    "normalize_email",
    "registration_conflict_exists",
    "resolve_login_user",
]
