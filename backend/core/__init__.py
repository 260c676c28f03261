"""Core configuration and security primitives."""

from .config import settings
from .security import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)

__all__ = [
    "settings",
    "create_access_token",
    "decode_token",
    "hash_password",
    "verify_password",
]
