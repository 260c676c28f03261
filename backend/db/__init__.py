"""Database helpers."""

from .errors import is_foreign_key_violation, is_unique_violation
from .session import (
    AsyncSessionMaker,
    async_engine,
    dispose_engine,
    enable_sqlite_foreign_keys,
    get_session,
)

__all__ = [
    "AsyncSessionMaker",
    "async_engine",
    "dispose_engine",
    "enable_sqlite_foreign_keys",
    "get_session",
    "is_foreign_key_violation",
    "is_unique_violation",
]
