"""Shared FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from db import get_session
from models import User
from services.auth import resolve_bearer
from services.likes import ToggleDebouncer, get_toggle_debouncer


async def get_db() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


async def get_current_user(
    authorization: str | None = Header(default=None),
    session: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the caller from the bearer token or raise ``AuthError``."""
    return await resolve_bearer(session, authorization)


def get_like_debouncer() -> ToggleDebouncer | None:
    return get_toggle_debouncer()
