"""Identity normalization and login-user resolution helpers."""

from __future__ import annotations

from typing import Any, cast

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from core import verify_password
from db.expressions import eq
from models import User


def normalize_email(value: str) -> str:
    return value.strip().lower()


def _lowered_email() -> Any:
    return func.lower(cast(Any, User.email))


async def registration_conflict_exists(
    session: AsyncSession,
    *,
    username: str,
    normalized_email: str,
) -> bool:
    existing = await session.execute(
        select(User)
        .where(
            or_(
                eq(User.username, username),
                eq(_lowered_email(), normalized_email),
            )
        )
        .limit(1)
    )
    return existing.scalar_one_or_none() is not None


async def resolve_login_user(
    session: AsyncSession,
    *,
    identifier: str,
    password: str,
) -> User | None:
    """Find the user named by ``identifier`` and check their password.

    Identifiers containing ``@`` are matched case-insensitively against
    emails, everything else exactly against usernames.
    """
    identifier = identifier.strip()
    if not identifier:
        return None

    if "@" in identifier:
        condition = eq(_lowered_email(), normalize_email(identifier))
    else:
        condition = eq(User.username, identifier)

    result = await session.execute(select(User).where(condition).limit(1))
    user = result.scalar_one_or_none()
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user
