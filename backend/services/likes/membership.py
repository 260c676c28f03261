"""Atomic set operations on like membership tables.

A likeable entity's ``likes`` set lives in its membership table, one row per
member. Every mutation here is a single statement keyed by
``(entity_id, user_id)``, so concurrent toggles never read-modify-write the
set client side.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal, cast

from sqlalchemy import Table, delete, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from models import CommentLike, PostLike

LikeableKindName = Literal["post", "comment"]


@dataclass(frozen=True)
class LikeableKind:
    """Binds an entity type to the table holding its likes set."""

    name: LikeableKindName
    label: str
    table: Table
    entity_column: str

    def entity_id_column(self) -> Any:
        return self.table.c[self.entity_column]

    def user_id_column(self) -> Any:
        return self.table.c.user_id


POST_LIKES = LikeableKind(
    name="post",
    label="Post",
    table=cast(Any, PostLike).__table__,
    entity_column="post_id",
)
COMMENT_LIKES = LikeableKind(
    name="comment",
    label="Comment",
    table=cast(Any, CommentLike).__table__,
    entity_column="comment_id",
)


def _insert_ignoring_duplicates(session: AsyncSession, kind: LikeableKind) -> Any:
    dialect_name = session.get_bind().dialect.name
    if dialect_name == "postgresql":
        return postgresql_insert(kind.table).on_conflict_do_nothing()
    if dialect_name == "sqlite":
        return sqlite_insert(kind.table).on_conflict_do_nothing()
    raise RuntimeError(f"Unsupported database dialect for like toggles: {dialect_name}")


async def is_member(
    session: AsyncSession,
    kind: LikeableKind,
    entity_id: str,
    user_id: str,
) -> bool:
    result = await session.execute(
        select(kind.user_id_column())
        .where(
            kind.entity_id_column() == entity_id,
            kind.user_id_column() == user_id,
        )
        .limit(1)
    )
    return result.first() is not None


async def add_member(
    session: AsyncSession,
    kind: LikeableKind,
    entity_id: str,
    user_id: str,
) -> bool:
    """Add ``user_id`` to the set.

    Returns True only when this statement inserted the row, i.e. the user was
    absent before and is present after. Adding an existing member is a no-op
    that returns False.
    """
    stmt = _insert_ignoring_duplicates(session, kind).values(
        {
            kind.entity_column: entity_id,
            "user_id": user_id,
            "created_at": datetime.now(timezone.utc),
        }
    )
    result = await session.execute(stmt)
    return int(cast(Any, result).rowcount or 0) == 1


async def remove_member(
    session: AsyncSession,
    kind: LikeableKind,
    entity_id: str,
    user_id: str,
) -> bool:
    """Remove ``user_id`` from the set; True when a row was deleted."""
    result = await session.execute(
        delete(kind.table).where(
            kind.entity_id_column() == entity_id,
            kind.user_id_column() == user_id,
        )
    )
    return int(cast(Any, result).rowcount or 0) > 0


async def list_members(
    session: AsyncSession,
    kind: LikeableKind,
    entity_ids: Sequence[str],
) -> dict[str, list[str]]:
    """Return the likes set of each entity, oldest like first."""
    if not entity_ids:
        return {}

    entity_column = kind.entity_id_column()
    user_column = kind.user_id_column()
    result = await session.execute(
        select(entity_column, user_column)
        .where(entity_column.in_(list(entity_ids)))
        .order_by(kind.table.c.created_at, user_column)
    )
    members: dict[str, list[str]] = {entity_id: [] for entity_id in entity_ids}
    for entity_id, user_id in result.all():
        members[entity_id].append(user_id)
    return members


async def delete_all_members(
    session: AsyncSession,
    kind: LikeableKind,
    entity_ids: Sequence[str],
) -> int:
    """Discard the whole likes set of each entity (entity deletion)."""
    if not entity_ids:
        return 0
    result = await session.execute(
        delete(kind.table).where(kind.entity_id_column().in_(list(entity_ids)))
    )
    return int(cast(Any, result).rowcount or 0)


async def delete_user_memberships(
    session: AsyncSession,
    kind: LikeableKind,
    user_id: str,
) -> int:
    result = await session.execute(
        delete(kind.table).where(kind.user_id_column() == user_id)
    )
    return int(cast(Any, result).rowcount or 0)
