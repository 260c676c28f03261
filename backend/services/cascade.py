"""Dependent-row cleanup for entity deletion.

Each helper only issues statements; the caller commits, so an entity and
everything hanging off it disappear in one transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, cast

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from db.expressions import eq, in_
from models import Comment, Follow, Notification, Post, User
from services.likes import (
    COMMENT_LIKES,
    POST_LIKES,
    delete_all_members,
    delete_user_memberships,
)

logger = logging.getLogger(__name__)


async def _delete_comments(session: AsyncSession, comment_ids: Sequence[str]) -> None:
    if not comment_ids:
        return
    ids = list(comment_ids)
    await session.execute(delete(Notification).where(in_(Notification.comment_id, ids)))
    await delete_all_members(session, COMMENT_LIKES, ids)
    await session.execute(delete(Comment).where(in_(Comment.id, ids)))


async def _delete_posts(session: AsyncSession, post_ids: Sequence[str]) -> None:
    if not post_ids:
        return
    ids = list(post_ids)
    comment_id_column = cast(ColumnElement[str], Comment.id)
    comment_result = await session.execute(
        select(comment_id_column).where(in_(Comment.post_id, ids))
    )
    await _delete_comments(session, [row[0] for row in comment_result.all()])
    await session.execute(delete(Notification).where(in_(Notification.post_id, ids)))
    await delete_all_members(session, POST_LIKES, ids)
    await session.execute(delete(Post).where(in_(Post.id, ids)))


async def delete_comment_cascade(session: AsyncSession, comment_id: str) -> None:
    """Delete a comment with its likes and the notifications about it."""
    await _delete_comments(session, [comment_id])


async def delete_post_cascade(session: AsyncSession, post_id: str) -> None:
    """Delete a post with its comments, likes and notifications."""
    await _delete_posts(session, [post_id])


async def delete_user_cascade(session: AsyncSession, user_id: str) -> None:
    """Delete a user and every row that references them."""
    post_id_column = cast(ColumnElement[str], Post.id)
    post_result = await session.execute(
        select(post_id_column).where(eq(Post.author_id, user_id))
    )
    post_ids = [row[0] for row in post_result.all()]
    await _delete_posts(session, post_ids)

    comment_id_column = cast(ColumnElement[str], Comment.id)
    comment_result = await session.execute(
        select(comment_id_column).where(eq(Comment.author_id, user_id))
    )
    await _delete_comments(session, [row[0] for row in comment_result.all()])

    await session.execute(
        delete(Notification).where(
            or_(
                eq(Notification.sender_id, user_id),
                eq(Notification.recipient_id, user_id),
            )
        )
    )
    await delete_user_memberships(session, POST_LIKES, user_id)
    await delete_user_memberships(session, COMMENT_LIKES, user_id)
    await session.execute(
        delete(Follow).where(
            or_(
                eq(Follow.follower_id, user_id),
                eq(Follow.followee_id, user_id),
            )
        )
    )
    await session.execute(delete(User).where(eq(User.id, user_id)))
    logger.info(
        "Deleted user and dependent rows",
        extra={"user_id": user_id, "deleted_posts": len(post_ids)},
    )
