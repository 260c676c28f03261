"""Recipient-scoped notification reads and read-flag updates."""

from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import HTTPException, status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from db.expressions import desc, eq
from db.pagination import page_offset, total_pages
from models import Notification, Post, User

from .schemas import (
    NotificationItem,
    NotificationPage,
    NotificationPostPreview,
    NotificationSender,
)

logger = logging.getLogger(__name__)

NotificationRow = tuple[Notification, User | None, Post | None]


def _to_item(row: NotificationRow) -> NotificationItem:
    notification, sender, post = row
    return NotificationItem(
        id=notification.id,
        recipient_id=notification.recipient_id,
        kind=cast(Any, notification.kind),
        content=notification.content,
        read=notification.read,
        created_at=notification.created_at,
        comment_id=notification.comment_id,
        sender=(
            NotificationSender(
                id=sender.id,
                username=sender.username,
                profile_picture=sender.profile_picture,
            )
            if sender is not None
            else None
        ),
        post=(
            NotificationPostPreview(id=post.id, content=post.content)
            if post is not None
            else None
        ),
    )


def _notification_rows_query() -> Any:
    return (
        select(cast(Any, Notification), cast(Any, User), cast(Any, Post))
        .outerjoin(User, eq(User.id, Notification.sender_id))
        .outerjoin(Post, eq(Post.id, Notification.post_id))
    )


async def count_unread(session: AsyncSession, recipient_id: str) -> int:
    id_column = cast(ColumnElement[str], Notification.id)
    result = await session.execute(
        select(func.count(id_column)).where(
            eq(Notification.recipient_id, recipient_id),
            eq(Notification.read, False),
        )
    )
    return int(result.scalar_one() or 0)


async def list_notifications(
    session: AsyncSession,
    recipient_id: str,
    *,
    page: int,
    limit: int,
) -> NotificationPage:
    """Return one page of the recipient's notifications, newest first."""
    id_column = cast(ColumnElement[str], Notification.id)
    total_result = await session.execute(
        select(func.count(id_column)).where(eq(Notification.recipient_id, recipient_id))
    )
    total = int(total_result.scalar_one() or 0)

    result = await session.execute(
        _notification_rows_query()
        .where(eq(Notification.recipient_id, recipient_id))
        .order_by(
            desc(cast(Any, Notification.created_at)),
            desc(id_column),
        )
        .offset(page_offset(page, limit))
        .limit(limit)
    )
    items = [_to_item(cast(NotificationRow, tuple(row))) for row in result.all()]
    return NotificationPage(
        notifications=items,
        current_page=page,
        total_pages=total_pages(total, limit),
        total_notifications=total,
        unread_count=await count_unread(session, recipient_id),
    )


async def mark_notification_read(
    session: AsyncSession,
    notification_id: str,
    *,
    recipient_id: str,
) -> NotificationItem:
    """Set the read flag on one notification owned by ``recipient_id``."""
    notification = await session.get(Notification, notification_id)
    if notification is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notification not found",
        )
    if notification.recipient_id != recipient_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized",
        )

    if not notification.read:
        notification.read = True
        session.add(notification)
        try:
            await session.commit()
        except Exception as exc:
            await session.rollback()
            logger.exception(
                "Failed to mark notification read",
                extra={"notification_id": notification_id},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update notification",
            ) from exc

    result = await session.execute(
        _notification_rows_query().where(eq(Notification.id, notification_id)).limit(1)
    )
    row = result.one()
    return _to_item(cast(NotificationRow, tuple(row)))


async def mark_all_notifications_read(session: AsyncSession, recipient_id: str) -> int:
    """Mark every unread notification of ``recipient_id``; return rows changed."""
    try:
        result = await session.execute(
            update(Notification)
            .where(
                eq(Notification.recipient_id, recipient_id),
                eq(Notification.read, False),
            )
            .values(read=True)
        )
        await session.commit()
    except Exception as exc:
        await session.rollback()
        logger.exception(
            "Failed to mark notifications read",
            extra={"recipient_id": recipient_id},
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update notifications",
        ) from exc
    return int(cast(Any, result).rowcount or 0)
