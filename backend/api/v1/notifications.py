"""Notification inbox endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from models import User
from services.notifications import (
    MarkAllReadResponse,
    NotificationItem,
    NotificationPage,
    list_notifications,
    mark_all_notifications_read,
    mark_notification_read,
)
from .pagination import LimitQuery, PageQuery, resolve_limit

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationPage)
async def read_notifications(
    page: PageQuery = 1,
    limit: LimitQuery = None,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationPage:
    return await list_notifications(
        session,
        current_user.id,
        page=page,
        limit=resolve_limit(limit),
    )


@router.put("/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MarkAllReadResponse:
    updated = await mark_all_notifications_read(session, current_user.id)
    return MarkAllReadResponse(
        message="All notifications marked as read",
        updated_count=updated,
    )


@router.put("/{notification_id}/read", response_model=NotificationItem)
async def mark_read(
    notification_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> NotificationItem:
    return await mark_notification_read(
        session,
        notification_id,
        recipient_id=current_user.id,
    )
