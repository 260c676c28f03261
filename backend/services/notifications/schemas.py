"""Notification API payload schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel


class NotificationSender(BaseModel):
    id: str
    username: str
    profile_picture: str | None = None


class NotificationPostPreview(BaseModel):
    id: str
    content: str


class NotificationItem(BaseModel):
    id: str
    recipient_id: str
    kind: Literal["like", "comment"]
    content: str
    read: bool
    created_at: datetime
    comment_id: str | None = None
    sender: NotificationSender | None = None
    post: NotificationPostPreview | None = None


class NotificationPage(BaseModel):
    notifications: list[NotificationItem]
    current_page: int
    total_pages: int
    total_notifications: int
    unread_count: int


class MarkAllReadResponse(BaseModel):
    message: str
    updated_count: int
