"""Notification domain services."""

from .content import (
    PREVIEW_LENGTH,
    TRUNCATION_MARKER,
    preview,
    render_comment_content,
    render_like_content,
)
from .emit import build_comment_notification, build_like_notification
from .inbox import (
    count_unread,
    list_notifications,
    mark_all_notifications_read,
    mark_notification_read,
)
from .schemas import (
    MarkAllReadResponse,
    NotificationItem,
    NotificationPage,
    NotificationPostPreview,
    NotificationSender,
)

__all__ = [
    "PREVIEW_LENGTH",
    "TRUNCATION_MARKER",
    "preview",
    "render_like_content",
    "render_comment_content",
    "build_like_notification",
    "build_comment_notification",
    "count_unread",
    "list_notifications",
    "mark_notification_read",
    "mark_all_notifications_read",
    "MarkAllReadResponse",
    "NotificationItem",
    "NotificationPage",
    "NotificationPostPreview",
    "NotificationSender",
]
