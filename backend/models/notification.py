"""Persisted notification model."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, String, Text, false
from sqlmodel import Field, SQLModel

from ._columns import created_at_column, new_id, utcnow

NotificationKind = Literal["like", "comment"]


class Notification(SQLModel, table=True):
    """One delivered event for ``recipient_id``.

    ``post_id`` always names the post the event concerns. ``comment_id`` is
    set when the subject is a comment (comment likes) or when the event is
    a new comment.
    """

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_recipient_created_at", "recipient_id", "created_at"),
        Index("ix_notifications_recipient_read", "recipient_id", "read"),
        CheckConstraint("kind IN ('like', 'comment')", name="ck_notifications_kind"),
    )

    id: str = Field(default_factory=new_id, sa_column=Column(String(36), primary_key=True))
    recipient_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        )
    )
    sender_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    post_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("posts.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    comment_id: str | None = Field(
        default=None,
        sa_column=Column(
            String(36),
            ForeignKey("comments.id", ondelete="CASCADE"),
            nullable=True,
            index=True,
        ),
    )
    kind: str = Field(sa_column=Column(String(16), nullable=False))
    content: str = Field(sa_column=Column(Text, nullable=False))
    read: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, server_default=false()),
    )
    created_at: datetime = Field(default_factory=utcnow, sa_column=created_at_column())
