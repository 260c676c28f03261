"""Like membership models.

Each row is one member of an entity's ``likes`` set; the composite primary
key keeps a user in the set at most once.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, String
from sqlmodel import Field, SQLModel

from ._columns import created_at_column, utcnow


class PostLike(SQLModel, table=True):
    """Tracks which users liked which posts."""

    __tablename__ = "post_likes"
    __table_args__ = (
        Index("ix_post_likes_user_id", "user_id"),
    )

    post_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("posts.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    user_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    created_at: datetime = Field(default_factory=utcnow, sa_column=created_at_column())


class CommentLike(SQLModel, table=True):
    """Tracks which users liked which comments."""

    __tablename__ = "comment_likes"
    __table_args__ = (
        Index("ix_comment_likes_user_id", "user_id"),
    )

    comment_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("comments.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    user_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    created_at: datetime = Field(default_factory=utcnow, sa_column=created_at_column())
