"""Follower relationship model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, String
from sqlmodel import Field, SQLModel

from ._columns import created_at_column, utcnow


class Follow(SQLModel, table=True):
    """Directed edge: ``follower_id`` follows ``followee_id``."""

    __tablename__ = "follows"
    __table_args__ = (
        Index("ix_follows_followee_created_at", "followee_id", "created_at"),
    )

    follower_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    followee_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    created_at: datetime = Field(default_factory=utcnow, sa_column=created_at_column())
