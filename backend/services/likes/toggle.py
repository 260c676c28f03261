"""Like/unlike toggle with rising-edge notification."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from db.errors import is_foreign_key_violation
from models import Comment, Notification, Post, User
from services.notifications import build_like_notification
from .debounce import ToggleDebouncer
from .membership import (
    COMMENT_LIKES,
    POST_LIKES,
    LikeableKind,
    add_member,
    is_member,
    list_members,
    remove_member,
)

logger = logging.getLogger(__name__)

ToggleAction = Literal["liked", "unliked"]


@dataclass(frozen=True)
class LikeTarget:
    """The entity being toggled, as loaded by the caller."""

    kind: LikeableKind
    entity_id: str
    owner_id: str
    post_id: str
    content: str

    @classmethod
    def for_post(cls, post: Post) -> "LikeTarget":
        return cls(
            kind=POST_LIKES,
            entity_id=post.id,
            owner_id=post.author_id,
            post_id=post.id,
            content=post.content,
        )

    @classmethod
    def for_comment(cls, comment: Comment) -> "LikeTarget":
        return cls(
            kind=COMMENT_LIKES,
            entity_id=comment.id,
            owner_id=comment.author_id,
            post_id=comment.post_id,
            content=comment.content,
        )

    @property
    def comment_id(self) -> str | None:
        return self.entity_id if self.kind is COMMENT_LIKES else None


@dataclass(frozen=True)
class ToggleResult:
    action: ToggleAction
    likes: list[str]
    notification: Notification | None = None


def _not_found(target: LikeTarget) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{target.kind.label} not found",
    )


async def toggle_like(
    session: AsyncSession,
    target: LikeTarget,
    actor: User,
    *,
    debouncer: ToggleDebouncer | None = None,
) -> ToggleResult:
    """Flip ``actor``'s membership in the target's likes set.

    The current membership picks the statement (add or remove). Whether a
    notification is emitted depends only on the outcome of that statement:
    the owner is notified when this call inserted the membership row and the
    actor is not the owner. Two racing "like" calls from the same user thus
    both answer ``liked`` but only one of them notifies.

    The returned likes set is read inside the same transaction as the
    mutation, after it was applied.
    """
    actor_id = actor.id
    if debouncer is not None and not await debouncer.allow(
        actor_id, target.kind.name, target.entity_id
    ):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Like toggled too quickly",
        )

    notification: Notification | None = None
    try:
        if await is_member(session, target.kind, target.entity_id, actor_id):
            action: ToggleAction = "unliked"
            await remove_member(session, target.kind, target.entity_id, actor_id)
        else:
            action = "liked"
            inserted = await add_member(session, target.kind, target.entity_id, actor_id)
            if inserted:
                notification = build_like_notification(
                    recipient_id=target.owner_id,
                    sender=actor,
                    post_id=target.post_id,
                    comment_id=target.comment_id,
                    subject_content=target.content,
                )
                if notification is not None:
                    session.add(notification)

        members = await list_members(session, target.kind, [target.entity_id])
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if not is_foreign_key_violation(exc):
            raise
        # The entity was deleted between lookup and toggle.
        raise _not_found(target) from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception(
            "Like toggle failed",
            extra={
                "entity_kind": target.kind.name,
                "entity_id": target.entity_id,
                "user_id": actor_id,
            },
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error",
        ) from exc

    likes = members.get(target.entity_id, [])
    logger.info(
        "Like toggled",
        extra={
            "entity_kind": target.kind.name,
            "entity_id": target.entity_id,
            "user_id": actor_id,
            "action": action,
            "likes_count": len(likes),
            "notified": notification is not None,
        },
    )
    return ToggleResult(action=action, likes=likes, notification=notification)
