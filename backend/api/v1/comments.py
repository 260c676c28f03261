"""Comment endpoints."""

from __future__ import annotations

import logging
from typing import Any, cast

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db, get_like_debouncer
from db.errors import is_foreign_key_violation
from db.expressions import desc, eq
from models import Comment, User
from models._columns import utcnow
from services.cascade import delete_comment_cascade
from services.likes import LikeTarget, ToggleDebouncer, toggle_like
from services.notifications import build_comment_notification
from services.ownership import require_comment, require_owner, require_post
from services.persistence import commit_or_500
from .post_views import (
    CommentLikeResponse,
    CommentResponse,
    build_comment_like_response,
    build_comment_responses,
)

router = APIRouter(prefix="/comments", tags=["comments"])
logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 1000


class CommentCreateRequest(BaseModel):
    content: str = Field(min_length=1, max_length=MAX_COMMENT_LENGTH)


class CommentUpdateRequest(BaseModel):
    content: str = Field(min_length=1, max_length=MAX_COMMENT_LENGTH)


class MessageResponse(BaseModel):
    message: str


@router.post(
    "/{post_id}",
    status_code=status.HTTP_201_CREATED,
    response_model=CommentResponse,
)
async def create_comment(
    post_id: str,
    payload: CommentCreateRequest,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CommentResponse:
    post = await require_post(session, post_id)
    comment = Comment(
        post_id=post.id,
        author_id=current_user.id,
        content=payload.content,
    )
    session.add(comment)
    # The post author hears about the comment in the same transaction.
    notification = build_comment_notification(post=post, comment=comment, sender=current_user)
    if notification is not None:
        session.add(notification)

    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_foreign_key_violation(exc):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Post not found",
            ) from exc
        raise
    except Exception as exc:
        await session.rollback()
        logger.exception("Failed to create comment", extra={"post_id": post_id})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error",
        ) from exc

    return CommentResponse.from_comment(comment, current_user, [])


@router.get("/post/{post_id}", response_model=list[CommentResponse])
async def list_post_comments(
    post_id: str,
    session: AsyncSession = Depends(get_db),
) -> list[CommentResponse]:
    result = await session.execute(
        select(Comment)
        .where(eq(Comment.post_id, post_id))
        .order_by(desc(cast(Any, Comment.created_at)), desc(cast(Any, Comment.id)))
    )
    return await build_comment_responses(session, result.scalars().all())


@router.put("/like/{comment_id}", response_model=CommentLikeResponse)
async def toggle_comment_like(
    comment_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    debouncer: ToggleDebouncer | None = Depends(get_like_debouncer),
) -> CommentLikeResponse:
    comment = await require_comment(session, comment_id)
    outcome = await toggle_like(
        session,
        LikeTarget.for_comment(comment),
        current_user,
        debouncer=debouncer,
    )
    return await build_comment_like_response(session, comment, outcome)


@router.put("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: str,
    payload: CommentUpdateRequest,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CommentResponse:
    comment = await require_comment(session, comment_id)
    require_owner(comment.author_id, current_user)

    comment.content = payload.content
    comment.updated_at = utcnow()
    session.add(comment)
    await commit_or_500(session, detail="Failed to update comment", comment_id=comment_id)
    responses = await build_comment_responses(session, [comment])
    return responses[0]


@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    comment = await require_comment(session, comment_id)
    require_owner(comment.author_id, current_user)

    await delete_comment_cascade(session, comment.id)
    await commit_or_500(session, detail="Failed to delete comment", comment_id=comment_id)
    return MessageResponse(message="Comment removed")
