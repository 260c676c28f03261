"""Shared post/comment view models and query helpers."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Literal, cast

from pydantic import BaseModel, ConfigDict
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.expressions import desc, in_
from models import Comment, Post, User
from services.likes import COMMENT_LIKES, POST_LIKES, ToggleResult, list_members


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    profile_picture: str | None = None


class CommentResponse(BaseModel):
    id: str
    post_id: str
    content: str
    user: UserSummary | None = None
    likes: list[str] = []
    like_count: int = 0
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_comment(
        cls,
        comment: Comment,
        author: User | None,
        likes: list[str],
    ) -> "CommentResponse":
        return cls(
            id=comment.id,
            post_id=comment.post_id,
            content=comment.content,
            user=UserSummary.model_validate(author) if author is not None else None,
            likes=likes,
            like_count=len(likes),
            created_at=comment.created_at,
            updated_at=comment.updated_at,
        )


class PostResponse(BaseModel):
    id: str
    content: str
    image: str | None = None
    user: UserSummary | None = None
    likes: list[str] = []
    like_count: int = 0
    comments: list[CommentResponse] = []
    comment_count: int = 0
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_post(
        cls,
        post: Post,
        author: User | None,
        likes: list[str],
        comments: list[CommentResponse] | None = None,
    ) -> "PostResponse":
        comment_items = comments or []
        return cls(
            id=post.id,
            content=post.content,
            image=post.image,
            user=UserSummary.model_validate(author) if author is not None else None,
            likes=likes,
            like_count=len(likes),
            comments=comment_items,
            comment_count=len(comment_items),
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class PostLikeResponse(PostResponse):
    action: Literal["liked", "unliked"]


class CommentLikeResponse(CommentResponse):
    action: Literal["liked", "unliked"]


async def load_users(session: AsyncSession, user_ids: Sequence[str]) -> dict[str, User]:
    unique_ids = list(dict.fromkeys(user_ids))
    if not unique_ids:
        return {}
    result = await session.execute(select(User).where(in_(User.id, unique_ids)))
    return {user.id: user for user in result.scalars().all()}


async def build_comment_responses(
    session: AsyncSession,
    comments: Sequence[Comment],
) -> list[CommentResponse]:
    if not comments:
        return []
    authors = await load_users(session, [comment.author_id for comment in comments])
    likes = await list_members(session, COMMENT_LIKES, [comment.id for comment in comments])
    return [
        CommentResponse.from_comment(
            comment,
            authors.get(comment.author_id),
            likes.get(comment.id, []),
        )
        for comment in comments
    ]


async def build_post_responses(
    session: AsyncSession,
    posts: Sequence[Post],
    *,
    include_comments: bool = True,
) -> list[PostResponse]:
    """Hydrate posts with their author summary, likes and (optionally) comments."""
    if not posts:
        return []
    post_ids = [post.id for post in posts]
    authors = await load_users(session, [post.author_id for post in posts])
    likes = await list_members(session, POST_LIKES, post_ids)

    comments_by_post: dict[str, list[CommentResponse]] = {}
    if include_comments:
        comment_result = await session.execute(
            select(Comment)
            .where(in_(Comment.post_id, post_ids))
            .order_by(desc(cast(Any, Comment.created_at)), desc(cast(Any, Comment.id)))
        )
        for item in await build_comment_responses(session, comment_result.scalars().all()):
            comments_by_post.setdefault(item.post_id, []).append(item)

    return [
        PostResponse.from_post(
            post,
            authors.get(post.author_id),
            likes.get(post.id, []),
            comments_by_post.get(post.id),
        )
        for post in posts
    ]


async def build_post_response(session: AsyncSession, post: Post) -> PostResponse:
    responses = await build_post_responses(session, [post])
    return responses[0]


async def build_post_like_response(
    session: AsyncSession,
    post: Post,
    result: ToggleResult,
) -> PostLikeResponse:
    """Combine a toggle outcome with the post's owner summary."""
    owner = await session.get(User, post.author_id)
    view = PostResponse.from_post(post, owner, result.likes)
    return PostLikeResponse(**view.model_dump(), action=result.action)


async def build_comment_like_response(
    session: AsyncSession,
    comment: Comment,
    result: ToggleResult,
) -> CommentLikeResponse:
    owner = await session.get(User, comment.author_id)
    view = CommentResponse.from_comment(comment, owner, result.likes)
    return CommentLikeResponse(**view.model_dump(), action=result.action)
