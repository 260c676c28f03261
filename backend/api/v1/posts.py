"""Post CRUD, search, trending and like endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, cast

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from api.deps import get_current_user, get_db, get_like_debouncer
from db.expressions import desc, eq, ilike, like_pattern
from models import Post, PostLike, User
from models._columns import utcnow
from services.cascade import delete_post_cascade
from services.likes import LikeTarget, ToggleDebouncer, toggle_like
from services.ownership import require_owner, require_post
from services.persistence import commit_or_500
from .pagination import LimitQuery, PageQuery, page_offset, resolve_limit, total_pages
from .post_views import (
    PostLikeResponse,
    PostResponse,
    build_post_like_response,
    build_post_response,
    build_post_responses,
)
from .users import UserPublic, search_users_query

router = APIRouter(prefix="/posts", tags=["posts"])
MAX_POST_CONTENT_LENGTH = 5000
SEARCH_RESULT_LIMIT = 10
TRENDING_LIMIT = 10


class PostCreateRequest(BaseModel):
    content: str = Field(min_length=1, max_length=MAX_POST_CONTENT_LENGTH)
    image: str | None = Field(default=None, max_length=2048)


class PostUpdateRequest(BaseModel):
    content: str | None = Field(default=None, max_length=MAX_POST_CONTENT_LENGTH)
    image: str | None = Field(default=None, max_length=2048)


class PostPage(BaseModel):
    posts: list[PostResponse]
    current_page: int
    total_pages: int
    total_posts: int


class SearchResponse(BaseModel):
    posts: list[PostResponse]
    users: list[UserPublic]


class TrendingResponse(BaseModel):
    trending_posts: list[PostResponse]
    last_updated: datetime


class MessageResponse(BaseModel):
    message: str


def _newest_first() -> tuple[Any, Any]:
    return desc(cast(Any, Post.created_at)), desc(cast(Any, Post.id))


@router.post("", status_code=status.HTTP_201_CREATED, response_model=PostResponse)
async def create_post(
    payload: PostCreateRequest,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PostResponse:
    post = Post(
        author_id=current_user.id,
        content=payload.content,
        image=payload.image or None,
    )
    session.add(post)
    await commit_or_500(session, detail="Failed to create post", post_id=post.id)
    return PostResponse.from_post(post, current_user, [])


@router.get("", response_model=PostPage)
async def list_posts(
    page: PageQuery = 1,
    limit: LimitQuery = None,
    session: AsyncSession = Depends(get_db),
) -> PostPage:
    page_size = resolve_limit(limit)
    post_id_column = cast(ColumnElement[str], Post.id)
    total_result = await session.execute(select(func.count(post_id_column)))
    total = int(total_result.scalar_one() or 0)

    result = await session.execute(
        select(Post)
        .order_by(*_newest_first())
        .offset(page_offset(page, page_size))
        .limit(page_size)
    )
    return PostPage(
        posts=await build_post_responses(session, result.scalars().all()),
        current_page=page,
        total_pages=total_pages(total, page_size),
        total_posts=total,
    )


@router.get("/search", response_model=SearchResponse)
async def search(
    query: str | None = Query(default=None),
    session: AsyncSession = Depends(get_db),
) -> SearchResponse:
    term = (query or "").strip()
    if not term:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Search query is required",
        )

    post_result = await session.execute(
        select(Post)
        .where(ilike(Post.content, like_pattern(term)))
        .order_by(*_newest_first())
        .limit(SEARCH_RESULT_LIMIT)
    )
    user_result = await session.execute(search_users_query(term, limit=SEARCH_RESULT_LIMIT))
    return SearchResponse(
        posts=await build_post_responses(
            session, post_result.scalars().all(), include_comments=False
        ),
        users=[UserPublic.model_validate(user) for user in user_result.scalars().all()],
    )


@router.get("/trending", response_model=TrendingResponse)
async def trending(session: AsyncSession = Depends(get_db)) -> TrendingResponse:
    """Top posts by like count; ties go to the newer post."""
    like_count = cast(Any, func.count(cast(ColumnElement[str], PostLike.user_id)))
    result = await session.execute(
        select(cast(Any, Post), like_count)
        .outerjoin(PostLike, eq(PostLike.post_id, Post.id))
        .group_by(cast(Any, Post.id))
        .order_by(like_count.desc(), *_newest_first())
        .limit(TRENDING_LIMIT)
    )
    posts = [row[0] for row in result.all()]
    return TrendingResponse(
        trending_posts=await build_post_responses(session, posts),
        last_updated=datetime.now(timezone.utc),
    )


@router.get("/user/{user_id}", response_model=list[PostResponse])
async def list_user_posts(
    user_id: str,
    session: AsyncSession = Depends(get_db),
) -> list[PostResponse]:
    result = await session.execute(
        select(Post).where(eq(Post.author_id, user_id)).order_by(*_newest_first())
    )
    return await build_post_responses(session, result.scalars().all())


@router.put("/like/{post_id}", response_model=PostLikeResponse)
async def toggle_post_like(
    post_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    debouncer: ToggleDebouncer | None = Depends(get_like_debouncer),
) -> PostLikeResponse:
    post = await require_post(session, post_id)
    outcome = await toggle_like(
        session,
        LikeTarget.for_post(post),
        current_user,
        debouncer=debouncer,
    )
    return await build_post_like_response(session, post, outcome)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str,
    session: AsyncSession = Depends(get_db),
) -> PostResponse:
    post = await require_post(session, post_id)
    return await build_post_response(session, post)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    payload: PostUpdateRequest,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PostResponse:
    post = await require_post(session, post_id)
    require_owner(post.author_id, current_user)

    if payload.content:
        post.content = payload.content
    if payload.image:
        post.image = payload.image
    post.updated_at = utcnow()
    session.add(post)
    await commit_or_500(session, detail="Failed to update post", post_id=post_id)
    return await build_post_response(session, post)


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    post = await require_post(session, post_id)
    require_owner(post.author_id, current_user)

    await delete_post_cascade(session, post.id)
    await commit_or_500(session, detail="Failed to delete post", post_id=post_id)
    return MessageResponse(message="Post removed")
