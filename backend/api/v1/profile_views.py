"""Profile view models shared by the auth and user routes."""

from __future__ import annotations

from typing import Any, cast

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from db.expressions import desc, eq
from models import Follow, Post, User
from .pagination import page_offset, total_pages
from .post_views import PostResponse, UserSummary, build_post_responses, load_users


class ProfileUser(BaseModel):
    id: str
    username: str
    email: str
    bio: str | None = None
    profile_picture: str | None = None
    followers: list[UserSummary] = []
    following: list[UserSummary] = []


class ProfileStats(BaseModel):
    posts_count: int
    followers_count: int
    following_count: int


class ProfileResponse(BaseModel):
    user: ProfileUser
    posts: list[PostResponse]
    stats: ProfileStats
    current_page: int
    total_pages: int
    total_posts: int


async def load_follow_summaries(
    session: AsyncSession,
    user_id: str,
) -> tuple[list[UserSummary], list[UserSummary]]:
    """Return ``(followers, following)`` summaries, oldest relationship first."""
    follower_column = cast(ColumnElement[str], Follow.follower_id)
    followee_column = cast(ColumnElement[str], Follow.followee_id)
    created_at_column = cast(Any, Follow.created_at)

    followers_result = await session.execute(
        select(follower_column)
        .where(eq(followee_column, user_id))
        .order_by(created_at_column.asc())
    )
    follower_ids = [row[0] for row in followers_result.all()]
    following_result = await session.execute(
        select(followee_column)
        .where(eq(follower_column, user_id))
        .order_by(created_at_column.asc())
    )
    following_ids = [row[0] for row in following_result.all()]

    users = await load_users(session, follower_ids + following_ids)
    followers = [UserSummary.model_validate(users[uid]) for uid in follower_ids if uid in users]
    following = [UserSummary.model_validate(users[uid]) for uid in following_ids if uid in users]
    return followers, following


async def build_profile_response(
    session: AsyncSession,
    user: User,
    *,
    page: int,
    limit: int,
) -> ProfileResponse:
    """Profile, follow lists and one page of the user's posts (shared with /users)."""
    followers, following = await load_follow_summaries(session, user.id)

    post_id_column = cast(ColumnElement[str], Post.id)
    total_result = await session.execute(
        select(func.count(post_id_column)).where(eq(Post.author_id, user.id))
    )
    total = int(total_result.scalar_one() or 0)

    posts_result = await session.execute(
        select(Post)
        .where(eq(Post.author_id, user.id))
        .order_by(desc(cast(Any, Post.created_at)), desc(post_id_column))
        .offset(page_offset(page, limit))
        .limit(limit)
    )
    posts = await build_post_responses(session, posts_result.scalars().all())

    return ProfileResponse(
        user=ProfileUser(
            id=user.id,
            username=user.username,
            email=user.email,
            bio=user.bio,
            profile_picture=user.profile_picture,
            followers=followers,
            following=following,
        ),
        posts=posts,
        stats=ProfileStats(
            posts_count=total,
            followers_count=len(followers),
            following_count=len(following),
        ),
        current_page=page,
        total_pages=total_pages(total, limit),
        total_posts=total,
    )
