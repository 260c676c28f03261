"""User profile, search and follow endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, cast

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from db.errors import is_unique_violation
from db.expressions import asc, eq, ilike, like_pattern
from models import Follow, User
from models._columns import utcnow
from services.cascade import delete_user_cascade
from services.ownership import require_owner, require_user
from services.persistence import commit_or_500
from .pagination import LimitQuery, PageQuery, resolve_limit
from .profile_views import (
    ProfileResponse,
    ProfileUser,
    build_profile_response,
    load_follow_summaries,
)

router = APIRouter(prefix="/users", tags=["users"])
MAX_PROFILE_BIO_LENGTH = 500
MAX_SEARCH_RESULTS = 50


class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    bio: str | None = None
    profile_picture: str | None = None
    created_at: datetime


class ProfileUpdateRequest(BaseModel):
    bio: str | None = Field(default=None, max_length=MAX_PROFILE_BIO_LENGTH)
    profile_picture: str | None = Field(default=None, max_length=2048)


class MessageResponse(BaseModel):
    message: str


def search_users_query(term: str, *, limit: int) -> Any:
    """Case-insensitive substring match on username or bio."""
    pattern = like_pattern(term)
    return (
        select(User)
        .where(or_(ilike(User.username, pattern), ilike(User.bio, pattern)))
        .order_by(asc(User.username))
        .limit(limit)
    )


@router.get("/search/{query}", response_model=list[UserPublic])
async def search_users(
    query: str,
    session: AsyncSession = Depends(get_db),
    _current_user: User = Depends(get_current_user),
) -> list[UserPublic]:
    term = query.strip()
    if not term:
        return []
    result = await session.execute(search_users_query(term, limit=MAX_SEARCH_RESULTS))
    return [UserPublic.model_validate(user) for user in result.scalars().all()]


@router.get("/profile/{user_id}", response_model=ProfileResponse)
async def read_public_profile(
    user_id: str,
    page: PageQuery = 1,
    limit: LimitQuery = None,
    session: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    user = await require_user(session, user_id)
    return await build_profile_response(
        session,
        user,
        page=page,
        limit=resolve_limit(limit),
    )


@router.put("/profile", response_model=UserPublic)
async def update_profile(
    payload: ProfileUpdateRequest,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> UserPublic:
    # Empty strings leave the stored value untouched, like omitted fields.
    if payload.bio:
        current_user.bio = payload.bio
    if payload.profile_picture:
        current_user.profile_picture = payload.profile_picture
    current_user.updated_at = utcnow()
    session.add(current_user)
    await commit_or_500(session, detail="Failed to update profile")
    return UserPublic.model_validate(current_user)


@router.post("/follow/{user_id}", response_model=MessageResponse)
async def follow_user(
    user_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot follow yourself",
        )
    followee = await require_user(session, user_id)
    if await session.get(Follow, (current_user.id, followee.id)) is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You are already following this user",
        )

    session.add(Follow(follower_id=current_user.id, followee_id=followee.id))
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You are already following this user",
            ) from exc
        raise
    return MessageResponse(message="User followed successfully")


@router.post("/unfollow/{user_id}", response_model=MessageResponse)
async def unfollow_user(
    user_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot unfollow yourself",
        )
    followee = await require_user(session, user_id)
    result = await session.execute(
        delete(Follow).where(
            eq(Follow.follower_id, current_user.id),
            eq(Follow.followee_id, followee.id),
        )
    )
    if int(cast(Any, result).rowcount or 0) == 0:
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You are not following this user",
        )
    await commit_or_500(session, detail="Failed to unfollow user")
    return MessageResponse(message="User unfollowed successfully")


@router.delete("/username/{username}", response_model=MessageResponse)
async def delete_user(
    username: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MessageResponse:
    result = await session.execute(select(User).where(eq(User.username, username)).limit(1))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    require_owner(user.id, current_user)

    await delete_user_cascade(session, user.id)
    await commit_or_500(session, detail="Failed to delete user")
    return MessageResponse(message="User deleted successfully")


@router.get("/{user_id}", response_model=ProfileUser)
async def read_user(
    user_id: str,
    session: AsyncSession = Depends(get_db),
    _current_user: User = Depends(get_current_user),
) -> ProfileUser:
    user = await require_user(session, user_id)
    followers, following = await load_follow_summaries(session, user.id)
    return ProfileUser(
        id=user.id,
        username=user.username,
        email=user.email,
        bio=user.bio,
        profile_picture=user.profile_picture,
        followers=followers,
        following=following,
    )
