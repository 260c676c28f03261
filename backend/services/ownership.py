"""Entity lookup and ownership checks shared by the routers."""

from __future__ import annotations

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from models import Comment, Post, User


async def require_post(session: AsyncSession, post_id: str) -> Post:
    """Return the post or raise 404 when it does not exist."""
    post = await session.get(Post, post_id)
    if post is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Post not found")
    return post


async def require_comment(session: AsyncSession, comment_id: str) -> Comment:
    """Return the comment or raise 404 when it does not exist."""
    comment = await session.get(Comment, comment_id)
    if comment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return comment


async def require_user(session: AsyncSession, user_id: str) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


def require_owner(owner_id: str, viewer: User) -> None:
    """Raise 401 unless ``viewer`` owns the entity.

    Authenticated non-owners get 401 rather than 403; clients treat both the
    same way.
    """
    if owner_id != viewer.id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authorized")
