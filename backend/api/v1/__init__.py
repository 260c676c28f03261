"""Version 1 API routers."""

from fastapi import APIRouter

from . import auth, comments, notifications, posts, users

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(posts.router)
api_router.include_router(comments.router)
api_router.include_router(notifications.router)

__all__ = ["api_router"]
