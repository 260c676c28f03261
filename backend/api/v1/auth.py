"""Authentication endpoints."""

from __future__ import annotations

import logging
import re
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from core import create_access_token, hash_password
from db.errors import is_unique_violation
from models import Follow, User
from services.auth import normalize_email, registration_conflict_exists, resolve_login_user
from services.ownership import require_user
from .pagination import LimitQuery, PageQuery, resolve_limit
from .profile_views import ProfileResponse, build_profile_response

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")
MIN_PASSWORD_LENGTH = 6


class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=30)
    email: EmailStr
    password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=128)

    @field_validator("username", mode="before")
    @classmethod
    def _strip_username(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("username")
    @classmethod
    def _check_username_characters(cls, value: str) -> str:
        if not USERNAME_PATTERN.fullmatch(value):
            raise ValueError("Username can only contain letters, numbers, and underscores")
        return value


class LoginRequest(BaseModel):
    login: str | None = Field(default=None, max_length=255)
    username: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    password: str = Field(min_length=1, max_length=128)

    def identifier(self) -> str | None:
        for candidate in (self.login, self.username, self.email):
            if candidate and candidate.strip():
                return candidate.strip()
        return None


class AuthUser(BaseModel):
    id: str
    username: str
    email: str


class AuthResponse(BaseModel):
    success: bool = True
    token: str
    user: AuthUser


class FollowStatusResponse(BaseModel):
    is_following: bool
    current_user_id: str
    target_user_id: str


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        token=create_access_token(user.id),
        user=AuthUser(id=user.id, username=user.username, email=user.email),
    )


def _user_exists_response() -> JSONResponse:
    return JSONResponse(
        {"success": False, "message": "User already exists", "error": "USER_EXISTS"},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"description": "User already exists"}},
)
async def register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_db),
) -> AuthResponse | JSONResponse:
    normalized_email = normalize_email(str(payload.email))
    if await registration_conflict_exists(
        session,
        username=payload.username,
        normalized_email=normalized_email,
    ):
        return _user_exists_response()

    user = User(
        username=payload.username,
        email=normalized_email,
        password_hash=hash_password(payload.password),
    )
    session.add(user)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if is_unique_violation(exc):
            return _user_exists_response()
        raise

    logger.info("User registered", extra={"user_id": user.id})
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db),
) -> AuthResponse:
    identifier = payload.identifier()
    if identifier is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Please provide username, email, or login",
        )

    user = await resolve_login_user(
        session,
        identifier=identifier,
        password=payload.password,
    )
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid credentials",
        )
    return _auth_response(user)


@router.get("/me", response_model=ProfileResponse)
async def read_me(
    page: PageQuery = 1,
    limit: LimitQuery = None,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ProfileResponse:
    return await build_profile_response(
        session,
        current_user,
        page=page,
        limit=resolve_limit(limit),
    )


@router.get("/following/{user_id}", response_model=FollowStatusResponse)
async def read_follow_status(
    user_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> FollowStatusResponse:
    target = await require_user(session, user_id)
    follow = await session.get(Follow, (current_user.id, target.id))
    return FollowStatusResponse(
        is_following=follow is not None,
        current_user_id=current_user.id,
        target_user_id=target.id,
    )
