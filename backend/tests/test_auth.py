"""End-to-end tests for authentication endpoints."""

import asyncio
from datetime import timedelta
from typing import Any, cast
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core import create_access_token, decode_token
from models import User


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


def build_payload() -> dict[str, str]:
    suffix = uuid4().hex[:8]
    return {
        "username": f"alice_{suffix}",
        "email": f"alice_{suffix}@example.com",
        "password": "Sup3rSecret!",
    }


@pytest.mark.asyncio
async def test_register_creates_user_and_returns_token(async_client, db_session: AsyncSession):
    payload = build_payload()
    response = await async_client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 201
    data = response.json()
    assert data["success"] is True
    assert data["user"]["username"] == payload["username"]
    assert data["user"]["email"] == payload["email"]
    assert decode_token(data["token"])["sub"] == data["user"]["id"]

    result = await db_session.execute(
        select(User).where(_eq(User.username, payload["username"]))
    )
    user = result.scalar_one()
    assert user.password_hash != payload["password"]


@pytest.mark.asyncio
async def test_register_normalizes_email_to_lowercase(async_client):
    payload = build_payload()
    payload["email"] = "Mixed.Case+alias@Example.COM"
    response = await async_client.post("/api/v1/auth/register", json=payload)

    assert response.status_code == 201
    assert response.json()["user"]["email"] == "mixed.case+alias@example.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("username", ["ab", "has space", "dash-name", "x" * 31])
async def test_register_rejects_invalid_username(async_client, username: str):
    payload = build_payload()
    payload["username"] = username
    response = await async_client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_rejects_short_password(async_client):
    payload = build_payload()
    payload["password"] = "12345"
    response = await async_client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_conflict(async_client):
    payload = build_payload()
    first = await async_client.post("/api/v1/auth/register", json=payload)
    assert first.status_code == 201

    second = await async_client.post("/api/v1/auth/register", json=payload)
    assert second.status_code == 400
    assert second.json() == {
        "success": False,
        "message": "User already exists",
        "error": "USER_EXISTS",
    }


@pytest.mark.asyncio
async def test_register_conflict_for_case_variant_email(async_client):
    payload = build_payload()
    assert (await async_client.post("/api/v1/auth/register", json=payload)).status_code == 201

    other = build_payload()
    other["email"] = payload["email"].upper()
    response = await async_client.post("/api/v1/auth/register", json=other)
    assert response.status_code == 400
    assert response.json()["error"] == "USER_EXISTS"


@pytest.mark.asyncio
async def test_register_conflict_under_concurrency(async_client):
    payload = build_payload()
    responses = await asyncio.gather(
        async_client.post("/api/v1/auth/register", json=payload),
        async_client.post("/api/v1/auth/register", json=payload),
    )
    statuses = sorted(response.status_code for response in responses)
    assert statuses == [201, 400]


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["login", "username", "email"])
async def test_login_accepts_each_identifier_field(async_client, field: str):
    payload = build_payload()
    await async_client.post("/api/v1/auth/register", json=payload)

    identifier = payload["email"] if field == "email" else payload["username"]
    response = await async_client.post(
        "/api/v1/auth/login",
        json={field: identifier, "password": payload["password"]},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["user"]["username"] == payload["username"]
    assert decode_token(body["token"])["type"] == "access"


@pytest.mark.asyncio
async def test_login_with_email_is_case_insensitive(async_client):
    payload = build_payload()
    await async_client.post("/api/v1/auth/register", json=payload)

    response = await async_client.post(
        "/api/v1/auth/login",
        json={"login": payload["email"].upper(), "password": payload["password"]},
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_login_rejects_wrong_password(async_client):
    payload = build_payload()
    await async_client.post("/api/v1/auth/register", json=payload)

    response = await async_client.post(
        "/api/v1/auth/login",
        json={"username": payload["username"], "password": "wrong-password"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_login_requires_identifier(async_client):
    response = await async_client.post("/api/v1/auth/login", json={"password": "whatever"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Please provide username, email, or login"


@pytest.mark.asyncio
async def test_me_returns_profile_posts_and_stats(async_client, register_user, create_post):
    alice = await register_user("alice")
    bob = await register_user("bob")
    for index in range(3):
        await create_post(alice, f"post number {index}")
    await async_client.post(f"/api/v1/users/follow/{alice.id}", headers=bob.headers)

    response = await async_client.get(
        "/api/v1/auth/me",
        params={"page": 1, "limit": 2},
        headers=alice.headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["user"]["id"] == alice.id
    assert [item["id"] for item in body["user"]["followers"]] == [bob.id]
    assert body["stats"] == {"posts_count": 3, "followers_count": 1, "following_count": 0}
    assert body["current_page"] == 1
    assert body["total_pages"] == 2
    assert body["total_posts"] == 3
    assert [post["content"] for post in body["posts"]] == ["post number 2", "post number 1"]


@pytest.mark.asyncio
async def test_following_status(async_client, register_user):
    alice = await register_user("alice")
    bob = await register_user("bob")

    before = await async_client.get(f"/api/v1/auth/following/{bob.id}", headers=alice.headers)
    assert before.status_code == 200
    assert before.json() == {
        "is_following": False,
        "current_user_id": alice.id,
        "target_user_id": bob.id,
    }

    await async_client.post(f"/api/v1/users/follow/{bob.id}", headers=alice.headers)
    after = await async_client.get(f"/api/v1/auth/following/{bob.id}", headers=alice.headers)
    assert after.json()["is_following"] is True

    missing = await async_client.get(
        f"/api/v1/auth/following/{uuid4()}", headers=alice.headers
    )
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_expired_token_is_rejected_on_me(async_client, register_user):
    alice = await register_user("alice")
    expired = create_access_token(alice.id, expires_delta=timedelta(seconds=-5))

    response = await async_client.get(
        "/api/v1/auth/me", headers={"Authorization": f"Bearer {expired}"}
    )
    assert response.status_code == 401
    assert response.json()["error"] == "EXPIRED"
