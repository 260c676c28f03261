"""Tests for comment endpoints."""

from typing import Any, cast
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from models import Comment, CommentLike, Notification


def _eq(column: Any, value: Any) -> ColumnElement[bool]:
    return cast(ColumnElement[bool], column == value)


async def _post_comment(async_client, post_id: str, author, content: str):
    return await async_client.post(
        f"/api/v1/comments/{post_id}",
        json={"content": content},
        headers=author.headers,
    )


@pytest.mark.asyncio
async def test_create_comment_notifies_post_owner(
    async_client,
    db_session: AsyncSession,
    register_user,
    create_post,
):
    owner = await register_user("owner")
    commenter = await register_user("commenter")
    post = await create_post(owner, "A long post that definitely exceeds thirty characters")

    response = await _post_comment(async_client, post["id"], commenter, "Great post!")
    assert response.status_code == 201
    comment = response.json()
    assert comment["post_id"] == post["id"]
    assert comment["user"]["id"] == commenter.id
    assert comment["likes"] == []

    result = await db_session.execute(
        select(Notification).where(_eq(Notification.recipient_id, owner.id))
    )
    [notification] = result.scalars().all()
    assert notification.kind == "comment"
    assert notification.comment_id == comment["id"]
    assert notification.content == (
        f'"A long post that definitely ex..." commented by {commenter.username}: "Great post!"'
    )


@pytest.mark.asyncio
async def test_owner_comment_does_not_notify(async_client, db_session, register_user, create_post):
    owner = await register_user("owner")
    post = await create_post(owner)

    response = await _post_comment(async_client, post["id"], owner, "replying to myself")
    assert response.status_code == 201

    result = await db_session.execute(select(Notification))
    assert result.scalars().all() == []


@pytest.mark.asyncio
async def test_comment_on_missing_post(async_client, register_user):
    user = await register_user("user")
    response = await _post_comment(async_client, str(uuid4()), user, "hello?")
    assert response.status_code == 404
    assert response.json()["detail"] == "Post not found"


@pytest.mark.asyncio
async def test_list_post_comments_newest_first(async_client, register_user, create_post):
    owner = await register_user("owner")
    commenter = await register_user("commenter")
    post = await create_post(owner)
    for text in ("one", "two", "three"):
        await _post_comment(async_client, post["id"], commenter, text)

    response = await async_client.get(f"/api/v1/comments/post/{post['id']}")
    assert response.status_code == 200
    assert [item["content"] for item in response.json()] == ["three", "two", "one"]


@pytest.mark.asyncio
async def test_update_comment_author_only(async_client, register_user, create_post):
    owner = await register_user("owner")
    commenter = await register_user("commenter")
    post = await create_post(owner)
    comment = (await _post_comment(async_client, post["id"], commenter, "typo")).json()

    # The post owner does not own the comment.
    forbidden = await async_client.put(
        f"/api/v1/comments/{comment['id']}",
        json={"content": "rewritten"},
        headers=owner.headers,
    )
    assert forbidden.status_code == 401
    assert forbidden.json() == {"detail": "Not authorized"}

    updated = await async_client.put(
        f"/api/v1/comments/{comment['id']}",
        json={"content": "fixed"},
        headers=commenter.headers,
    )
    assert updated.status_code == 200
    assert updated.json()["content"] == "fixed"


@pytest.mark.asyncio
async def test_delete_comment_cascades(
    async_client,
    db_session: AsyncSession,
    register_user,
    create_post,
):
    owner = await register_user("owner")
    commenter = await register_user("commenter")
    post = await create_post(owner)
    comment = (await _post_comment(async_client, post["id"], commenter, "soon gone")).json()
    await async_client.put(f"/api/v1/comments/like/{comment['id']}", headers=owner.headers)

    forbidden = await async_client.delete(
        f"/api/v1/comments/{comment['id']}", headers=owner.headers
    )
    assert forbidden.status_code == 401

    response = await async_client.delete(
        f"/api/v1/comments/{comment['id']}", headers=commenter.headers
    )
    assert response.status_code == 200

    assert await db_session.get(Comment, comment["id"]) is None
    likes = await db_session.execute(
        select(CommentLike).where(_eq(CommentLike.comment_id, comment["id"]))
    )
    assert likes.scalars().all() == []
    notifications = await db_session.execute(
        select(Notification).where(_eq(Notification.comment_id, comment["id"]))
    )
    assert notifications.scalars().all() == []

    missing = await async_client.delete(
        f"/api/v1/comments/{comment['id']}", headers=commenter.headers
    )
    assert missing.status_code == 404
