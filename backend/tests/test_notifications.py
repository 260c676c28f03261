"""Tests for the notification inbox endpoints."""

from uuid import uuid4

import pytest


async def _like(async_client, post_id: str, user) -> None:
    response = await async_client.put(f"/api/v1/posts/like/{post_id}", headers=user.headers)
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_list_notifications_is_recipient_scoped_and_newest_first(
    async_client, register_user, create_post
):
    owner = await register_user("owner")
    bystander = await register_user("bystander")
    likers = [await register_user(f"liker{index}") for index in range(3)]
    post = await create_post(owner, "Hello world")
    for liker in likers:
        await _like(async_client, post["id"], liker)

    response = await async_client.get("/api/v1/notifications", headers=owner.headers)
    assert response.status_code == 200
    body = response.json()
    assert body["total_notifications"] == 3
    assert body["unread_count"] == 3
    assert body["current_page"] == 1
    assert body["total_pages"] == 1
    assert [item["sender"]["id"] for item in body["notifications"]] == [
        likers[2].id,
        likers[1].id,
        likers[0].id,
    ]
    first = body["notifications"][0]
    assert first["kind"] == "like"
    assert first["read"] is False
    assert first["recipient_id"] == owner.id
    assert first["post"] == {"id": post["id"], "content": "Hello world"}
    assert first["sender"]["username"] == likers[2].username

    empty = await async_client.get("/api/v1/notifications", headers=bystander.headers)
    assert empty.json()["notifications"] == []
    assert empty.json()["total_pages"] == 0


@pytest.mark.asyncio
async def test_list_notifications_paginates(async_client, register_user, create_post):
    owner = await register_user("owner")
    liker = await register_user("liker")
    for index in range(3):
        post = await create_post(owner, f"post {index}")
        await _like(async_client, post["id"], liker)

    response = await async_client.get(
        "/api/v1/notifications",
        params={"page": 2, "limit": 2},
        headers=owner.headers,
    )
    body = response.json()
    assert body["current_page"] == 2
    assert body["total_pages"] == 2
    assert len(body["notifications"]) == 1
    assert body["notifications"][0]["post"]["content"] == "post 0"


@pytest.mark.asyncio
async def test_mark_notification_read(async_client, register_user, create_post):
    owner = await register_user("owner")
    liker = await register_user("liker")
    post = await create_post(owner)
    await _like(async_client, post["id"], liker)

    listing = await async_client.get("/api/v1/notifications", headers=owner.headers)
    notification_id = listing.json()["notifications"][0]["id"]

    not_recipient = await async_client.put(
        f"/api/v1/notifications/{notification_id}/read", headers=liker.headers
    )
    assert not_recipient.status_code == 401
    assert not_recipient.json() == {"detail": "Not authorized"}

    response = await async_client.put(
        f"/api/v1/notifications/{notification_id}/read", headers=owner.headers
    )
    assert response.status_code == 200
    assert response.json()["read"] is True

    # Marking twice is harmless.
    again = await async_client.put(
        f"/api/v1/notifications/{notification_id}/read", headers=owner.headers
    )
    assert again.status_code == 200

    listing = await async_client.get("/api/v1/notifications", headers=owner.headers)
    assert listing.json()["unread_count"] == 0


@pytest.mark.asyncio
async def test_mark_missing_notification_read(async_client, register_user):
    user = await register_user("user")
    response = await async_client.put(
        f"/api/v1/notifications/{uuid4()}/read", headers=user.headers
    )
    assert response.status_code == 404
    assert response.json() == {"detail": "Notification not found"}


@pytest.mark.asyncio
async def test_mark_all_read_only_touches_callers_notifications(
    async_client, register_user, create_post
):
    alice = await register_user("alice")
    bob = await register_user("bob")
    alice_post = await create_post(alice)
    bob_post = await create_post(bob)
    await _like(async_client, alice_post["id"], bob)
    await async_client.post(
        f"/api/v1/comments/{alice_post['id']}",
        json={"content": "hey"},
        headers=bob.headers,
    )
    await _like(async_client, bob_post["id"], alice)

    response = await async_client.put("/api/v1/notifications/read-all", headers=alice.headers)
    assert response.status_code == 200
    assert response.json()["updated_count"] == 2

    alice_inbox = await async_client.get("/api/v1/notifications", headers=alice.headers)
    assert alice_inbox.json()["unread_count"] == 0
    bob_inbox = await async_client.get("/api/v1/notifications", headers=bob.headers)
    assert bob_inbox.json()["unread_count"] == 1

    repeat = await async_client.put("/api/v1/notifications/read-all", headers=alice.headers)
    assert repeat.json()["updated_count"] == 0
