"""Tests for the like membership primitives."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models import Post, User
from services.likes import (
    POST_LIKES,
    add_member,
    delete_all_members,
    is_member,
    list_members,
    remove_member,
)


async def _seed(session: AsyncSession) -> tuple[User, User, Post]:
    owner = User(username="owner", email="owner@example.com", password_hash="x")
    fan = User(username="fan", email="fan@example.com", password_hash="x")
    session.add_all([owner, fan])
    await session.flush()
    post = Post(author_id=owner.id, content="Hello world")
    session.add(post)
    await session.commit()
    return owner, fan, post


@pytest.mark.asyncio
async def test_add_member_reports_only_the_inserting_call(db_session: AsyncSession):
    _owner, fan, post = await _seed(db_session)

    assert await add_member(db_session, POST_LIKES, post.id, fan.id) is True
    assert await add_member(db_session, POST_LIKES, post.id, fan.id) is False
    await db_session.commit()

    assert await is_member(db_session, POST_LIKES, post.id, fan.id)
    assert await list_members(db_session, POST_LIKES, [post.id]) == {post.id: [fan.id]}


@pytest.mark.asyncio
async def test_remove_member_reports_whether_a_row_was_deleted(db_session: AsyncSession):
    _owner, fan, post = await _seed(db_session)
    await add_member(db_session, POST_LIKES, post.id, fan.id)

    assert await remove_member(db_session, POST_LIKES, post.id, fan.id) is True
    assert await remove_member(db_session, POST_LIKES, post.id, fan.id) is False
    await db_session.commit()

    assert not await is_member(db_session, POST_LIKES, post.id, fan.id)
    assert await list_members(db_session, POST_LIKES, [post.id]) == {post.id: []}


@pytest.mark.asyncio
async def test_list_members_groups_by_entity(db_session: AsyncSession):
    owner, fan, post = await _seed(db_session)
    other = Post(author_id=owner.id, content="Second")
    db_session.add(other)
    await db_session.commit()

    await add_member(db_session, POST_LIKES, post.id, owner.id)
    await add_member(db_session, POST_LIKES, post.id, fan.id)
    await add_member(db_session, POST_LIKES, other.id, fan.id)
    await db_session.commit()

    members = await list_members(db_session, POST_LIKES, [post.id, other.id])
    assert members == {post.id: [owner.id, fan.id], other.id: [fan.id]}
    assert await list_members(db_session, POST_LIKES, []) == {}

    assert await delete_all_members(db_session, POST_LIKES, [post.id]) == 2
    await db_session.commit()
    assert await list_members(db_session, POST_LIKES, [post.id, other.id]) == {
        post.id: [],
        other.id: [fan.id],
    }
