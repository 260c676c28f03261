"""Tests for the shared commit and paging helpers."""

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import OperationalError

from db.pagination import page_offset, total_pages
from services.persistence import commit_or_500


class FailingCommitSession:
    def __init__(self) -> None:
        self.rolled_back = False

    async def commit(self) -> None:
        raise OperationalError("COMMIT", {}, Exception("database is locked"))

    async def rollback(self) -> None:
        self.rolled_back = True


class RecordingSession:
    def __init__(self) -> None:
        self.committed = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:  # pragma: no cover - not reached
        raise AssertionError("rollback after a successful commit")


@pytest.mark.asyncio
async def test_commit_or_500_commits() -> None:
    session = RecordingSession()
    await commit_or_500(session, detail="Failed to save")  # type: ignore[arg-type]
    assert session.committed is True


@pytest.mark.asyncio
async def test_commit_or_500_rolls_back_and_hides_cause(caplog) -> None:
    session = FailingCommitSession()

    with pytest.raises(HTTPException) as exc_info:
        await commit_or_500(  # type: ignore[arg-type]
            session, detail="Failed to update post", post_id="post-1"
        )

    assert session.rolled_back is True
    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "Server error"
    record = next(r for r in caplog.records if r.getMessage() == "Failed to update post")
    assert record.post_id == "post-1"


@pytest.mark.parametrize(
    ("total", "limit", "pages"),
    [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (5, 0, 0)],
)
def test_total_pages(total: int, limit: int, pages: int) -> None:
    assert total_pages(total, limit) == pages


def test_page_offset() -> None:
    assert page_offset(1, 10) == 0
    assert page_offset(3, 25) == 50
