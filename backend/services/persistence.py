"""Commit helper shared by the mutating routes."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


async def commit_or_500(session: AsyncSession, *, detail: str, **log_context: str) -> None:
    """Commit the session; on failure roll back and raise a generic 500.

    ``detail`` is only logged, together with ``log_context``; clients see
    "Server error".
    """
    try:
        await session.commit()
    except Exception as exc:
        await session.rollback()
        logger.exception(detail, extra=log_context)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server error",
        ) from exc
