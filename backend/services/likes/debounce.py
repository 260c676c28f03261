"""Minimum-interval policy for repeated like toggles."""

from __future__ import annotations

import logging

from core import settings
from services.rate_limiter import SupportsRateLimitClient, count_hit, get_redis_client

logger = logging.getLogger(__name__)


class ToggleDebouncer:
    """Reject a toggle that follows the previous one on the same key too soon.

    The key is ``(user, entity kind, entity id)``. The first toggle in a
    window creates the key with a TTL of ``min_interval_seconds``; any toggle
    while the key is alive is rejected.
    """

    def __init__(
        self,
        redis_client: SupportsRateLimitClient,
        min_interval_seconds: int,
        prefix: str = "like-toggle",
    ) -> None:
        self.redis = redis_client
        self.min_interval_seconds = max(min_interval_seconds, 0)
        self.prefix = prefix

    def key_for(self, user_id: str, entity_kind: str, entity_id: str) -> str:
        return f"{self.prefix}:{user_id}:{entity_kind}:{entity_id}"

    async def allow(self, user_id: str, entity_kind: str, entity_id: str) -> bool:
        if self.min_interval_seconds == 0:
            return True

        key = self.key_for(user_id, entity_kind, entity_id)
        try:
            count = await count_hit(self.redis, key, self.min_interval_seconds)
        except Exception:
            # Fail open when Redis is unavailable.
            logger.warning("Like toggle debounce check failed", exc_info=True)
            return True
        return count == 1


_cached_debouncer: ToggleDebouncer | None = None


def get_toggle_debouncer() -> ToggleDebouncer | None:
    """Return the shared debouncer, or None when debouncing is disabled."""
    global _cached_debouncer
    if _cached_debouncer is None and settings.like_toggle_min_interval_seconds > 0:
        _cached_debouncer = ToggleDebouncer(
            redis_client=get_redis_client(),
            min_interval_seconds=settings.like_toggle_min_interval_seconds,
        )
    return _cached_debouncer


def set_toggle_debouncer(debouncer: ToggleDebouncer | None) -> None:
    """Override the shared debouncer (primarily for tests)."""
    global _cached_debouncer
    _cached_debouncer = debouncer
