"""Request throttling on top of Redis counters.

``RateLimiter`` caps requests per client in fixed windows;
``RateLimitMiddleware`` applies it to every HTTP request. The same counter
primitive backs the like-toggle debouncer.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from functools import lru_cache
from ipaddress import IPv4Network, IPv6Network, ip_address, ip_network
from typing import Callable, Iterable, Protocol, runtime_checkable

import jwt
from fastapi import status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from core import decode_token, settings
from core.security import ACCESS_TOKEN_TYPE
from services.auth.identity_gate import extract_bearer_token

logger = logging.getLogger(__name__)

AUTH_PATH_PREFIX = "/api/v1/auth"
ANONYMOUS_CLIENT = "anonymous"


@runtime_checkable
class SupportsRateLimitClient(Protocol):
    async def incr(self, key: str) -> int: ...

    async def expire(self, key: str, ttl: int) -> None: ...


async def count_hit(redis_client: SupportsRateLimitClient, key: str, ttl: int) -> int:
    """Increment ``key`` and return the new count.

    The first hit starts the key's lifetime of ``ttl`` seconds.
    """
    count = await redis_client.incr(key)
    if count == 1:
        await redis_client.expire(key, ttl)
    return count


# ── Client identification ─────────────────────────────────────────────────


@lru_cache
def _trusted_proxy_networks() -> tuple[IPv4Network | IPv6Network, ...]:
    try:
        return tuple(
            ip_network(cidr, strict=False) for cidr in settings.rate_limit_trusted_proxies
        )
    except ValueError as exc:  # pragma: no cover - invalid configuration
        raise ValueError(
            f"Invalid CIDR in RATE_LIMIT_TRUSTED_PROXIES: {settings.rate_limit_trusted_proxies}"
        ) from exc


def _forwarded_candidates(request: Request) -> Iterator[str]:
    for header in settings.rate_limit_ip_headers:
        for part in (request.headers.get(header) or "").split(","):
            candidate = part.strip()
            if candidate:
                yield candidate


def _forwarded_ip(request: Request) -> str | None:
    """First well-formed address across the configured forwarding headers."""
    for candidate in _forwarded_candidates(request):
        try:
            ip_address(candidate)
        except ValueError:
            continue
        return candidate
    return None


def _peer_is_trusted_proxy(host: str | None) -> bool:
    if not host:
        return False
    try:
        peer = ip_address(host)
    except ValueError:
        return False
    return any(peer in network for network in _trusted_proxy_networks())


def _token_subject(request: Request) -> str | None:
    token = extract_bearer_token(request.headers.get("authorization"))
    if token is None:
        return None
    try:
        payload = decode_token(token)
    except (ValueError, jwt.ExpiredSignatureError):
        return None
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        return None
    subject = payload.get("sub")
    if not isinstance(subject, str):
        return None
    return subject.strip() or None


def default_client_identifier(request: Request) -> str:
    """Key for the caller's rate-limit bucket.

    A valid access token keys by user id. Otherwise the peer address is used,
    replaced by the forwarded client address when the peer is a configured
    proxy.
    """
    subject = _token_subject(request)
    if subject is not None:
        return f"user:{subject}"

    host = request.client.host if request.client else None
    if _peer_is_trusted_proxy(host):
        forwarded = _forwarded_ip(request)
        if forwarded:
            return forwarded
    return host or ANONYMOUS_CLIENT


# ── Limiter ───────────────────────────────────────────────────────────────


class RateLimiter:
    """At most ``limit`` requests per key in each ``window_seconds`` window.

    A zero limit or window turns limiting off.
    """

    def __init__(
        self,
        redis_client: SupportsRateLimitClient,
        limit: int,
        window_seconds: int,
        prefix: str = "rate-limit",
    ) -> None:
        self.redis = redis_client
        self.limit = max(limit, 0)
        self.window_seconds = max(window_seconds, 0)
        self.prefix = prefix

    @property
    def enabled(self) -> bool:
        return self.limit > 0 and self.window_seconds > 0

    def bucket_key(self, key: str, now: float | None = None) -> str:
        window = int(time.time() if now is None else now) // self.window_seconds
        return f"{self.prefix}:{key}:{window}"

    async def allow(self, key: str) -> bool:
        if not self.enabled:
            return True
        count = await count_hit(self.redis, self.bucket_key(key), self.window_seconds)
        return count <= self.limit


@lru_cache
def get_redis_client() -> SupportsRateLimitClient:
    return Redis.from_url(settings.redis_url, decode_responses=False)


_shared_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    """Return the process-wide limiter, building it from settings on first use."""
    global _shared_limiter
    if _shared_limiter is None:
        _shared_limiter = RateLimiter(
            redis_client=get_redis_client(),
            limit=settings.rate_limit_requests,
            window_seconds=settings.rate_limit_window_seconds,
        )
    return _shared_limiter


def set_rate_limiter(limiter: RateLimiter | None) -> None:
    """Replace the process-wide limiter; None rebuilds it from settings."""
    global _shared_limiter
    _shared_limiter = limiter


# ── Middleware ────────────────────────────────────────────────────────────


def is_auth_path(path: str) -> bool:
    return path == AUTH_PATH_PREFIX or path.startswith(f"{AUTH_PATH_PREFIX}/")


def _error(detail: str, status_code: int) -> JSONResponse:
    return JSONResponse({"detail": detail}, status_code=status_code)


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Throttle HTTP requests per client.

    When the limiter cannot be reached, auth routes answer 503 and every
    other route is let through. ``limiter_factory`` runs per request, so a
    limiter swapped in with ``set_rate_limiter`` applies immediately.
    """

    def __init__(
        self,
        app: ASGIApp,
        limiter_factory: Callable[[], RateLimiter],
        exempt_paths: Iterable[str] | None = None,
        client_identifier: Callable[[Request], str] | None = None,
    ) -> None:
        super().__init__(app)
        self.limiter_factory = limiter_factory
        self.exempt_paths = frozenset(exempt_paths or ())
        self.client_identifier = client_identifier or default_client_identifier

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if path in self.exempt_paths:
            return await call_next(request)

        client_key = self.client_identifier(request) or ANONYMOUS_CLIENT
        try:
            allowed = await self.limiter_factory().allow(client_key)
        except Exception:
            logger.warning(
                "Rate limiter unavailable",
                extra={"path": path},
                exc_info=True,
            )
            if is_auth_path(path):
                return _error("Service unavailable", status.HTTP_503_SERVICE_UNAVAILABLE)
            return await call_next(request)

        if not allowed:
            logger.info(
                "Rate limit exceeded",
                extra={"client_key": client_key, "path": path},
            )
            return _error("Too Many Requests", status.HTTP_429_TOO_MANY_REQUESTS)
        return await call_next(request)
