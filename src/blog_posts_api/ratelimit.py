"""Per-client fixed-window rate limiting for inbound requests."""

from __future__ import annotations

import math
import time
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog
from fastapi import Request, Response

from blog_posts_api.errors import RateLimited, error_response
from blog_posts_api.metrics import rate_limited_total

log = structlog.get_logger()

_DEFAULT_MAX_CLIENTS = 10_000
_UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    reset_after: float


class FixedWindowRateLimiter:
    """Count requests per client key in fixed windows.

    A client's window opens on its first request and admits ``limit`` requests
    until ``window_seconds`` have elapsed. Client entries are bounded by
    ``max_clients``: expired windows are dropped first, then least recently
    seen clients.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        max_clients: int = _DEFAULT_MAX_CLIENTS,
    ) -> None:
        self._limit = limit
        self._window = window_seconds
        self._clock = clock
        self._max_clients = max_clients
        # key -> (window_start, count)
        self._windows: OrderedDict[str, tuple[float, int]] = OrderedDict()

    @property
    def limit(self) -> int:
        return self._limit

    def _evict_if_needed(self, now: float) -> None:
        if len(self._windows) <= self._max_clients:
            return
        expired = [k for k, (start, _) in self._windows.items() if now - start >= self._window]
        for key in expired:
            del self._windows[key]
        evicted = len(expired)
        while len(self._windows) > self._max_clients:
            self._windows.popitem(last=False)
            evicted += 1
        log.warning(
            "rate_limit_eviction",
            evicted_count=evicted,
            max_clients=self._max_clients,
            current_size=len(self._windows),
        )

    def hit(self, key: str) -> RateLimitDecision:
        """Record one request for *key* and decide whether it is admitted."""
        now = self._clock()
        start, count = self._windows.get(key, (now, 0))
        if now - start >= self._window:
            start, count = now, 0
        count += 1
        self._windows[key] = (start, count)
        self._windows.move_to_end(key)
        self._evict_if_needed(now)

        reset_after = max(0.0, self._window - (now - start))
        return RateLimitDecision(
            allowed=count <= self._limit,
            limit=self._limit,
            remaining=max(0, self._limit - count),
            reset_after=reset_after,
        )

    def __len__(self) -> int:
        return len(self._windows)


async def rate_limit_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """HTTP middleware: reject requests over the client's budget before any handler runs."""
    limiter: FixedWindowRateLimiter | None = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        return await call_next(request)

    client = request.client.host if request.client else _UNKNOWN_CLIENT
    decision = limiter.hit(client)
    if not decision.allowed:
        rate_limited_total.add(1)
        await log.awarning("rate_limited", client=client, path=request.url.path)
        return error_response(
            RateLimited.status_code,
            RateLimited.message,
            headers={
                "Retry-After": str(math.ceil(decision.reset_after)),
                "X-RateLimit-Limit": str(decision.limit),
                "X-RateLimit-Remaining": "0",
            },
        )

    response = await call_next(request)
    response.headers["X-RateLimit-Limit"] = str(decision.limit)
    response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
    return response
