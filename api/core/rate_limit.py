"""
Fixed-window rate limiting.

Each key gets a counter that starts with its first hit and resets once the window
has elapsed. Counters live in process memory and are only touched from the event
loop thread.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request, Response

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitState:
    allowed: bool
    limit: int
    remaining: int
    reset_after_s: float


class RateLimitExceeded(RuntimeError):
    def __init__(self, state: RateLimitState) -> None:
        super().__init__("Too many requests.")
        self.state = state


@dataclass
class _Window:
    started_at: float
    count: int


class FixedWindowRateLimiter:
    def __init__(
        self,
        *,
        max_requests: int,
        window_s: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1.")
        if window_s <= 0:
            raise ValueError("window_s must be > 0.")
        self.max_requests = max_requests
        self.window_s = float(window_s)
        self._clock = clock
        self._windows: dict[str, _Window] = {}

    def _prune(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now - w.started_at >= self.window_s]
        for key in expired:
            del self._windows[key]

    def hit(self, key: str) -> RateLimitState:
        """
        Count one request for `key` and report whether it is within the limit.
        """
        now = self._clock()
        self._prune(now)

        window = self._windows.get(key)
        if window is None:
            window = _Window(started_at=now, count=0)
            self._windows[key] = window
        window.count += 1

        return RateLimitState(
            allowed=window.count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - window.count),
            reset_after_s=max(0.0, window.started_at + self.window_s - now),
        )

    def reset(self, key: str | None = None) -> None:
        if key is None:
            self._windows.clear()
        else:
            self._windows.pop(key, None)


def rate_limit_headers(state: RateLimitState) -> dict[str, str]:
    return {
        "RateLimit-Limit": str(state.limit),
        "RateLimit-Remaining": str(state.remaining),
        "RateLimit-Reset": str(math.ceil(state.reset_after_s)),
    }


def _client_key(request: Request) -> str:
    if request.client is None:
        return "unknown"
    return request.client.host


async def enforce_create_rate_limit(request: Request, response: Response) -> None:
    limiter: FixedWindowRateLimiter = request.app.state.create_limiter
    key = _client_key(request)
    state = limiter.hit(key)
    if not state.allowed:
        logger.warning("rate_limited client=%s path=%s", key, request.url.path)
        raise RateLimitExceeded(state)
    response.headers.update(rate_limit_headers(state))
