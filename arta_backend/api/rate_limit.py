"""
Request Rate Limiting.

In-memory fixed-window counters keyed by client identifier.  Each
limiter owns its own window and ceiling:

    global    1000 requests / 15 min   (all routes except /ping, /health)
    burst       50 requests / 10 s     (all routes except /ping, /health)
    auth        10 requests / 15 min   (POST /auth/login)
    feedback    30 requests / 15 min   (POST /feedback)
    read       200 requests / 15 min   (GET /feedback, GET /feedback/{id})

Counters live in process memory; each worker process limits
independently.
"""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from arta_backend.config import AppConfig

EXEMPT_PATHS: frozenset[str] = frozenset({"/ping", "/health"})


def client_identifier(request: Request) -> str:
    """Rate-limit key for *request*.

    ``x-api-key`` header wins (``api:<key>``); otherwise the first
    ``X-Forwarded-For`` hop, falling back to the peer address
    (``ip:<addr>``).
    """
    api_key = request.headers.get("x-api-key")
    if api_key:
        return f"api:{api_key}"

    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    else:
        ip = request.client.host if request.client else "unknown"
    return f"ip:{ip}"


@dataclass
class _Window:
    started_at: float
    count: int


class RateLimitExceeded(Exception):
    """Raised by a route-level limiter; rendered as a 429 response."""

    def __init__(self, message: str, retry_after: int, limit: int) -> None:
        self.message: str = message
        self.retry_after: int = retry_after
        self.limit: int = limit
        super().__init__(message)


class FixedWindowLimiter:
    """Allow at most *max_requests* per *window_s* seconds per key.

    Parameters
    ----------
    window_s:
        Window length in seconds.
    max_requests:
        Requests allowed per key per window.
    message:
        Human-readable text for the 429 body.
    clock:
        Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        window_s: int,
        max_requests: int,
        message: str,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_s: int = window_s
        self.max_requests: int = max_requests
        self.message: str = message
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> Optional[int]:
        """Count one request for *key*.

        Returns ``None`` when allowed, otherwise the seconds until the
        window resets.
        """
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now - window.started_at >= self.window_s:
                self._prune(now)
                self._windows[key] = _Window(started_at=now, count=1)
                return None
            window.count += 1
            if window.count <= self.max_requests:
                return None
            return max(1, math.ceil(window.started_at + self.window_s - now))

    def check(self, request: Request) -> None:
        """Raise ``RateLimitExceeded`` if *request* is over the limit."""
        retry_after = self.hit(client_identifier(request))
        if retry_after is not None:
            raise RateLimitExceeded(self.message, retry_after, self.max_requests)

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def _prune(self, now: float) -> None:
        # Caller holds the lock.
        expired = [k for k, w in self._windows.items() if now - w.started_at >= self.window_s]
        for key in expired:
            del self._windows[key]


@dataclass
class RateLimiters:
    """The set of limiters one application instance uses."""

    global_: FixedWindowLimiter
    burst: FixedWindowLimiter
    auth: FixedWindowLimiter
    feedback: FixedWindowLimiter
    read: FixedWindowLimiter

    @classmethod
    def from_config(cls, config: AppConfig) -> "RateLimiters":
        return cls(
            global_=FixedWindowLimiter(
                *config.GLOBAL_RATE_LIMIT, "Too many requests. Please try again later.",
            ),
            burst=FixedWindowLimiter(
                *config.BURST_RATE_LIMIT, "Request rate too high. Please slow down.",
            ),
            auth=FixedWindowLimiter(
                *config.AUTH_RATE_LIMIT,
                "Too many login attempts. Please try again in 15 minutes.",
            ),
            feedback=FixedWindowLimiter(
                *config.FEEDBACK_RATE_LIMIT,
                "Too many feedback submissions. Please wait before submitting more.",
            ),
            read=FixedWindowLimiter(
                *config.READ_RATE_LIMIT, "Too many data requests. Please try again later.",
            ),
        )


def too_many_requests(exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={
            "error": "Too Many Requests",
            "message": exc.message,
            "retryAfter": exc.retry_after,
        },
        headers={
            "Retry-After": str(exc.retry_after),
            "RateLimit-Limit": str(exc.limit),
            "RateLimit-Remaining": "0",
            "RateLimit-Reset": str(exc.retry_after),
        },
    )
