"""Rate Limit Middleware - per-IP fixed-window request quota.

Counts requests per client IP over a fixed window that starts at the
client's first request. Once a client goes over the limit, requests are
rejected with HTTP 429 until its window resets. Rejected requests are
counted too.

Usage:
    limiter = FixedWindowRateLimiter(window_seconds=900, max_requests=100)
    app = RateLimitMiddleware(app, limiter=limiter, path_prefix="/api")
"""

import math
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."


@dataclass
class WindowCounter:
    """Hits recorded for one client in its current window."""
    count: int
    reset_at: float


@dataclass
class RateLimitResult:
    """Outcome of recording one hit."""
    limit: int
    count: int
    reset_after: float

    @property
    def exceeded(self) -> bool:
        return self.count > self.limit

    @property
    def remaining(self) -> int:
        return max(self.limit - self.count, 0)


class FixedWindowRateLimiter:
    """In-memory fixed-window counter keyed by client identity.

    All calls happen on the event loop thread and never await, so the
    counters need no lock.
    """

    def __init__(
        self,
        window_seconds: float,
        max_requests: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._counters: Dict[str, WindowCounter] = {}
        self._next_sweep = clock() + window_seconds

    def hit(self, key: str) -> RateLimitResult:
        """Record a request for key and return the state of its window."""
        now = self._clock()
        self._sweep(now)

        counter = self._counters.get(key)
        if counter is None or counter.reset_at <= now:
            counter = WindowCounter(count=0, reset_at=now + self.window_seconds)
            self._counters[key] = counter
        counter.count += 1

        return RateLimitResult(
            limit=self.max_requests,
            count=counter.count,
            reset_after=counter.reset_at - now,
        )

    def reset(self, key: Optional[str] = None) -> None:
        """Forget one client's window, or every window when key is None."""
        if key is None:
            self._counters.clear()
        else:
            self._counters.pop(key, None)

    def __len__(self) -> int:
        return len(self._counters)

    def _sweep(self, now: float) -> None:
        if now < self._next_sweep:
            return
        expired = [key for key, counter in self._counters.items() if counter.reset_at <= now]
        for key in expired:
            del self._counters[key]
        self._next_sweep = now + self.window_seconds


class RateLimitMiddleware:
    """ASGI middleware applying a FixedWindowRateLimiter to one path prefix."""

    def __init__(
        self,
        app: ASGIApp,
        limiter: FixedWindowRateLimiter,
        path_prefix: str = "/api",
        trust_proxy: bool = False,
    ):
        self.app = app
        self.limiter = limiter
        self.path_prefix = path_prefix.rstrip("/")
        self.trust_proxy = trust_proxy

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self._in_scope(scope["path"]):
            await self.app(scope, receive, send)
            return

        result = self.limiter.hit(self._client_ip(scope))
        headers = self._headers(result)

        if result.exceeded:
            headers["Retry-After"] = str(math.ceil(result.reset_after))
            response = JSONResponse(
                status_code=429,
                content={"success": False, "message": RATE_LIMIT_MESSAGE},
                headers=headers,
            )
            await response(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                response_headers = MutableHeaders(scope=message)
                for name, value in headers.items():
                    response_headers[name] = value
            await send(message)

        await self.app(scope, receive, send_with_headers)

    def _in_scope(self, path: str) -> bool:
        return path == self.path_prefix or path.startswith(self.path_prefix + "/")

    def _client_ip(self, scope: Scope) -> str:
        if self.trust_proxy:
            forwarded = Headers(scope=scope).get("x-forwarded-for")
            if forwarded:
                return forwarded.split(",")[0].strip()
        client = scope.get("client")
        if client:
            return client[0]
        return "anonymous"

    def _headers(self, result: RateLimitResult) -> Dict[str, str]:
        return {
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
            "X-RateLimit-Reset": str(int(time.time() + result.reset_after)),
        }
