"""Request Logging Middleware.

Development-only access log, one line per request:

    GET /api/health 200 1.204 ms - 118
"""

import logging
import time

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

access_logger = logging.getLogger("foodapi.access")


class RequestLoggingMiddleware:
    """ASGI middleware that logs method, path, status and timing."""

    def __init__(self, app: ASGIApp, logger: logging.Logger = access_logger):
        self.app = app
        self.logger = logger

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = time.perf_counter()
        status_code = 500
        content_length = "-"

        async def send_and_record(message: Message) -> None:
            nonlocal status_code, content_length
            if message["type"] == "http.response.start":
                status_code = message["status"]
                content_length = Headers(raw=message.get("headers", [])).get("content-length", "-")
            await send(message)

        try:
            await self.app(scope, receive, send_and_record)
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            path = scope["path"]
            if scope.get("query_string"):
                path = f"{path}?{scope['query_string'].decode('latin-1')}"
            self.logger.info(
                f"{scope['method']} {path} {status_code} {elapsed_ms:.3f} ms - {content_length}"
            )
