"""Error Boundary Middleware.

Innermost pipeline stage. Turns any exception the routers did not handle
into the JSON error body, so the response travels back out through the
outer stages (security headers, CORS, rate limit headers) like any other.
"""

import logging

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from foodapi.exceptions import unexpected_error_response

logger = logging.getLogger(__name__)


class ErrorBoundaryMiddleware:
    """ASGI middleware that renders unhandled exceptions as JSON 500s."""

    def __init__(self, app: ASGIApp, include_stack: bool = False):
        self.app = app
        self.include_stack = include_stack

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_and_track(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, receive, send_and_track)
        except Exception as exc:
            logger.exception(f"Unexpected error on {scope['method']} {scope['path']}: {exc}")
            # Headers already went out; the server can only drop the connection
            if response_started:
                raise
            response = unexpected_error_response(exc, include_stack=self.include_stack)
            await response(scope, receive, send)
