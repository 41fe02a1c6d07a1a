"""Request Body Parser Middleware.

Decodes JSON and URL-encoded request bodies into ``request.state.body``
and enforces a size ceiling on them. Oversized bodies are rejected with
413, undecodable ones with 400. Other content types pass through
untouched.

The raw bytes are replayed to the downstream app, so handlers can still
read the body themselves.
"""

import json
from typing import Any, Optional
from urllib.parse import parse_qs

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from foodapi.exceptions import MalformedBodyError, PayloadTooLargeError, error_response

# 10 MB default, override via BODY_LIMIT_MB
DEFAULT_LIMIT_BYTES = 10 * 1024 * 1024

JSON_TYPE = "application/json"
URLENCODED_TYPE = "application/x-www-form-urlencoded"


class BodyParserMiddleware:
    """ASGI middleware that parses JSON / form bodies under a size limit."""

    def __init__(self, app: ASGIApp, limit_bytes: int = DEFAULT_LIMIT_BYTES):
        self.app = app
        self.limit_bytes = limit_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        content_type = _media_type(headers.get("content-type", ""))
        if content_type not in (JSON_TYPE, URLENCODED_TYPE) and not content_type.endswith("+json"):
            await self.app(scope, receive, send)
            return

        # Fast path: check Content-Length header if present
        try:
            declared = int(headers.get("content-length", "0"))
        except ValueError:
            declared = 0
        if declared > self.limit_bytes:
            await error_response(PayloadTooLargeError(self.limit_bytes))(scope, receive, send)
            return

        body = await self._read_body(receive)
        if body is None:
            await error_response(PayloadTooLargeError(self.limit_bytes))(scope, receive, send)
            return

        try:
            parsed = _parse(content_type, body)
        except MalformedBodyError as exc:
            await error_response(exc)(scope, receive, send)
            return

        scope.setdefault("state", {})["body"] = parsed

        replayed = False

        async def replay_receive() -> Message:
            nonlocal replayed
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay_receive, send)

    async def _read_body(self, receive: Receive) -> Optional[bytes]:
        """Read the whole body; None when it grows past the limit."""
        chunks = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] != "http.request":
                break
            chunk = message.get("body", b"")
            received += len(chunk)
            if received > self.limit_bytes:
                return None
            chunks.append(chunk)
            more_body = message.get("more_body", False)
        return b"".join(chunks)


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def _parse(content_type: str, body: bytes) -> Any:
    if not body:
        return {}

    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedBodyError(content_type, f"body is not valid UTF-8 ({e.reason})")

    if content_type == URLENCODED_TYPE:
        fields = parse_qs(text, keep_blank_values=True)
        return {key: values[0] if len(values) == 1 else values for key, values in fields.items()}

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedBodyError(content_type, f"{e.msg} at position {e.pos}")
    except RecursionError:
        raise MalformedBodyError(content_type, "JSON nesting is too deep")
    # Strict mode: only objects and arrays are accepted at the top level
    if not isinstance(parsed, (dict, list)):
        raise MalformedBodyError(content_type, "top-level JSON value must be an object or array")
    return parsed
