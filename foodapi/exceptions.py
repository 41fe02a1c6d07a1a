# =============================================================================
# foodapi/exceptions.py - Custom Exceptions and Error Responders
# =============================================================================
# Centralized error handling for the API. Every failure path (route errors,
# unmatched paths, pipeline rejections) ends up in one of the responders
# below, so clients always receive the same JSON error shape:
#
#   {"success": false, "message": "...", "code": "...", ...}
# =============================================================================

import logging
import traceback
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class FoodAPIException(Exception):
    """
    Base exception for the SB Foods API.

    Route collaborators raise subclasses of this to control the status code
    and error code of the response.
    """

    def __init__(
        self,
        message: str,
        code: str = "FOODAPI_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        return error_body(
            self.message,
            code=self.code,
            suggestion=self.suggestion,
            details=self.details,
        )


class NotFoundError(FoodAPIException):
    """Raised when no route matches the request path."""

    def __init__(self, path: str):
        super().__init__(
            message=f"Not Found - {path}",
            code="NOT_FOUND",
            status_code=404,
            details={"path": path},
        )


class PayloadTooLargeError(FoodAPIException):
    """Raised when a JSON or URL-encoded body exceeds the configured limit."""

    def __init__(self, limit_bytes: int):
        super().__init__(
            message="Request entity too large",
            code="PAYLOAD_TOO_LARGE",
            status_code=413,
            suggestion=f"Send a body smaller than {limit_bytes // (1024 * 1024)}MB",
            details={"limit_bytes": limit_bytes},
        )


class MalformedBodyError(FoodAPIException):
    """Raised when a request body cannot be decoded."""

    def __init__(self, content_type: str, error: str):
        super().__init__(
            message=f"Malformed request body: {error}",
            code="MALFORMED_BODY",
            status_code=400,
            suggestion="Check that the body matches its Content-Type header",
            details={"content_type": content_type},
        )


class DatabaseUnavailableError(FoodAPIException):
    """Raised when a handler needs the database before it is connected."""

    def __init__(self):
        super().__init__(
            message="Database is not connected",
            code="DATABASE_UNAVAILABLE",
            status_code=503,
            suggestion="Try again later or contact support if the issue persists",
        )


# =============================================================================
# Response Building
# =============================================================================

def error_body(
    message: str,
    *,
    code: str,
    suggestion: str | None = None,
    details: dict[str, Any] | None = None,
    exc: BaseException | None = None,
    include_stack: bool = False,
) -> dict[str, Any]:
    """
    Build the JSON error body shared by every error response.

    The stack trace is only attached when include_stack is set, which the
    handlers below do in development mode only.
    """
    result: dict[str, Any] = {
        "success": False,
        "message": message,
        "code": code,
    }
    if suggestion:
        result["suggestion"] = suggestion
    if details:
        result["details"] = details
    if include_stack and exc is not None:
        result["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return result


def error_response(exc: FoodAPIException, headers: dict[str, str] | None = None) -> JSONResponse:
    """Render a FoodAPIException without going through the app handlers."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers,
    )


def resolve_status_code(exc: BaseException) -> int:
    """Use the error's own status when it is a 4xx/5xx code, else 500."""
    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int) and 400 <= status_code < 600:
        return status_code
    return 500


def _include_stack(request: Request) -> bool:
    context = getattr(request.app.state, "context", None)
    return bool(context is not None and context.settings.is_development)


# =============================================================================
# Exception Handlers
# =============================================================================

async def foodapi_exception_handler(
    request: Request,
    exc: FoodAPIException
) -> JSONResponse:
    """Convert FoodAPIException to JSON response."""
    body = exc.to_dict()
    if _include_stack(request):
        body = error_body(
            exc.message,
            code=exc.code,
            suggestion=exc.suggestion,
            details=exc.details,
            exc=exc,
            include_stack=True,
        )
    return JSONResponse(status_code=resolve_status_code(exc), content=body)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """
    Handle HTTP errors raised by routing and route collaborators.

    An unmatched path reaches this handler as a plain 404; it is turned
    into the not-found body naming the requested path.
    """
    if exc.status_code == 404 and exc.detail in (None, "Not Found"):
        not_found = NotFoundError(request.url.path)
        return JSONResponse(status_code=404, content=not_found.to_dict())

    code = "METHOD_NOT_ALLOWED" if exc.status_code == 405 else "HTTP_ERROR"
    return JSONResponse(
        status_code=resolve_status_code(exc),
        content=error_body(str(exc.detail), code=code),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle request validation errors from route collaborators."""
    return JSONResponse(
        status_code=422,
        content=error_body(
            "Validation error",
            code="VALIDATION_ERROR",
            details={"errors": jsonable_errors(exc)},
        ),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Last resort for errors raised outside the request pipeline.

    Route errors are normally caught by ErrorBoundaryMiddleware, so their
    responses still pass back through the pipeline stages.
    """
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {exc}")
    return unexpected_error_response(exc, include_stack=_include_stack(request))


def unexpected_error_response(exc: BaseException, include_stack: bool = False) -> JSONResponse:
    """Render an unhandled error; the real message is shown only with the stack."""
    message = str(exc) if include_stack and str(exc) else "An unexpected error occurred"
    return JSONResponse(
        status_code=resolve_status_code(exc),
        content=error_body(
            message,
            code="INTERNAL_ERROR",
            exc=exc,
            include_stack=include_stack,
        ),
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    """Keep only the JSON-safe parts of pydantic's error list."""
    return [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the terminal error responders to the application."""
    app.add_exception_handler(FoodAPIException, foodapi_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
