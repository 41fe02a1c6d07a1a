# =============================================================================
# tests/test_errors.py - Terminal Handler Tests
# =============================================================================
# Tests for the not-found responder and the centralized error responder.
# =============================================================================

import json
import logging

import pytest
from fastapi import APIRouter, Request
from pydantic import BaseModel

from foodapi.dependencies import DatabaseDep
from foodapi.exceptions import (
    FoodAPIException,
    NotFoundError,
    error_body,
    resolve_status_code,
    unhandled_exception_handler,
)
from foodapi.main import create_app
from foodapi.middleware.error_boundary import ErrorBoundaryMiddleware


class OrderIn(BaseModel):
    dish_id: str
    quantity: int


class StatusError(Exception):
    def __init__(self, status_code):
        super().__init__("status error")
        self.status_code = status_code


def _failing_router() -> APIRouter:
    router = APIRouter()

    @router.get("/conflict")
    async def conflict():
        raise FoodAPIException(
            "Dish already in cart",
            code="CART_CONFLICT",
            status_code=409,
            suggestion="Update the quantity instead",
        )

    @router.get("/boom")
    async def boom():
        raise RuntimeError("secret internals")

    @router.get("/teapot")
    async def teapot():
        raise StatusError(418)

    @router.get("/only-get")
    async def only_get():
        return {"ok": True}

    @router.post("")
    async def create_order(order: OrderIn):
        return order

    @router.get("/db")
    async def uses_db(db: DatabaseDep):
        return {"db": "ok"}

    return router


@pytest.fixture
def make_failing_client(make_client):
    def _make(**settings_overrides):
        return make_client(collaborators={"orders": _failing_router()}, **settings_overrides)
    return _make


class TestNotFound:
    """Test the not-found responder."""

    @pytest.mark.parametrize("path", ["/api/nonexistent", "/nowhere", "/api/dishes"])
    def test_unmatched_path(self, client, path):
        response = client.get(path)

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "message": f"Not Found - {path}",
            "code": "NOT_FOUND",
            "details": {"path": path},
        }

    def test_wrong_method(self, make_failing_client):
        """Test a 405 keeps the JSON error shape."""
        response = make_failing_client().post("/api/orders/only-get")

        assert response.status_code == 405
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "METHOD_NOT_ALLOWED"


class TestErrorHandler:
    """Test the centralized error responder."""

    def test_foodapi_exception(self, make_failing_client):
        response = make_failing_client().get("/api/orders/conflict")

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "message": "Dish already in cart",
            "code": "CART_CONFLICT",
            "suggestion": "Update the quantity instead",
        }

    def test_unexpected_error_production_hides_stack(self, make_failing_client):
        response = make_failing_client(NODE_ENV="production").get("/api/orders/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "INTERNAL_ERROR"
        assert body["message"] == "An unexpected error occurred"
        assert "stack" not in body
        assert "secret internals" not in response.text

    def test_unexpected_error_development_includes_stack(self, make_failing_client):
        response = make_failing_client(NODE_ENV="development").get("/api/orders/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "secret internals"
        assert "RuntimeError: secret internals" in body["stack"]

    def test_foodapi_exception_development_includes_stack(self, make_failing_client):
        response = make_failing_client(NODE_ENV="development").get("/api/orders/conflict")
        assert "FoodAPIException" in response.json()["stack"]

    def test_status_taken_from_error(self, make_failing_client):
        response = make_failing_client().get("/api/orders/teapot")
        assert response.status_code == 418

    def test_validation_error(self, make_failing_client):
        response = make_failing_client().post("/api/orders", json={"dish_id": "d1"})

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"]["errors"][0]["loc"] == ["body", "quantity"]

    def test_database_not_connected(self, make_failing_client):
        response = make_failing_client().get("/api/orders/db")

        assert response.status_code == 503
        assert response.json()["code"] == "DATABASE_UNAVAILABLE"

    def test_server_keeps_serving_after_error(self, make_failing_client):
        client = make_failing_client()
        assert client.get("/api/orders/boom").status_code == 500
        assert client.get("/api/health").status_code == 200



class TestErrorsPassThroughPipeline:
    """A 500 from a route still gets the headers every other response gets."""

    def test_security_headers_on_500(self, make_failing_client):
        response = make_failing_client(NODE_ENV="production").get("/api/orders/boom")

        assert response.status_code == 500
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "SAMEORIGIN"

    def test_cors_header_on_500(self, make_failing_client):
        response = make_failing_client(NODE_ENV="development").get(
            "/api/orders/boom", headers={"Origin": "http://localhost:5173"}
        )

        assert response.status_code == 500
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_rate_limit_headers_on_500(self, make_failing_client):
        response = make_failing_client(RATE_LIMIT_MAX=5).get("/api/orders/boom")

        assert response.status_code == 500
        assert response.headers["x-ratelimit-limit"] == "5"
        assert response.headers["x-ratelimit-remaining"] == "4"

    def test_error_is_logged(self, make_failing_client, caplog):
        with caplog.at_level(logging.ERROR, logger="foodapi.middleware.error_boundary"):
            make_failing_client().get("/api/orders/boom")

        assert "Unexpected error on GET /api/orders/boom: secret internals" in caplog.text


class TestErrorBoundaryMiddleware:
    """Test the innermost stage on its own."""

    async def test_error_after_response_started_is_reraised(self):
        async def half_sent(scope, receive, send):
            await send({"type": "http.response.start", "status": 200, "headers": []})
            raise RuntimeError("stream broke")

        sent = []

        async def send(message):
            sent.append(message)

        middleware = ErrorBoundaryMiddleware(half_sent)
        scope = {"type": "http", "method": "GET", "path": "/api/orders", "headers": []}

        with pytest.raises(RuntimeError, match="stream broke"):
            await middleware(scope, None, send)

        assert [m["type"] for m in sent] == ["http.response.start"]

    async def test_non_http_scope_passes_through(self):
        seen = []

        async def app(scope, receive, send):
            seen.append(scope["type"])

        await ErrorBoundaryMiddleware(app)({"type": "lifespan"}, None, None)

        assert seen == ["lifespan"]

class TestHelpers:
    async def test_unhandled_exception_handler(self, make_context):
        """Test the app-level fallback renders the same 500 body."""
        app = create_app(make_context(NODE_ENV="production"))
        request = Request({"type": "http", "method": "GET", "path": "/x", "headers": [], "app": app})

        response = await unhandled_exception_handler(request, RuntimeError("hidden"))

        assert response.status_code == 500
        assert json.loads(response.body) == {
            "success": False,
            "message": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }

    @pytest.mark.parametrize(
        "status_code,expected",
        [(404, 404), (503, 503), (200, 500), (302, 500), (None, 500), ("400", 500)],
    )
    def test_resolve_status_code(self, status_code, expected):
        assert resolve_status_code(StatusError(status_code)) == expected

    def test_error_body_minimal(self):
        assert error_body("nope", code="X") == {"success": False, "message": "nope", "code": "X"}

    def test_error_body_stack_needs_exception(self):
        assert "stack" not in error_body("nope", code="X", include_stack=True)

    def test_not_found_error(self):
        exc = NotFoundError("/api/missing")
        assert exc.status_code == 404
        assert exc.to_dict()["message"] == "Not Found - /api/missing"
