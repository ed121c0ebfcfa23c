"""Tests for global exception handlers.

Validates that all exception types are handled consistently with
proper HTTP status codes, error format, and no information leakage.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.errors import (
    AppError,
    AuthenticationAppError,
    AuthorizationAppError,
    NotFoundAppError,
    ValidationAppError,
)
from app.core.exception_handlers import general_exception_handler, setup_exception_handlers


@pytest.fixture
def app_with_handlers() -> FastAPI:
    """Create FastAPI app with exception handlers registered."""
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers, raise_server_exceptions=False)


class TestAppErrorHandler:
    """Test handler for AppError and subclasses."""

    @pytest.mark.parametrize(
        ("error", "expected_status"),
        [
            (ValidationAppError(code="weak_password", message="Too weak"), 400),
            (AuthenticationAppError(code="invalid_session", message="Expired"), 401),
            (AuthorizationAppError(code="forbidden", message="Not yours"), 403),
            (NotFoundAppError(code="post_not_found", message="Post not found"), 404),
        ],
    )
    def test_maps_error_type_to_status(
        self,
        client: TestClient,
        app_with_handlers: FastAPI,
        error: AppError,
        expected_status: int,
    ) -> None:
        @app_with_handlers.get("/raise")
        async def endpoint():
            raise error

        response = client.get("/raise")

        assert response.status_code == expected_status
        data = response.json()
        assert data["error"]["code"] == error.code
        assert data["error"]["message"] == error.message
        assert "request_id" in data["error"]

    def test_validation_error_includes_details(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/test-validation-details")
        async def endpoint():
            raise ValidationAppError(
                code="content_too_short",
                message="Post content must be at least 10 characters to publish",
                details={"field": "content", "min_value": 10, "actual_value": 4},
            )

        response = client.get("/test-validation-details")

        assert response.status_code == 400
        details = response.json()["error"]["details"]
        assert details == {"field": "content", "min_value": 10, "actual_value": 4}

    def test_details_omitted_when_empty(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/no-details")
        async def endpoint():
            raise NotFoundAppError(code="user_not_found", message="User not found")

        assert "details" not in client.get("/no-details").json()["error"]

    def test_authentication_error_sets_www_authenticate(
        self, client: TestClient, app_with_handlers: FastAPI
    ):
        @app_with_handlers.get("/test-auth")
        async def endpoint():
            raise AuthenticationAppError(code="invalid_credentials", message="Invalid email or password")

        response = client.get("/test-auth")

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"


class TestGeneralExceptionHandler:
    """Test fallback handler for unexpected exceptions."""

    def test_unexpected_exception_returns_500(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/boom")
        async def endpoint():
            raise RuntimeError("store corrupted")

        response = client.get("/boom")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "internal_server_error"
        assert "store corrupted" not in response.text

    def test_general_exception_handler_never_leaks_stack_trace(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        response = asyncio.run(general_exception_handler(request, ValueError("Test error with details")))

        response_text = bytes(response.body).decode()
        data = json.loads(response_text)
        assert response.status_code == 500
        assert "request_id" in data["error"]
        assert "Traceback" not in response_text
        assert "ValueError" not in response_text


class TestErrorHandlerIntegration:
    """Integration tests for exception handler setup."""

    def test_setup_exception_handlers_registers_handlers(self, app_with_handlers: FastAPI):
        assert AppError in app_with_handlers.exception_handlers
        assert Exception in app_with_handlers.exception_handlers

    def test_multiple_handler_setups_does_not_fail(self):
        app = FastAPI()

        setup_exception_handlers(app)
        setup_exception_handlers(app)

        assert AppError in app.exception_handlers
