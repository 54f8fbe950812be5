"""Unit tests for error handler middleware."""

import json

import pytest
from unittest.mock import Mock, patch
from fastapi import Request, Response

from invest_tracker.middleware.error_handler import ErrorHandlerMiddleware


@pytest.mark.unit
class TestErrorHandlerMiddleware:
    """Test error handler middleware."""

    @pytest.fixture
    def middleware(self):
        """Create middleware instance."""
        app = Mock()
        return ErrorHandlerMiddleware(app)

    @pytest.fixture
    def mock_request(self):
        """Create mock request."""
        request = Mock(spec=Request)
        request.method = "GET"
        request.url = Mock()
        request.url.path = "/api/portfolio/overview"
        request.client = Mock()
        request.client.host = "127.0.0.1"
        request.state = Mock()
        request.state.username = "investor42"
        return request

    @pytest.fixture
    def mock_call_next_success(self):
        """Create mock call_next that succeeds."""
        async def call_next(request):
            response = Mock(spec=Response)
            response.status_code = 200
            return response

        return call_next

    @pytest.fixture
    def mock_call_next_error(self):
        """Create mock call_next that raises error."""
        async def call_next(request):
            raise ValueError("Test error")

        return call_next

    @pytest.mark.asyncio
    async def test_passes_through_successful_requests(self, middleware, mock_request, mock_call_next_success):
        """Should pass through successful requests unchanged."""
        response = await middleware.dispatch(mock_request, mock_call_next_success)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_catches_exceptions(self, middleware, mock_request, mock_call_next_error):
        """Should catch exceptions and return a 500 error envelope."""
        response = await middleware.dispatch(mock_request, mock_call_next_error)

        assert response.status_code == 500
        assert json.loads(response.body)["success"] is False

    @pytest.mark.asyncio
    async def test_logs_with_redacted_context(self, middleware, mock_request, mock_call_next_error):
        """Should log the failure with redacted user and ip."""
        with patch("invest_tracker.middleware.error_handler.logger") as mock_logger:
            await middleware.dispatch(mock_request, mock_call_next_error)

        args = mock_logger.error.call_args.args
        assert "/api/portfolio/overview" in args
        assert "i***2" in args
        assert "127.0.0.***" in args
        assert "investor42" not in args
        assert "ValueError" in args

    @pytest.mark.asyncio
    async def test_handles_missing_user_gracefully(self, middleware, mock_request, mock_call_next_error):
        """Should handle requests without a username in state."""
        del mock_request.state.username

        with patch("invest_tracker.middleware.error_handler.logger") as mock_logger:
            response = await middleware.dispatch(mock_request, mock_call_next_error)

        assert response.status_code == 500
        assert "N/A" in mock_logger.error.call_args.args

    @pytest.mark.asyncio
    async def test_handles_missing_client(self, middleware, mock_request, mock_call_next_error):
        """Should handle requests without client info."""
        mock_request.client = None

        response = await middleware.dispatch(mock_request, mock_call_next_error)
        assert response.status_code == 500

    @pytest.mark.asyncio
    @patch("invest_tracker.middleware.error_handler.settings")
    async def test_shows_detailed_error_in_debug_mode(self, mock_settings, middleware, mock_request, mock_call_next_error):
        """Should show detailed error in DEBUG mode."""
        mock_settings.DEBUG = True

        response = await middleware.dispatch(mock_request, mock_call_next_error)
        body = json.loads(response.body)
        assert body["message"] == "Test error"
        assert body["type"] == "ValueError"

    @pytest.mark.asyncio
    @patch("invest_tracker.middleware.error_handler.settings")
    async def test_hides_error_details_in_production(self, mock_settings, middleware, mock_request, mock_call_next_error):
        """Should hide error details in production."""
        mock_settings.DEBUG = False

        response = await middleware.dispatch(mock_request, mock_call_next_error)
        body = response.body.decode()
        assert "unexpected error" in body
        assert "Test error" not in body  # Should not leak implementation details
