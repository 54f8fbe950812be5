"""Production error handler middleware with PII redaction."""

import logging
from typing import Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from invest_tracker.config import settings
from invest_tracker.utils.logging_utils import redact_ip, redact_username

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware for handling uncaught exceptions.

    - Logs errors with PII redaction
    - Returns the standard error envelope (no stack traces in production)
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Handle request and catch any uncaught exceptions."""
        try:
            return await call_next(request)

        except Exception as exc:
            username = getattr(request.state, "username", None)
            client_host = request.client.host if request.client else None

            logger.error(
                "Unhandled error | method=%s | path=%s | user=%s | ip=%s | error=%s",
                request.method,
                request.url.path,
                redact_username(username),
                redact_ip(client_host),
                type(exc).__name__,
                exc_info=exc,
            )

            if settings.DEBUG:
                content = {
                    "success": False,
                    "message": str(exc),
                    "type": type(exc).__name__,
                }
            else:
                # Never expose internals
                content = {
                    "success": False,
                    "message": "An unexpected error occurred. Please try again later.",
                }

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content
            )
