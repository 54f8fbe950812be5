"""Request/response logging middleware for audit trails."""

import logging
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from jose import JWTError
from starlette.middleware.base import BaseHTTPMiddleware

from invest_tracker.core.security import decode_token
from invest_tracker.utils.logging_utils import redact_ip, redact_username


logger = logging.getLogger(__name__)


class UserContextMiddleware(BaseHTTPMiddleware):
    """
    Extract the username from a bearer token into request state for logging.

    Does NOT authenticate; get_current_user does that.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        auth_header = request.headers.get("Authorization")

        if auth_header and auth_header.startswith("Bearer "):
            token = auth_header.replace("Bearer ", "")
            try:
                payload = decode_token(token)
                if payload.get("username"):
                    request.state.username = payload["username"]
            except JWTError:
                # Invalid or expired, the auth dependency will reject it
                pass

        return await call_next(request)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every API request with a request id and its response time.

    The request id is bound into structlog's context vars so service-level
    log lines carry it, and echoed back in the X-Request-ID header.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        start_time = time.time()

        method = request.method
        path = request.url.path
        client_host = request.client.host if request.client else "unknown"
        username = getattr(request.state, "username", None)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        request.state.request_id = request_id

        logger.info(
            f"Request started | id={request_id} | method={method} | path={path} | "
            f"user={redact_username(username)} | ip={redact_ip(client_host)}"
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.error(
                f"Request failed | id={request_id} | method={method} | path={path} | "
                f"duration={duration_ms}ms | error={type(e).__name__}"
            )
            raise

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(
            f"Request completed | id={request_id} | method={method} | path={path} | "
            f"status={response.status_code} | duration={duration_ms}ms"
        )

        response.headers["X-Request-ID"] = request_id
        return response
