"""FastAPI main application."""

import asyncio
from contextlib import asynccontextmanager
from decimal import Decimal

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from invest_tracker.api.v1 import auth, categories, expenses, portfolio, prices, transactions
from invest_tracker.config import settings
from invest_tracker.core.database import close_db, init_db
from invest_tracker.core.exceptions import InvestTrackerError
from invest_tracker.core.logging_config import get_logger, setup_logging
from invest_tracker.core.metrics import create_metrics_app, setup_metrics
from invest_tracker.middleware.error_handler import ErrorHandlerMiddleware
from invest_tracker.middleware.request_logging import (
    RequestLoggingMiddleware,
    UserContextMiddleware,
)

logger = get_logger(__name__)

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    setup_logging()
    logger.info("app_starting", name=settings.APP_NAME, version=settings.APP_VERSION)

    await init_db()

    # Prometheus metrics on a separate admin port, protected by basic auth
    metrics_task = None
    if settings.METRICS_ENABLED:
        import uvicorn

        metrics_config = uvicorn.Config(
            create_metrics_app(),
            host="0.0.0.0",  # nosec B104, metrics port is internal-only and behind basic auth
            port=settings.METRICS_ADMIN_PORT,
            log_level="warning",
        )
        metrics_task = asyncio.create_task(uvicorn.Server(metrics_config).serve())
        logger.info("metrics_server_started", port=settings.METRICS_ADMIN_PORT)

    yield

    logger.info("app_stopping", name=settings.APP_NAME)
    if metrics_task is not None:
        metrics_task.cancel()
    await close_db()


# Interactive API docs only in debug
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)

# Instrument the app with Prometheus (metrics served on admin port, not here)
if settings.METRICS_ENABLED:
    setup_metrics(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error handler - Catch uncaught exceptions with PII redaction
app.add_middleware(ErrorHandlerMiddleware)

# User context extraction - Extract user from JWT for logging (runs BEFORE logging middleware)
app.add_middleware(UserContextMiddleware)

# Request logging - request ids and timings
app.add_middleware(RequestLoggingMiddleware)


def _make_json_serializable(obj):
    """Recursively convert non-JSON-serializable types to serializable ones."""
    if isinstance(obj, dict):
        return {k: _make_json_serializable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_make_json_serializable(i) for i in obj]
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, type):
        return str(obj)
    if isinstance(obj, Exception):
        return str(obj)
    return obj


def _error(status_code: int, message: str, errors=None, headers=None) -> JSONResponse:
    content = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@app.exception_handler(InvestTrackerError)
async def domain_exception_handler(request: Request, exc: InvestTrackerError):
    logger.info(
        "request_rejected",
        path=request.url.path,
        status=exc.status_code,
        error=type(exc).__name__,
        message=exc.message,
    )
    return _error(exc.status_code, exc.message, exc.errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.debug("request_validation_failed", path=request.url.path, errors=len(exc.errors()))
    return _error(422, "Validation failed", _make_json_serializable(exc.errors()))


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"success": True, "message": "OK", "data": {"status": "healthy"}}


app.include_router(auth.router, prefix=f"{API_PREFIX}/auth", tags=["Authentication"])
app.include_router(categories.router, prefix=f"{API_PREFIX}/categories", tags=["Categories"])
app.include_router(
    transactions.router, prefix=f"{API_PREFIX}/transactions", tags=["Transactions"]
)
app.include_router(portfolio.router, prefix=f"{API_PREFIX}/portfolio", tags=["Portfolio"])
app.include_router(prices.router, prefix=f"{API_PREFIX}/price", tags=["Prices"])
app.include_router(expenses.router, prefix=f"{API_PREFIX}/expenses", tags=["Expenses"])
