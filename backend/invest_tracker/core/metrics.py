"""
Prometheus metrics instrumentation.

HTTP metrics come from prometheus-fastapi-instrumentator; domain counters
track ledger mutations, holding reconciliations, snapshots and price fetches.

Metrics are exposed on a SEPARATE admin port (default 9090) protected by HTTP
Basic Auth, never on the public API port.

Dev access: curl -u admin:metrics_admin http://localhost:9090/metrics
"""

import base64
import binascii
import hmac

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from prometheus_fastapi_instrumentator import Instrumentator, metrics
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route
from starlette.types import ASGIApp

from invest_tracker.config import settings


ledger_mutations_total = Counter(
    "ledger_mutations_total",
    "Ledger writes by operation and transaction type",
    ["operation", "transaction_type"],  # create/update/delete, buy/sell
)

ledger_rejections_total = Counter(
    "ledger_rejections_total",
    "Ledger writes rejected for insufficient holdings",
    ["operation"],
)

holding_reconciliations_total = Counter(
    "holding_reconciliations_total",
    "Holding recalculations from the transaction ledger",
)

portfolio_snapshots_total = Counter(
    "portfolio_snapshots_total",
    "Per-category snapshot rows written (inserted or overwritten)",
)

price_fetch_total = Counter(
    "price_fetch_total",
    "External price source calls",
    ["source", "status"],  # success, failure
)

price_fetch_duration_seconds = Histogram(
    "price_fetch_duration_seconds",
    "External price source latency in seconds",
    ["source"],
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)


def setup_metrics(app: FastAPI) -> None:
    """
    Instrument the FastAPI app with Prometheus metrics collectors.

    Does NOT expose a /metrics route on the main API port.
    Metrics are served on a separate admin port via create_metrics_app().
    """
    instrumentator = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/health", "/docs", "/openapi.json"],
        env_var_name="ENABLE_METRICS",
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True,
    )

    instrumentator.add(
        metrics.latency(
            should_include_handler=True,
            should_include_method=True,
            should_include_status=True,
            buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
        )
    )

    instrumentator.add(
        metrics.requests(
            should_include_handler=True,
            should_include_method=True,
            should_include_status=True,
        )
    )

    # Instrument only, /metrics lives on the admin port
    instrumentator.instrument(app)


def _unauthorized() -> Response:
    return Response(
        content="Unauthorized",
        status_code=401,
        headers={"WWW-Authenticate": 'Basic realm="metrics"'},
    )


def create_metrics_app() -> ASGIApp:
    """
    Create a minimal ASGI app that serves /metrics behind HTTP Basic Auth.

    Runs on METRICS_ADMIN_PORT; credentials come from METRICS_USERNAME and
    METRICS_PASSWORD.
    """

    async def metrics_endpoint(request: Request) -> Response:
        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Basic "):
            return _unauthorized()

        try:
            decoded = base64.b64decode(auth_header[6:]).decode("utf-8", errors="replace")
            username, password = decoded.split(":", 1)
        except (binascii.Error, ValueError):
            return _unauthorized()

        if not (
            hmac.compare_digest(username, settings.METRICS_USERNAME)
            and hmac.compare_digest(password, settings.METRICS_PASSWORD)
        ):
            return _unauthorized()

        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return Starlette(routes=[Route("/metrics", metrics_endpoint)])


def track_ledger_mutation(operation: str, transaction_type: str) -> None:
    ledger_mutations_total.labels(operation=operation, transaction_type=transaction_type).inc()


def track_ledger_rejection(operation: str) -> None:
    ledger_rejections_total.labels(operation=operation).inc()


def track_reconciliation() -> None:
    holding_reconciliations_total.inc()


def track_snapshots(count: int) -> None:
    portfolio_snapshots_total.inc(count)


def track_price_fetch(source: str, status: str, duration_seconds: float) -> None:
    """Track an external price source call."""
    price_fetch_duration_seconds.labels(source=source).observe(duration_seconds)
    price_fetch_total.labels(source=source, status=status).inc()
