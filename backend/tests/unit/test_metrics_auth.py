"""Tests for the Prometheus metrics admin app (separate port + basic auth)."""

import base64
import pytest
from starlette.testclient import TestClient

from invest_tracker.core import metrics
from invest_tracker.core.metrics import create_metrics_app
from invest_tracker.config import settings as real_settings


def _basic_auth_header(username: str, password: str) -> str:
    credentials = base64.b64encode(f"{username}:{password}".encode()).decode()
    return f"Basic {credentials}"


_USERNAME = real_settings.METRICS_USERNAME
_PASSWORD = real_settings.METRICS_PASSWORD


@pytest.fixture(scope="module")
def metrics_client():
    """Starlette test client for the metrics admin ASGI app."""
    app = create_metrics_app()
    return TestClient(app, raise_server_exceptions=True)


@pytest.mark.unit
class TestMetricsAdminApp:
    """Tests for create_metrics_app() HTTP Basic Auth gate."""

    def test_no_auth_header_returns_401(self, metrics_client):
        """Requests with no Authorization header should get 401."""
        response = metrics_client.get("/metrics", headers={})
        assert response.status_code == 401
        assert "WWW-Authenticate" in response.headers

    def test_wrong_credentials_returns_401(self, metrics_client):
        """Requests with bad credentials should get 401."""
        response = metrics_client.get(
            "/metrics",
            headers={"Authorization": _basic_auth_header(_USERNAME, "wrongpass")},
        )
        assert response.status_code == 401

    def test_bearer_scheme_returns_401(self, metrics_client):
        """Bearer tokens should not be accepted on the metrics endpoint."""
        response = metrics_client.get("/metrics", headers={"Authorization": "Bearer sometoken"})
        assert response.status_code == 401

    def test_malformed_base64_returns_401(self, metrics_client):
        """Malformed base64 in Authorization header should return 401 gracefully."""
        response = metrics_client.get(
            "/metrics",
            headers={"Authorization": "Basic !!!not_valid_base64!!!"},
        )
        assert response.status_code == 401

    def test_correct_credentials_returns_prometheus_text(self, metrics_client):
        """Correct credentials should return 200 with Prometheus text format."""
        response = metrics_client.get(
            "/metrics",
            headers={"Authorization": _basic_auth_header(_USERNAME, _PASSWORD)},
        )
        assert response.status_code == 200
        assert "text/plain" in response.headers.get("content-type", "")

    def test_domain_counters_are_exported(self, metrics_client):
        """Ledger and snapshot counters should appear once incremented."""
        metrics.track_ledger_mutation("create", "buy")
        metrics.track_snapshots(2)

        response = metrics_client.get(
            "/metrics",
            headers={"Authorization": _basic_auth_header(_USERNAME, _PASSWORD)},
        )

        assert 'ledger_mutations_total{operation="create",transaction_type="buy"}' in response.text
        assert "portfolio_snapshots_total" in response.text

    def test_password_with_colon_is_rejected_cleanly(self, metrics_client):
        """Credentials split on the first ':' only, without crashing."""
        response = metrics_client.get(
            "/metrics",
            headers={"Authorization": _basic_auth_header(_USERNAME, "pass:with:colon")},
        )
        assert response.status_code == 401
