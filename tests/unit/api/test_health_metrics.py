"""
Name: Health / Readiness / Metrics Endpoint Tests

Responsibilities:
  - /healthz reports store connectivity and request id
  - /readyz returns 503 when the store is down
  - /metrics exposes Prometheus text, optionally admin-only
  - request series are labelled by route template, not by raw path
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from portal_auth.api.main import create_app
from portal_auth.container import PortalContainer
from portal_auth.identity.users import UserRole


@pytest.mark.unit
class TestHealth:
    def test_healthz(self, client):
        res = client.get("/healthz", headers={"X-Request-Id": "req-123"})
        assert res.status_code == 200
        body = res.json()
        assert body["ok"] is True
        assert body["db"] == "connected"
        assert body["request_id"] == "req-123"
        assert res.headers["X-Request-Id"] == "req-123"

    def test_readyz(self, client):
        assert client.get("/readyz").json() == {"ready": True}

    def test_readyz_store_down(self, client, store):
        with patch.object(store, "ping", return_value=False):
            res = client.get("/readyz")
        assert res.status_code == 503
        assert res.json() == {"ready": False}


@pytest.mark.unit
class TestMetrics:
    def test_metrics_open_by_default(self, client):
        client.post("/api/auth/login", json={"username": "staff", "password": "staff"})
        res = client.get("/metrics")
        assert res.status_code == 200
        assert "portal_login_attempts_total" in res.text

    def test_unmatched_paths_share_one_series(self, client):
        for i in range(20):
            assert client.get(f"/scan-{i}-abc").status_code == 404
        client.request("BREW", "/scan-pot")

        text = client.get("/metrics").text
        series = [
            line
            for line in text.splitlines()
            if line.startswith("portal_requests_total{")
        ]
        assert not any("scan-" in line for line in series)
        assert any(
            'endpoint="unmatched"' in line and 'method="GET"' in line
            for line in series
        )
        assert any('method="OTHER"' in line for line in series)

    def test_matched_routes_use_template(self, client, auth_headers):
        client.delete(
            "/api/user/users/4242",
            headers=auth_headers(UserRole.ADMIN, subject="admin", demo=True),
        )
        text = client.get("/metrics").text
        assert 'endpoint="/api/user/users/{user_id}"' in text
        assert "/api/user/users/4242" not in text

    def test_metrics_require_admin_when_configured(self, settings, store, auth_headers):
        locked = settings.model_copy(update={"metrics_require_auth": True})
        container = PortalContainer(locked, store=store)

        with TestClient(create_app(container)) as locked_client:
            anonymous = locked_client.get("/metrics")
            staff = locked_client.get(
                "/metrics", headers=auth_headers(UserRole.STAFF)
            )
            admin = locked_client.get(
                "/metrics", headers=auth_headers(UserRole.ADMIN)
            )

        assert anonymous.status_code == 401
        assert staff.status_code == 403
        assert admin.status_code == 200
