"""Tests for the app factory: health, readiness, base path, correlation IDs."""

from fastapi.testclient import TestClient

from tangrat.api.app import app
from tangrat.api.factory import create_app
from tangrat.api.routes.dga import get_config_loader


def _paths(application) -> set[str]:
    return {route.path for route in application.routes}


class TestHealth:
    def test_module_app_health(self):
        response = TestClient(app).get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_ready_when_configured(self, gateway_env):
        response = TestClient(create_app(base_path="")).get("/health/ready")
        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "gateway": "https://api.egov.go.th",
            "env": "uat",
        }

    def test_ready_without_config(self, no_gateway_env):
        response = TestClient(create_app(base_path="")).get("/health/ready")
        assert response.status_code == 503
        assert response.json()["status"] == "unavailable"
        assert "ck-test" not in response.text


class TestBasePath:
    def test_default_no_prefix(self, monkeypatch):
        monkeypatch.delenv("BASE_PATH", raising=False)
        assert "/api/dga" in _paths(create_app())

    def test_prefix_from_env(self, monkeypatch):
        monkeypatch.setenv("BASE_PATH", "/test2/")
        paths = _paths(create_app())
        assert "/test2/api/dga" in paths
        assert "/api/dga" not in paths
        assert "/health" in paths

    def test_prefix_without_leading_slash(self):
        assert "/test2/api/dga" in _paths(create_app(base_path="test2"))

    def test_prefixed_route_served(self):
        application = create_app(base_path="/test2")
        application.dependency_overrides[get_config_loader] = lambda: (lambda: None)
        response = TestClient(application).post("/test2/api/dga", json={})
        assert response.status_code == 400


class TestCorrelationId:
    def test_generates_correlation_id(self):
        response = TestClient(create_app(base_path="")).get("/health")
        cid = response.headers["X-Correlation-ID"]
        assert len(cid) == 36

    def test_preserves_incoming_correlation_id(self):
        response = TestClient(create_app(base_path="")).get(
            "/health", headers={"X-Correlation-ID": "test-123"}
        )
        assert response.headers["X-Correlation-ID"] == "test-123"

    def test_replaces_oversized_correlation_id(self):
        response = TestClient(create_app(base_path="")).get(
            "/health", headers={"X-Correlation-ID": "x" * 500}
        )
        assert len(response.headers["X-Correlation-ID"]) == 36
