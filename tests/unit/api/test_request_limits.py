"""Tests for API request size limits and health."""

from fastapi.testclient import TestClient

from basket_amm import __version__
from basket_amm.api.endpoints import get_registry
from basket_amm.api.main import app
from basket_amm.registry import PoolRegistry


class TestRequestSizeLimits:
    """Request body size limit."""

    def test_oversized_request_returns_413(self):
        """Request with Content-Length exceeding limit returns 413."""
        client = TestClient(app)
        response = client.post(
            "/pools/mUSD/quote/mint",
            json={"asset": "DAI", "amount": "1"},
            headers={"Content-Length": str(20 * 1024 * 1024)},  # 20 MB
        )
        assert response.status_code == 413
        assert response.json()["detail"] == "Request too large"

    def test_normal_request_reaches_router(self):
        """Normal-sized request is routed (unknown pool here)."""
        app.dependency_overrides[get_registry] = lambda: PoolRegistry()
        try:
            client = TestClient(app)
            response = client.post("/pools/mUSD/quote/mint", json={"asset": "DAI", "amount": "1"})
            assert response.status_code == 404
        finally:
            app.dependency_overrides.clear()


class TestHealthEndpoint:
    def test_health_returns_ok(self):
        client = TestClient(app)
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": __version__}
