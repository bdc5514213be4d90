"""
Unit tests for the Gamepass service routes.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_gamepass.app.main import GamepassService, FETCH_FAILED_MESSAGE
from service_gamepass.app.domain.models import GamePass
from shared.errors import TransientUpstreamError, ValidationError


class TestGamepassService:
    """Test cases for GamepassService."""

    @pytest.fixture
    def resolver(self):
        """Resolver stub with scripted lookups."""
        resolver = MagicMock()
        resolver.get_gamepasses = AsyncMock(return_value=[GamePass(id=55, name="VIP", price=100)])
        resolver.close = AsyncMock()
        resolver.cache.purge_expired.return_value = 1
        resolver.cache.stats.return_value = {"entries": 2, "max_entries": 10000, "ttl_seconds": 60.0}
        resolver.coordinator.__len__.return_value = 0
        return resolver

    @pytest.fixture
    def service(self, resolver):
        """Create GamepassService instance."""
        return GamepassService(resolver=resolver)

    @pytest.fixture
    def client(self, service):
        """Create test client."""
        return TestClient(service.app)

    def test_root_endpoint(self, client):
        """Test root banner."""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "du81 gamepass proxy"
        assert isinstance(data["timestamp"], int)

    def test_health_endpoint(self, client, resolver):
        """Test health endpoint reports shared state."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "gamepass"
        assert data["status"] == "ok"
        assert data["dependencies"]["result_cache"] == "2/10000 entries, ttl 60s"
        assert data["dependencies"]["in_flight"] == "0 traversals"
        resolver.cache.purge_expired.assert_called_once_with()

    def test_metrics_endpoint(self, client):
        """Test Prometheus exposition."""
        client.get("/")
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "http_requests_total" in response.text

    def test_get_gamepasses_success(self, client, resolver):
        """Test the success payload shape."""
        response = client.get("/gamepasses/123")

        assert response.status_code == 200
        assert response.json() == {"gamePasses": [{"id": 55, "name": "VIP", "price": 100}]}
        resolver.get_gamepasses.assert_awaited_once_with("123")
        assert "X-Request-ID" in response.headers

    def test_get_gamepasses_empty(self, client, resolver):
        """Test an empty result is a 200."""
        resolver.get_gamepasses.return_value = []

        response = client.get("/gamepasses/123")

        assert response.status_code == 200
        assert response.json() == {"gamePasses": []}

    def test_get_gamepasses_validation_error(self, client, resolver):
        """Test blank ids map to 400."""
        resolver.get_gamepasses.side_effect = ValidationError("missing userId")

        response = client.get("/gamepasses/%20%20")

        assert response.status_code == 400
        assert response.json() == {"error": "missing userId"}

    def test_get_gamepasses_upstream_failure_is_generic(self, client, resolver):
        """Test upstream detail is not exposed."""
        resolver.get_gamepasses.side_effect = TransientUpstreamError(
            "HTTP 503", details={"body": "secret upstream body"}, status=503
        )

        response = client.get("/gamepasses/123")

        assert response.status_code == 500
        assert response.json() == {"error": FETCH_FAILED_MESSAGE}
        assert "secret" not in response.text

    def test_get_gamepasses_unexpected_failure(self, client, resolver):
        """Test unexpected errors also produce the generic message."""
        resolver.get_gamepasses.side_effect = RuntimeError("boom")

        response = client.get("/gamepasses/123")

        assert response.status_code == 500
        assert response.json() == {"error": FETCH_FAILED_MESSAGE}

    def test_service_initialization(self, service):
        """Test default wiring."""
        assert service.service_name == "gamepass"
        assert service.resolver is not None

    def test_default_resolver_built_from_config(self):
        """Test the service builds its own resolver."""
        service = GamepassService()

        assert service.resolver.cache.ttl_seconds == 60.0
        assert service.resolver.pager.page_limit == 100
        assert service.resolver.pager.transport.retry_config.max_retries == 3
