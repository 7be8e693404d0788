"""
Shared fixtures for gateway tests.

The upstream client is an AsyncMock placed on app.state, so every outbound
call can be counted and inspected. Upstream answers are real httpx.Response
objects.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from strava_gateway.main import create_application
from strava_gateway.tests.factories import make_settings


@pytest.fixture
def mock_settings():
    """Fully configured settings"""
    return make_settings()


@pytest.fixture
def mock_http_client():
    """Mock upstream HTTP client"""
    return AsyncMock()


@pytest.fixture(autouse=True)
def patch_get_settings(mock_settings):
    """Route every settings lookup to mock_settings"""
    with patch("strava_gateway.main.get_settings", return_value=mock_settings), \
            patch("strava_gateway.auth.routes.get_settings", return_value=mock_settings), \
            patch("strava_gateway.proxy.routes.get_settings", return_value=mock_settings):
        yield


@pytest.fixture
def app(mock_http_client):
    """Create test FastAPI application with the mock upstream client"""
    app = create_application()
    app.state.http_client = mock_http_client
    return app


@pytest.fixture
def client(app):
    """Test client that does not follow redirects (no lifespan)"""
    return TestClient(app, follow_redirects=False)


@pytest.fixture
def auth_headers():
    """Authorization header as the SPA sends it"""
    return {"Authorization": "Bearer strava-access-token"}
