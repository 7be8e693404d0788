"""
Application Tests
=================

Status endpoints, CORS allow-listing, lifespan and error rendering.
"""

import httpx
from fastapi import status
from fastapi.testclient import TestClient

from strava_gateway.errors import ClientInputError, GatewayError
from strava_gateway.main import create_application


def test_root_status(client):
    response = client.get("/")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok", "message": "Strava proxy server is running"}


def test_health_status(client, mock_http_client):
    response = client.get("/health")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"status": "ok"}
    assert mock_http_client.get.await_count == 0


# ============================================================================
# CORS Tests
# ============================================================================

def test_cors_allows_frontend_origin_with_credentials(client):
    response = client.get("/health", headers={"Origin": "http://localhost:5173"})

    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_cors_allows_configured_extra_origin(client):
    response = client.options(
        "/api/strava/athlete",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
            "Access-Control-Request-Headers": "Authorization",
        },
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_cors_rejects_unlisted_origin(client):
    """Test that origins outside the allow-list get no CORS grant"""
    response = client.get("/health", headers={"Origin": "https://evil.example.com"})

    assert response.status_code == status.HTTP_200_OK
    assert "access-control-allow-origin" not in response.headers


def test_cors_preflight_rejects_unlisted_origin(client):
    response = client.options(
        "/auth/strava/refresh",
        headers={
            "Origin": "https://evil.example.com",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "access-control-allow-origin" not in response.headers


# ============================================================================
# Lifespan / Client Tests
# ============================================================================

def test_lifespan_opens_and_closes_http_client():
    """Test that the shared upstream client lives exactly as long as the app"""
    app = create_application()

    with TestClient(app) as client:
        http_client = app.state.http_client
        assert isinstance(http_client, httpx.AsyncClient)
        assert http_client.timeout.read == 30.0
        assert client.get("/health").status_code == status.HTTP_200_OK

    assert app.state.http_client is None
    assert http_client.is_closed


def test_missing_http_client_returns_error_body(app, client, auth_headers):
    app.state.http_client = None

    response = client.get("/api/strava/athlete", headers=auth_headers)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Upstream HTTP client not available"}


def test_openapi_documents_error_shape(client):
    """Test that route error statuses reference the {"error": ...} schema"""
    schema = client.get("/openapi.json").json()

    assert schema["components"]["schemas"]["ErrorResponse"]["required"] == ["error"]

    expected = {
        ("/api/strava/athlete", "get"): ["401", "500"],
        ("/api/strava/activities/{activity_id}", "get"): ["401", "500"],
        ("/api/claude/analyze", "post"): ["500"],
        ("/auth/strava/refresh", "post"): ["500"],
    }
    for (path, method), codes in expected.items():
        responses = schema["paths"][path][method]["responses"]
        for code in codes:
            ref = responses[code]["content"]["application/json"]["schema"]["$ref"]
            assert ref == "#/components/schemas/ErrorResponse"


def test_gateway_error_status_defaults():
    assert GatewayError("Internal").status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert GatewayError("Denied", status.HTTP_401_UNAUTHORIZED).status_code == status.HTTP_401_UNAUTHORIZED
    assert ClientInputError("No token").status_code == status.HTTP_401_UNAUTHORIZED
    assert ClientInputError("No token", None).status_code == status.HTTP_401_UNAUTHORIZED
