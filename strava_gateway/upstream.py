"""
Shared outbound HTTP client.

One httpx.AsyncClient is opened in the application lifespan and handed to
route handlers through ``get_http_client``. It holds no per-caller state:
credentials are attached per request.
"""

import logging
from typing import Any

import httpx
from fastapi import Request

from .config import Settings
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

USER_AGENT = "strava-gateway/1.0"


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """
    Build the AsyncClient used for every upstream call.

    Args:
        settings: Application settings (timeout only)

    Returns:
        Configured httpx.AsyncClient. Redirects are not followed so upstream
        3xx answers surface as failures.
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.upstream_timeout),
        follow_redirects=False,
        headers={"User-Agent": USER_AGENT},
    )


def get_http_client(request: Request) -> httpx.AsyncClient:
    """
    Dependency to get the shared upstream client from app state.

    Raises:
        ConfigurationError: If the lifespan has not created the client
    """
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        logger.error("Upstream HTTP client not initialized")
        raise ConfigurationError("Upstream HTTP client not available")
    return client


def decode_json(response: httpx.Response) -> Any:
    """
    Parse an upstream body as JSON.

    Raises:
        ValueError: If the body is empty or not JSON
    """
    if not response.content:
        raise ValueError(f"Empty response body (status {response.status_code})")
    return response.json()
