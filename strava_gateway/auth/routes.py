"""
Authentication routes for the Strava OAuth flow.

The callback is reached by a top-level browser navigation, so it always
answers with a redirect back to the frontend. The refresh endpoint is
called from script and answers with JSON.
"""

import logging
from typing import Any, Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from ..config import Settings, get_settings
from ..errors import ConfigurationError, UpstreamError
from ..models import ErrorResponse, RefreshRequest, TokenSet
from ..upstream import get_http_client
from .strava_oauth import (
    TokenExchangeError,
    build_authorization_url,
    exchange_code,
    refresh_tokens,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Router Setup
# =============================================================================

auth_router = APIRouter(
    prefix="/auth/strava",
    tags=["authentication"],
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}},
)


def _redirect_to_frontend(settings: Settings, params: dict) -> RedirectResponse:
    url = f"{settings.FRONTEND_URL}?{urlencode(params)}"
    return RedirectResponse(url=url, status_code=302)


# =============================================================================
# Login Endpoint
# =============================================================================

@auth_router.get("", response_class=RedirectResponse)
async def initiate_authorization():
    """
    Redirect the browser to the Strava authorization page.

    Returns:
        RedirectResponse to the Strava authorize endpoint

    Raises:
        ConfigurationError: If the client ID or redirect URI is not configured
    """
    settings = get_settings()

    if not settings.strava_configured:
        logger.error("Strava login requested but client ID or redirect URI is missing")
        raise ConfigurationError("Missing Strava configuration")

    return RedirectResponse(url=build_authorization_url(settings), status_code=302)


# =============================================================================
# Callback Endpoint
# =============================================================================

@auth_router.get("/callback", response_class=RedirectResponse)
async def complete_authorization(
    request: Request,
    code: Optional[str] = Query(None, description="Authorization code from Strava"),
):
    """
    Handle the redirect back from Strava.

    Exchanges the code for tokens and sends the browser back to the frontend
    with the token set in the query string:

        FRONTEND_URL?auth=success&access_token=...&refresh_token=...&expires_at=...

    Failures redirect with ``error=no_code`` or ``error=auth_failed``; this
    route never answers with a JSON error.
    """
    settings = get_settings()

    if not code:
        logger.info("Strava callback without authorization code")
        return _redirect_to_frontend(settings, {"error": "no_code"})

    try:
        client = get_http_client(request)
        data = await exchange_code(client, settings, code)
        token_set = TokenSet.from_upstream(data)
    except (ConfigurationError, TokenExchangeError, ValidationError) as e:
        logger.error(f"OAuth code exchange failed: {e}")
        return _redirect_to_frontend(settings, {"error": "auth_failed"})

    logger.info("OAuth code exchange completed")
    return _redirect_to_frontend(
        settings,
        {"auth": "success", **token_set.to_response()},
    )


# =============================================================================
# Refresh Endpoint
# =============================================================================

@auth_router.post("/refresh", response_model=TokenSet, response_model_exclude_none=True)
async def refresh_authorization(
    body: Any = Body(None, description="JSON object with a refresh_token string"),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Exchange a refresh token for a new token set.

    The body is validated here rather than by FastAPI so that a missing or
    mistyped refresh_token gets the same 500 as an upstream failure.

    Returns:
        access_token, refresh_token and expires_at from Strava; any other
        upstream fields are dropped.

    Raises:
        UpstreamError: 500 on any failure
    """
    settings = get_settings()

    try:
        refresh_request = RefreshRequest.model_validate(body or {})
    except ValidationError as e:
        logger.warning("Refresh requested with a malformed body")
        raise UpstreamError("Failed to refresh token") from e

    if not refresh_request.refresh_token:
        logger.warning("Refresh requested without a refresh token")
        raise UpstreamError("Failed to refresh token")

    try:
        data = await refresh_tokens(client, settings, refresh_request.refresh_token)
        token_set = TokenSet.from_upstream(data)
    except (TokenExchangeError, ValidationError) as e:
        logger.error(f"Token refresh failed: {e}")
        raise UpstreamError("Failed to refresh token") from e

    return token_set
