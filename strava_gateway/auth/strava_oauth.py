"""
Strava OAuth helpers.

Builds the authorization redirect and performs the server-to-server token
requests. The client secret is only ever placed in the outbound token
request body.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from ..config import Settings
from ..upstream import decode_json

logger = logging.getLogger(__name__)

# read_all covers private activities as well as public ones
STRAVA_SCOPE = "activity:read_all"


class TokenExchangeError(Exception):
    """The token endpoint could not be reached or returned an unusable body"""
    pass


def build_authorization_url(settings: Settings) -> str:
    """
    Build the Strava authorize URL for the configured client.

    Args:
        settings: Settings with STRAVA_CLIENT_ID and STRAVA_REDIRECT_URI set

    Returns:
        Absolute URL to redirect the browser to
    """
    params = {
        "client_id": settings.STRAVA_CLIENT_ID,
        "response_type": "code",
        "redirect_uri": settings.STRAVA_REDIRECT_URI,
        "approval_prompt": "auto",
        "scope": STRAVA_SCOPE,
    }
    return f"{settings.strava_oauth_base_url_str}/authorize?{urlencode(params)}"


def token_endpoint(settings: Settings) -> str:
    return f"{settings.strava_oauth_base_url_str}/token"


def _client_credentials(settings: Settings) -> Dict[str, str]:
    credentials = {
        "client_id": settings.STRAVA_CLIENT_ID,
        "client_secret": settings.STRAVA_CLIENT_SECRET,
    }
    return {k: v for k, v in credentials.items() if v is not None}


async def request_token(
    client: httpx.AsyncClient,
    settings: Settings,
    grant: Dict[str, Any],
    require_success: bool = True,
) -> Dict[str, Any]:
    """
    POST a grant to the Strava token endpoint.

    Args:
        client: Shared upstream HTTP client
        settings: Application settings
        grant: Grant-specific fields (grant_type plus code or refresh_token)
        require_success: Treat a non-2xx status as a failure. The
            authorization-code callback passes False and only fails on
            transport or decoding errors.

    Returns:
        Decoded JSON object from the token endpoint

    Raises:
        TokenExchangeError: On transport failure, non-JSON body, or a
            non-2xx status when require_success is set
    """
    payload = {**_client_credentials(settings), **grant}

    try:
        response = await client.post(
            token_endpoint(settings),
            json=payload,
            headers={"Accept": "application/json"},
        )
    except httpx.HTTPError as e:
        raise TokenExchangeError(f"Token request failed: {e}") from e

    if not response.is_success:
        logger.warning(
            f"Strava token endpoint returned {response.status_code}",
            extra={"grant_type": grant.get("grant_type")},
        )
        if require_success:
            raise TokenExchangeError(
                f"Token endpoint returned status {response.status_code}"
            )

    try:
        data = decode_json(response)
    except ValueError as e:
        raise TokenExchangeError(f"Token response is not JSON: {e}") from e

    if not isinstance(data, dict):
        raise TokenExchangeError("Token response is not a JSON object")

    return data


async def exchange_code(
    client: httpx.AsyncClient,
    settings: Settings,
    code: str,
) -> Dict[str, Any]:
    """Exchange a single-use authorization code for tokens."""
    return await request_token(
        client,
        settings,
        {"code": code, "grant_type": "authorization_code"},
        require_success=False,
    )


async def refresh_tokens(
    client: httpx.AsyncClient,
    settings: Settings,
    refresh_token: Optional[str],
) -> Dict[str, Any]:
    """Exchange a refresh token for a new token set."""
    return await request_token(
        client,
        settings,
        {"refresh_token": refresh_token, "grant_type": "refresh_token"},
    )
