"""
Proxy Routes - Upstream Request Forwarding
==========================================

Authenticated relay between the browser and the upstream APIs.

Security Model:
---------------
1. Strava routes require the caller's Authorization header; it is forwarded
   verbatim and never parsed or stored
2. The Anthropic route takes no caller credential; the server-held API key
   is attached instead
3. Upstream error bodies are not relayed; each route answers with its own
   fixed error message

Endpoints:
----------
- GET  /api/strava/athlete
- GET  /api/strava/activities
- GET  /api/strava/activities/{activity_id}
- POST /api/claude/analyze
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from fastapi import APIRouter, Body, Depends, Header, Query, status

from ..config import get_settings
from ..errors import ClientInputError, ConfigurationError, UpstreamError
from ..models import ErrorResponse
from ..upstream import decode_json, get_http_client

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = "100"
DEFAULT_PAGE = "1"

# Create routers
strava_router = APIRouter(
    prefix="/api/strava",
    tags=["strava"],
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
    },
)
claude_router = APIRouter(
    prefix="/api/claude",
    tags=["claude"],
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}},
)


# ============================================================================
# Dependencies
# ============================================================================

async def require_bearer_token(
    authorization: Optional[str] = Header(None),
) -> str:
    """
    Dependency returning the caller's Authorization header value.

    Only presence is checked; the value is forwarded to Strava as-is.

    Raises:
        ClientInputError: If the header is missing or empty
    """
    if not authorization:
        raise ClientInputError("No authorization token provided")
    return authorization


# ============================================================================
# Upstream Helpers
# ============================================================================

def path_segment(value: str) -> str:
    """
    Escape a caller value as a single URL path segment.

    Dot segments are escaped as well, since httpx would otherwise resolve
    them and address a different Strava resource.
    """
    segment = quote(value, safe="")
    if segment in (".", ".."):
        segment = segment.replace(".", "%2E")
    return segment


async def relay_strava_get(
    client: httpx.AsyncClient,
    path: str,
    token: str,
    failure: UpstreamError,
    params: Optional[Dict[str, str]] = None,
) -> Any:
    """
    GET a Strava API resource with the caller's token and return its JSON.

    Args:
        client: Shared upstream HTTP client
        path: Path below the Strava API base URL
        token: Caller's Authorization header value
        failure: Error raised for any upstream failure
        params: Optional query parameters

    Returns:
        Decoded upstream JSON, unchanged

    Raises:
        UpstreamError: The given failure, on transport error, non-2xx or
            non-JSON body
    """
    settings = get_settings()
    url = f"{settings.strava_api_base_url_str}{path}"

    request_kwargs = {"headers": {"Authorization": token}}
    if params is not None:
        request_kwargs["params"] = params

    try:
        response = await client.get(url, **request_kwargs)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error(f"Strava request failed: {e}", extra={"path": path})
        raise failure from e

    if not response.is_success:
        logger.warning(
            f"Strava returned {response.status_code}",
            extra={"path": path, "status_code": response.status_code},
        )
        raise failure

    try:
        return decode_json(response)
    except ValueError as e:
        logger.error(f"Strava returned an unreadable body: {e}", extra={"path": path})
        raise failure from e


# ============================================================================
# Strava Endpoints
# ============================================================================

@strava_router.get("/athlete")
async def get_profile(
    token: str = Depends(require_bearer_token),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Return the authenticated athlete's profile.

    Every upstream failure, expired and malformed tokens alike, is reported
    as 401 "Failed to verify token".
    """
    return await relay_strava_get(
        client,
        "/athlete",
        token,
        UpstreamError("Failed to verify token", status.HTTP_401_UNAUTHORIZED),
    )


@strava_router.get("/activities")
async def list_activities(
    per_page: Optional[str] = Query(None, description="Page size, passed through to Strava"),
    page: Optional[str] = Query(None, description="Page number, passed through to Strava"),
    token: str = Depends(require_bearer_token),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Return one page of the athlete's activities.

    Missing or empty pagination values default to per_page=100, page=1.
    Values are not range checked; Strava enforces its own limits.
    """
    params = {
        "per_page": per_page or DEFAULT_PER_PAGE,
        "page": page or DEFAULT_PAGE,
    }
    return await relay_strava_get(
        client,
        "/athlete/activities",
        token,
        UpstreamError("Failed to fetch activities"),
        params=params,
    )


@strava_router.get("/activities/{activity_id}")
async def get_activity(
    activity_id: str,
    token: str = Depends(require_bearer_token),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Return a single activity by its opaque Strava ID."""
    return await relay_strava_get(
        client,
        f"/activities/{path_segment(activity_id)}",
        token,
        UpstreamError("Failed to fetch activity details"),
    )


# ============================================================================
# Anthropic Endpoint
# ============================================================================

@claude_router.post("/analyze")
async def analyze_with_ai(
    payload: Any = Body(None, description="Messages API request body, forwarded verbatim"),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Forward a Messages API request to Anthropic with the server-held key.

    Returns:
        Anthropic's JSON response, unchanged

    Raises:
        ConfigurationError: If ANTHROPIC_API_KEY is not set
        UpstreamError: "Failed to get AI analysis: <reason>"
    """
    settings = get_settings()

    if not settings.ANTHROPIC_API_KEY:
        logger.error("AI analysis requested but ANTHROPIC_API_KEY is not set")
        raise ConfigurationError("Claude API key not configured")

    headers = {
        "Content-Type": "application/json",
        "x-api-key": settings.ANTHROPIC_API_KEY,
        "anthropic-version": settings.ANTHROPIC_VERSION,
    }

    try:
        response = await client.post(
            settings.ANTHROPIC_API_URL,
            json=payload if payload is not None else {},
            headers=headers,
        )
    except httpx.HTTPError as e:
        logger.error(f"Claude API request error: {e}")
        raise UpstreamError(f"Failed to get AI analysis: {e}") from e

    if not response.is_success:
        logger.warning(
            f"Claude API returned {response.status_code}",
            extra={"status_code": response.status_code},
        )
        raise UpstreamError("Failed to get AI analysis: Claude API request failed")

    try:
        return decode_json(response)
    except ValueError as e:
        logger.error(f"Claude API returned an unreadable body: {e}")
        raise UpstreamError(f"Failed to get AI analysis: {e}") from e
