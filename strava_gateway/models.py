"""
Data Models Module

Pydantic models for the values that cross the gateway boundary. Nothing here
is persisted; every instance lives for one request.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Authentication Models
# ============================================================================

class TokenSet(BaseModel):
    """
    Access token, refresh token and expiry issued by Strava.

    Fields the upstream omits stay None and are left out when serialized,
    so nothing is synthesized on the caller's behalf.
    """
    access_token: Optional[str] = Field(None, description="Strava access token")
    refresh_token: Optional[str] = Field(None, description="Strava refresh token")
    expires_at: Optional[int] = Field(None, description="Expiry as unix seconds")

    @classmethod
    def from_upstream(cls, data: Dict[str, Any]) -> "TokenSet":
        """Pick the three token fields out of a Strava token response."""
        return cls(
            access_token=data.get("access_token"),
            refresh_token=data.get("refresh_token"),
            expires_at=data.get("expires_at"),
        )

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class RefreshRequest(BaseModel):
    """Request model for token refresh."""
    refresh_token: Optional[str] = Field(None, description="Refresh token held by the browser")


# ============================================================================
# Status / Error Models
# ============================================================================

class StatusResponse(BaseModel):
    """Root and health check response model."""
    status: str = Field("ok", description="Service status")
    message: Optional[str] = Field(None, description="Human-readable status message")


class ErrorResponse(BaseModel):
    """The single caller-facing error shape."""
    error: str = Field(..., description="Error message")
