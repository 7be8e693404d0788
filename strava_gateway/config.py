"""
Configuration module for the Strava Gateway.

This module uses Pydantic Settings to load environment variables for the
Strava OAuth client, the Anthropic API key, upstream endpoints, CORS and
server settings.

Environment variables are loaded from .env file or system environment.
Every value is optional at load time: each route reports its own missing
configuration, so the service can start with a partial setup.
"""

from functools import lru_cache
from typing import List, Optional
from urllib.parse import urlsplit

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """

    # =========================================================================
    # Strava OAuth Configuration
    # =========================================================================

    STRAVA_CLIENT_ID: Optional[str] = Field(
        None,
        description="Strava application client ID",
    )

    STRAVA_CLIENT_SECRET: Optional[str] = Field(
        None,
        description="Strava application client secret (never sent to the browser)",
    )

    STRAVA_REDIRECT_URI: Optional[str] = Field(
        None,
        description="OAuth callback URL registered with Strava (e.g., https://api.example.com/auth/strava/callback)",
    )

    STRAVA_OAUTH_BASE_URL: str = Field(
        default="https://www.strava.com/oauth",
        description="Base URL of the Strava authorization server",
    )

    STRAVA_API_BASE_URL: str = Field(
        default="https://www.strava.com/api/v3",
        description="Base URL of the Strava REST API",
    )

    # =========================================================================
    # Frontend / CORS Configuration
    # =========================================================================

    FRONTEND_URL: str = Field(
        default="http://localhost:5173",
        description="Single-page application URL that OAuth callbacks redirect to",
    )

    ALLOWED_ORIGINS: Optional[str] = Field(
        default="http://localhost:3000,http://localhost:5173",
        description="Comma-separated list of additional allowed CORS origins",
    )

    # =========================================================================
    # Anthropic Configuration
    # =========================================================================

    ANTHROPIC_API_KEY: Optional[str] = Field(
        None,
        description="Server-held Anthropic API key",
    )

    ANTHROPIC_API_URL: str = Field(
        default="https://api.anthropic.com/v1/messages",
        description="Anthropic Messages API endpoint",
    )

    ANTHROPIC_VERSION: str = Field(
        default="2023-06-01",
        description="Value sent in the anthropic-version header",
    )

    # =========================================================================
    # Outbound HTTP Configuration
    # =========================================================================

    UPSTREAM_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        description="Timeout for each upstream request in seconds (0 disables the timeout)",
        ge=0,
    )

    # =========================================================================
    # Server Configuration
    # =========================================================================

    HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the gateway server",
    )

    PORT: int = Field(
        default=3001,
        description="Port to bind the gateway server",
        ge=1,
        le=65535,
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def allowed_origins_list(self) -> List[str]:
        """
        Parse ALLOWED_ORIGINS and append the frontend origin.

        Returns:
            De-duplicated list of origins, in configuration order.
        """
        candidates = []
        if self.ALLOWED_ORIGINS:
            candidates.extend(
                origin.strip().rstrip("/")
                for origin in self.ALLOWED_ORIGINS.split(",")
                if origin.strip()
            )
        frontend_origin = self.frontend_origin
        if frontend_origin:
            candidates.append(frontend_origin)

        origins: List[str] = []
        for origin in candidates:
            if origin not in origins:
                origins.append(origin)
        return origins

    @property
    def frontend_origin(self) -> Optional[str]:
        """Scheme and host of FRONTEND_URL, as a browser sends it in Origin."""
        parts = urlsplit(self.FRONTEND_URL)
        if not parts.scheme or not parts.netloc:
            return None
        return f"{parts.scheme}://{parts.netloc}"

    @property
    def strava_configured(self) -> bool:
        """True when an authorization redirect can be built."""
        return bool(self.STRAVA_CLIENT_ID and self.STRAVA_REDIRECT_URI)

    @property
    def strava_oauth_base_url_str(self) -> str:
        return self.STRAVA_OAUTH_BASE_URL.rstrip("/")

    @property
    def strava_api_base_url_str(self) -> str:
        return self.STRAVA_API_BASE_URL.rstrip("/")

    @property
    def upstream_timeout(self) -> Optional[float]:
        """Timeout handed to httpx; None means wait indefinitely."""
        if not self.UPSTREAM_TIMEOUT_SECONDS:
            return None
        return self.UPSTREAM_TIMEOUT_SECONDS

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """
        Validate that LOG_LEVEL names a standard logging level.

        Raises:
            ValueError: If the level is unknown
        """
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        level = v.strip().upper()
        if level not in allowed_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of {allowed_levels}, got: {v}"
            )
        return level

    @field_validator("FRONTEND_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")


# =============================================================================
# Settings Singleton
# =============================================================================

@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    Returns:
        Settings instance with all configuration loaded and validated.

    Raises:
        ValidationError: If an environment variable has an invalid value.
    """
    return Settings()


# =============================================================================
# Configuration Helpers
# =============================================================================

def validate_configuration(settings: Settings) -> dict:
    """
    Check the settings and return a status report.

    Missing upstream credentials are warnings, not errors: the affected
    routes answer with a configuration error instead of the whole service
    refusing to start.

    Returns:
        Dictionary with validation status, errors and warnings.
    """
    errors = []
    warnings = []

    if not settings.STRAVA_CLIENT_ID:
        warnings.append("STRAVA_CLIENT_ID is not set (Strava login unavailable)")

    if not settings.STRAVA_REDIRECT_URI:
        warnings.append("STRAVA_REDIRECT_URI is not set (Strava login unavailable)")

    if not settings.STRAVA_CLIENT_SECRET:
        warnings.append("STRAVA_CLIENT_SECRET is not set (token exchange will be rejected upstream)")

    if not settings.ANTHROPIC_API_KEY:
        warnings.append("ANTHROPIC_API_KEY is not set (AI analysis unavailable)")

    if not settings.frontend_origin:
        errors.append(f"FRONTEND_URL is not an absolute URL: {settings.FRONTEND_URL!r}")

    if settings.upstream_timeout is None:
        warnings.append("UPSTREAM_TIMEOUT_SECONDS is 0; upstream calls may hang indefinitely")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "allowed_origins": settings.allowed_origins_list,
    }
