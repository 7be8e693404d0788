"""
FastAPI Gateway Application Factory
===================================

Entry point for the gateway that sits between the browser single-page app
and the Strava and Anthropic APIs.

Architecture:
    Browser SPA → Gateway (this service) → Strava OAuth / REST API
                                         → Anthropic Messages API

Routers:
    - /auth/strava/*  : OAuth login, callback and token refresh
    - /api/strava/*   : Strava resources, forwarded with the caller's token
    - /api/claude/*   : AI analysis, forwarded with the server-held key
    - /, /health      : Status endpoints

Running the Service:
    Development:
        uvicorn strava_gateway.main:app --reload --port 3001

    Production:
        uvicorn strava_gateway.main:app --host 0.0.0.0 --port 3001 --workers 4

    With custom log level:
        LOG_LEVEL=DEBUG uvicorn strava_gateway.main:app --reload
"""

import logging
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .auth import auth_router
from .config import get_settings, validate_configuration
from .errors import error_body, register_exception_handlers
from .models import StatusResponse
from .proxy import claude_router, strava_router
from .upstream import create_http_client

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
        - Configure logging
        - Log the configuration report
        - Open the shared upstream HTTP client

    Shutdown:
        - Close the upstream HTTP client
    """
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)

    report = validate_configuration(settings)
    for warning in report["warnings"]:
        logger.warning(f"Configuration warning: {warning}")
    for error in report["errors"]:
        logger.error(f"Configuration error: {error}")

    app.state.http_client = create_http_client(settings)
    logger.info(
        f"Strava proxy server running on port {settings.PORT}",
        extra={"allowed_origins": report["allowed_origins"]},
    )

    yield

    logger.info("Shutting down gateway")
    await app.state.http_client.aclose()
    app.state.http_client = None


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies in the fixed error shape."""
    logger.info(
        "Rejected malformed request",
        extra={"path": request.url.path, "errors": len(exc.errors())},
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid request body"),
    )


def create_application() -> FastAPI:
    """
    Application factory function.

    Creates and configures the FastAPI application instance with:
        - Lifespan management
        - CORS middleware restricted to the configured origins
        - Route handlers
        - Exception handlers

    Returns:
        FastAPI: Configured application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Strava Gateway",
        description="Credential-forwarding gateway for the Strava and Anthropic APIs",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(strava_router)
    app.include_router(claude_router)

    register_exception_handlers(app)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    @app.get("/", response_model=StatusResponse, tags=["System"])
    async def root():
        return StatusResponse(status="ok", message="Strava proxy server is running")

    @app.get("/health", response_model=StatusResponse, response_model_exclude_none=True, tags=["System"])
    async def health_check():
        """Liveness probe. Does not contact the upstream APIs."""
        return StatusResponse(status="ok")

    return app


# Create app instance for uvicorn
app = create_application()


if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "strava_gateway.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
