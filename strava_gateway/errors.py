"""
Gateway Errors
==============

Exception types raised by the route handlers and the handlers that turn
them into the caller-facing ``{"error": "..."}`` body.

Taxonomy:
    - ConfigurationError: a required secret or URL is missing (500)
    - ClientInputError:   the caller omitted a required token (401)
    - UpstreamError:      Strava or Anthropic failed or answered non-2xx
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Base exception for errors reported to the caller"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(GatewayError):
    """Required server-side configuration is missing"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ClientInputError(GatewayError):
    """The caller did not supply a required credential"""

    status_code = status.HTTP_401_UNAUTHORIZED


class UpstreamError(GatewayError):
    """The upstream API failed; the route decides the status to surface"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(message: str) -> dict:
    return {"error": message}


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Render a GatewayError as the fixed error shape."""
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for unhandled errors.

    Logs the error and returns the fixed error shape without internal detail.
    """
    logger.error(
        f"Unhandled exception: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
        },
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
