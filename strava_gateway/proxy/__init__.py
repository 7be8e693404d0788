"""
Proxy Package
=============

Authenticated relay endpoints that forward browser requests to Strava and
Anthropic.

Main Components:
----------------
- routes.py: strava_router (/api/strava/*) and claude_router (/api/claude/*)

Usage:
------
    from strava_gateway.proxy import strava_router, claude_router
    app.include_router(strava_router)
    app.include_router(claude_router)
"""

from .routes import claude_router, strava_router

__all__ = ["strava_router", "claude_router"]
