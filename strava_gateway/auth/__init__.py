"""
Authentication Package

Authorization Broker for the Strava OAuth flow. The client secret stays on
the server; the browser only ever sees the resulting token set.

Modules:
- routes: /auth/strava, /auth/strava/callback, /auth/strava/refresh
- strava_oauth: authorize URL construction and token endpoint requests

The authentication flow:
1. Browser navigates to /auth/strava and is redirected to Strava
2. Strava redirects back to /auth/strava/callback with a code
3. Gateway exchanges the code and redirects to the frontend with tokens
4. Frontend calls /auth/strava/refresh before the access token expires
"""

from .routes import auth_router

__all__ = [
    "auth_router",
]
