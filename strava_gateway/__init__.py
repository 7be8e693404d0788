"""
Strava Gateway

Credential-forwarding HTTP gateway between a browser single-page app and
the Strava and Anthropic APIs. Secrets stay on the server; tokens stay in
the browser.
"""

__version__ = "1.0.0"
