import os
from flask import Flask, request

def configure_session(app: Flask, cookie_secure: bool) -> None:
    app.config.update(
        SESSION_COOKIE_HTTPONLY=True,
        SESSION_COOKIE_SAMESITE="Lax",
    )
    if cookie_secure:
        app.config["SESSION_COOKIE_SECURE"] = True

def client_ip(trust_xff: bool) -> str:
    """
    Best-effort client IP for audit events.
    Behind a proxy the real address is only available via X-Forwarded-For.
    """
    if trust_xff:
        xff = request.headers.get("X-Forwarded-For", "")
        if xff:
            return xff.split(",")[0].strip()
    return request.remote_addr or "unknown"

def add_security_headers(app: Flask) -> None:
    pod = os.environ.get("HOSTNAME", "unknown")

    @app.after_request
    def _headers(resp):
        resp.headers["X-Pod"] = pod

        # Login outcomes and attempt counters must never be cached
        if request.path.startswith("/api/auth/"):
            resp.headers["Cache-Control"] = "no-store"

        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        # microphone allowed for read-aloud recordings
        resp.headers["Permissions-Policy"] = "geolocation=(), camera=()"
        return resp
