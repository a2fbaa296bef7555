import logging
import os
import time

from flask import Flask

from .audit import log_sink
from .config import Settings
from .credentials import InMemoryCredentialStore
from .ratelimit import AttemptRegistry, AttemptTracker
from .roster import RosterClient
from .routes import build_blueprint
from .security import add_security_headers, configure_session
from .verifier import VisualPasswordVerifier

logger = logging.getLogger(__name__)


def build_store(settings: Settings):
    """RosterClient when ROSTER_URL is set, otherwise an empty in-memory store."""
    if settings.roster_url:
        return RosterClient(
            settings.roster_url,
            api_token=settings.roster_api_token,
            timeout=settings.roster_timeout_sec,
        )
    logger.warning("ROSTER_URL not set; using an empty in-memory credential store")
    return InMemoryCredentialStore()


def create_app(settings=None, store=None, clock=None, audit_sink=log_sink):
    """
    Create and configure the Flask application.

    Args:
        settings: Settings instance; read from the environment when None.
        store: credential store with lookup(student_id); built from settings when None.
        clock: monotonic seconds callable for the lockout timer (tests inject a fake).
        audit_sink: callable receiving AuditEvent, or None to disable auditing.

    Returns:
        Configured Flask app instance
    """
    settings = settings or Settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = Flask(__name__)
    app.secret_key = settings.secret_key

    configure_session(app, settings.session_cookie_secure)
    add_security_headers(app)

    if store is None:
        store = build_store(settings)
    tracker = AttemptTracker(settings.login_policy, clock=clock or time.monotonic)
    registry = AttemptRegistry(tracker, idle_ttl_sec=settings.attempt_idle_ttl_sec)
    verifier = VisualPasswordVerifier(store, tracker, audit_sink=audit_sink)

    app.register_blueprint(build_blueprint(settings, verifier, registry))

    app.config["VP_SETTINGS"] = settings
    app.config["VP_REGISTRY"] = registry
    app.config["VP_VERIFIER"] = verifier
    return app


if __name__ == "__main__":
    create_app().run("127.0.0.1", int(os.environ.get("PORT", "8000")), debug=False)
