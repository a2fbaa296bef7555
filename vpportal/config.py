import os
from dataclasses import dataclass, field

from .policy.login_policy import LoginPolicy


def _env_bool(name: str, default: bool) -> bool:
    v = os.environ.get(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


@dataclass(frozen=True)
class Settings:
    # Flask
    secret_key: str = os.environ.get("FLASK_SECRET", "CHANGE_ME_LONG_RANDOM")
    log_level: str = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Roster service that owns student credentials; empty -> in-memory store
    roster_url: str = os.environ.get("ROSTER_URL", "").rstrip("/")
    roster_api_token: str = os.environ.get("ROSTER_API_TOKEN", "")
    roster_timeout_sec: float = float(os.environ.get("ROSTER_TIMEOUT_SEC", "10"))

    # Security / sessions
    session_cookie_secure: bool = _env_bool("SESSION_COOKIE_SECURE", True)

    # Trust X-Forwarded-For from LB/Ingress (audit IPs only)
    trust_x_forwarded_for: bool = _env_bool("TRUST_X_FORWARDED_FOR", True)

    # Idle login sessions (not locked) are forgotten after this many seconds
    attempt_idle_ttl_sec: int = int(os.environ.get("ATTEMPT_IDLE_TTL_SEC", "900"))

    # Lockout thresholds and UI copy are fixed in the policy, not the environment
    login_policy: LoginPolicy = field(default_factory=LoginPolicy)
