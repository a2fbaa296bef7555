"""
Login audit events.

The default sink writes one structured log line per event to the
``vpportal.audit`` logger; deployments can pass any callable taking an
AuditEvent instead (for example one that inserts into an audit table).
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("vpportal.audit")

MAX_DETAIL_LENGTH = 2000

LOGIN_SUCCESS = "student_login.success"
LOGIN_LOCKED = "student_login.locked"


@dataclass(frozen=True)
class AuditEvent:
    action: str
    student_id: Optional[str]
    resource_type: str = "student"
    details: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None


def coerce_details(details) -> Optional[Dict[str, Any]]:
    """Clamp event details to something small and JSON-serializable."""
    if not details:
        return None
    payload = details if isinstance(details, dict) else {"value": details}
    try:
        encoded = json.dumps(payload)
    except (TypeError, ValueError):
        return {"invalid": True}
    if len(encoded) > MAX_DETAIL_LENGTH:
        return {"truncated": True}
    return payload


def log_sink(event: AuditEvent) -> None:
    audit_logger.info(
        "%s resource=%s id=%s ip=%s details=%s",
        event.action,
        event.resource_type,
        event.student_id,
        event.ip_address or "unknown",
        json.dumps(event.details) if event.details else "-",
    )


def record_audit_event(sink, action: str, student_id: Optional[str], details=None, ip_address=None) -> None:
    """Send one event to ``sink``. A failing sink never blocks login."""
    if sink is None:
        return
    event = AuditEvent(
        action=action,
        student_id=student_id,
        details=coerce_details(details),
        ip_address=ip_address,
    )
    try:
        sink(event)
    except Exception:
        logger.exception("Failed to record audit event %s", action)
