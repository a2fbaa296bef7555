import logging
import secrets

from flask import Blueprint, jsonify, request, session

from .catalog import list_avatars, list_options
from .credentials import MalformedSubmission, SubmissionMismatch, UnknownStudentError, parse_submission
from .security import client_ip
from .verifier import Failure, Locked, Success

logger = logging.getLogger(__name__)


def _client_key() -> str:
    """
    Stable per-browser key stored in the session cookie.
    Attempt counters are keyed by this, not by IP (classrooms share one NAT address).
    """
    if "client_id" not in session:
        session["client_id"] = secrets.token_urlsafe(16)
    return session["client_id"]


def _entries(catalogs):
    return {name: [entry.to_dict() for entry in entries] for name, entries in catalogs.items()}


def _json_body():
    """Request JSON as a dict, or None when the body is missing or not an object."""
    body = request.get_json(silent=True)
    if body is None:
        return {}
    return body if isinstance(body, dict) else None


def _optional_id(body, name):
    value = body.get(name)
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    return str(value).strip() or None


def _error(message, status, **extra):
    body = {"error": message}
    body.update(extra)
    return jsonify(body), status


def _locked_response(policy, remaining_seconds):
    resp = jsonify(
        {
            "outcome": Locked.outcome,
            "error": policy.locked_message(remaining_seconds),
            "remainingSeconds": remaining_seconds,
        }
    )
    resp.status_code = 429
    resp.headers["Retry-After"] = str(remaining_seconds)
    return resp


def _result_response(policy, result):
    """
    Map a verification result onto (body, status).
    UnknownStudent and lookup failures share one generic message.
    """
    if isinstance(result, Success):
        return jsonify({"outcome": result.outcome, "studentId": result.student_id}), 200
    if isinstance(result, Failure):
        return _error(
            policy.wrong_guess_message(result.attempts_remaining),
            401,
            outcome=result.outcome,
            attemptsRemaining=result.attempts_remaining,
        )
    if isinstance(result, Locked):
        return _locked_response(policy, result.remaining_seconds)
    return _error(policy.msg_cannot_verify, 401, outcome=result.outcome)


def build_blueprint(settings, verifier, registry):
    bp = Blueprint("vp", __name__)
    policy = settings.login_policy
    tracker = registry.tracker

    @bp.get("/api/visual-password/options/<password_type>")
    def options(password_type):
        try:
            catalogs = list_options(password_type)
        except ValueError:
            return _error("Unknown visual password type", 404)
        return jsonify({"type": password_type, "selectors": _entries(catalogs)})

    @bp.get("/api/visual-password/avatars")
    def avatars():
        return jsonify({"avatars": [entry.to_dict() for entry in list_avatars()]})

    @bp.post("/api/auth/student-login/select")
    def select_student():
        key = _client_key()
        body = _json_body()
        if body is None:
            return _error("Request body must be a JSON object", 400)
        student_id = _optional_id(body, "studentId")
        class_id = _optional_id(body, "classId")
        if not student_id:
            return _error("Student ID is required", 400)

        now = tracker.now()
        status = registry.begin(key, student_id, now)
        if status.locked:
            return _locked_response(policy, status.remaining_seconds)

        try:
            record = verifier.store.lookup(student_id)
        except UnknownStudentError:
            logger.warning("select_student: student_id=%s could not be resolved", student_id)
            return _error(policy.msg_cannot_verify, 401)
        if not record.active or (class_id and not record.enrolled_in(class_id)):
            logger.warning("select_student: student_id=%s inactive or not in class_id=%s", student_id, class_id)
            return _error(policy.msg_cannot_verify, 401)

        return jsonify(
            {
                "studentId": student_id,
                "passwordType": record.password_type.value,
                "selectors": _entries(list_options(record.password_type)),
                "status": status.to_dict(),
            }
        )

    @bp.post("/api/auth/student-login")
    def student_login():
        key = _client_key()
        body = _json_body()
        if body is None:
            return _error("Request body must be a JSON object", 400)
        student_id = _optional_id(body, "studentId")
        class_id = _optional_id(body, "classId")
        if not student_id or not body.get("visualPassword"):
            return _error("Student ID and visual password are required", 400)

        try:
            submission = parse_submission(body["visualPassword"])
        except MalformedSubmission as e:
            logger.info("student_login: malformed submission for student_id=%s: %s", student_id, e)
            return _error(policy.msg_malformed, 400)

        ip = client_ip(settings.trust_x_forwarded_for)
        now = tracker.now()
        with registry.hold(key) as state:
            if state.student_id != student_id and not tracker.is_locked(state, now):
                tracker.reset(state)
                state.student_id = student_id
            try:
                result = verifier.attempt_login(
                    state, student_id, submission, class_id=class_id, now=now, ip_address=ip
                )
            except (SubmissionMismatch, MalformedSubmission) as e:
                logger.info("student_login: %s (student_id=%s)", e, student_id)
                return _error(policy.msg_malformed, 400)

        if isinstance(result, Success):
            registry.discard(key)
            session["logged_in"] = True
            session["student_id"] = student_id
            if class_id:
                session["class_id"] = class_id

        return _result_response(policy, result)

    @bp.get("/api/auth/student-login/status")
    def login_status():
        key = _client_key()
        now = tracker.now()
        return jsonify(registry.status(key, now).to_dict())

    @bp.post("/api/auth/student-login/back")
    def back():
        key = _client_key()
        now = tracker.now()
        if not registry.discard(key, now):
            return _locked_response(policy, registry.status(key, now).remaining_seconds)
        return jsonify({"ok": True})

    @bp.post("/logout")
    def logout():
        # Keep client_id stable across logout/login cycles
        client_id = session.get("client_id")
        session.clear()
        if client_id:
            session["client_id"] = client_id
        return jsonify({"ok": True})

    return bp
