"""
Visual password verification.

attempt_login() is the only operation that mutates an AttemptState. The
lock check runs before anything else, so a locked session never reaches
the credential store, and wrong guesses come back as result values rather
than exceptions.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from .audit import LOGIN_LOCKED, LOGIN_SUCCESS, record_audit_event
from .credentials import (
    AnimalPassword,
    ColorShapePassword,
    ObjectPassword,
    SubmissionMismatch,
    UnknownStudentError,
    UntypedSelection,
)
from .ratelimit import AttemptState, AttemptTracker

logger = logging.getLogger(__name__)

_SUBMISSION_CLASSES = (AnimalPassword, ObjectPassword, ColorShapePassword, UntypedSelection)


@dataclass(frozen=True)
class Success:
    student_id: str

    outcome = "success"


@dataclass(frozen=True)
class Failure:
    attempts_remaining: int

    outcome = "failure"


@dataclass(frozen=True)
class Locked:
    remaining_seconds: int

    outcome = "locked"


@dataclass(frozen=True)
class UnknownStudent:
    outcome = "unknown_student"


VerificationResult = Union[Success, Failure, Locked, UnknownStudent]


class VisualPasswordVerifier:
    def __init__(self, store, tracker: AttemptTracker, audit_sink=None):
        self.store = store
        self.tracker = tracker
        self.audit_sink = audit_sink

    def attempt_login(
        self,
        state: AttemptState,
        student_id: str,
        submission,
        class_id: Optional[str] = None,
        now: Optional[float] = None,
        ip_address: Optional[str] = None,
    ) -> VerificationResult:
        """
        Check one guess for ``student_id`` and advance ``state``.

        Args:
            state: the login session's AttemptState (caller serializes access).
            student_id: opaque id resolved through the credential store.
            submission: AnimalPassword, ObjectPassword, ColorShapePassword, or an
                UntypedSelection resolved against the student's password type.
            class_id: when given, the student must be enrolled in it.
            now: tracker clock reading; read once here when omitted.
            ip_address: forwarded to audit events only.

        Returns:
            Success, Failure, Locked or UnknownStudent.

        Raises:
            SubmissionMismatch: submission is not a visual password, or is a
                different password type from the student's credential.
            MalformedSubmission: an UntypedSelection that does not fit the
                student's password type.
        """
        if not isinstance(submission, _SUBMISSION_CLASSES):
            raise SubmissionMismatch(f"Not a visual password submission: {type(submission).__name__}")

        if now is None:
            now = self.tracker.now()

        if self.tracker.is_locked(state, now):
            return Locked(self.tracker.remaining_seconds(state, now))

        try:
            record = self.store.lookup(student_id)
        except UnknownStudentError:
            logger.warning("attempt_login: student_id=%s could not be resolved", student_id)
            return UnknownStudent()

        if not record.active:
            logger.warning("attempt_login: student_id=%s is inactive", student_id)
            return UnknownStudent()
        if class_id and not record.enrolled_in(class_id):
            logger.warning("attempt_login: student_id=%s not enrolled in class_id=%s", student_id, class_id)
            return UnknownStudent()

        if isinstance(submission, UntypedSelection):
            submission = submission.resolve(record.password_type)

        if type(submission) is not type(record.password):
            raise SubmissionMismatch(
                f"{submission.type.value} submission for a {record.password_type.value} password"
            )

        if submission == record.password:
            self.tracker.reset(state)
            logger.info("attempt_login: student_id=%s signed in", student_id)
            record_audit_event(self.audit_sink, LOGIN_SUCCESS, student_id, ip_address=ip_address)
            return Success(student_id)

        if not submission.in_catalog():
            logger.info("attempt_login: student_id=%s picked a key outside the catalog", student_id)

        if self.tracker.record_failure(state, now):
            logger.warning(
                "attempt_login: student_id=%s locked for %ss after %s wrong picks",
                student_id,
                self.tracker.policy.lock_duration_sec,
                state.failed_attempt_count,
            )
            record_audit_event(
                self.audit_sink,
                LOGIN_LOCKED,
                student_id,
                details={"failedAttempts": state.failed_attempt_count},
                ip_address=ip_address,
            )
            return Locked(self.tracker.policy.lock_duration_sec)

        return Failure(self.tracker.attempts_remaining(state))
