"""
Tests for visual password verification and its lockout behaviour.
"""

import pytest

from vpportal.audit import LOGIN_LOCKED, LOGIN_SUCCESS
from vpportal.credentials import (
    AnimalPassword,
    ColorShapePassword,
    MalformedSubmission,
    ObjectPassword,
    SubmissionMismatch,
    UntypedSelection,
)
from vpportal.ratelimit import AttemptState
from vpportal.verifier import Failure, Locked, Success, UnknownStudent


class TestAnimalScenario:
    def test_full_lockout_cycle(self, verifier, state, store, fake_clock):
        wrong = AnimalPassword("dog")

        assert verifier.attempt_login(state, "stu-cat", wrong) == Failure(attempts_remaining=4)
        for expected in (3, 2, 1):
            assert verifier.attempt_login(state, "stu-cat", wrong) == Failure(attempts_remaining=expected)

        assert verifier.attempt_login(state, "stu-cat", wrong) == Locked(remaining_seconds=30)

        lookups = store.lookup_count
        assert verifier.attempt_login(state, "stu-cat", AnimalPassword("cat")) == Locked(remaining_seconds=30)
        assert store.lookup_count == lookups

        fake_clock.advance(30)
        assert verifier.attempt_login(state, "stu-cat", AnimalPassword("cat")) == Success("stu-cat")
        assert state.failed_attempt_count == 0

    def test_locked_reports_remaining_time(self, verifier, state, fake_clock):
        for _ in range(5):
            verifier.attempt_login(state, "stu-cat", AnimalPassword("dog"))
        fake_clock.advance(21)
        assert verifier.attempt_login(state, "stu-cat", AnimalPassword("cat")) == Locked(remaining_seconds=9)

    def test_success_resets_count(self, verifier, state):
        verifier.attempt_login(state, "stu-cat", AnimalPassword("dog"))
        verifier.attempt_login(state, "stu-cat", AnimalPassword("dog"))
        assert verifier.attempt_login(state, "stu-cat", AnimalPassword("cat")) == Success("stu-cat")
        assert state.failed_attempt_count == 0

    def test_no_carryover_between_sessions(self, verifier):
        first = AttemptState()
        for _ in range(4):
            verifier.attempt_login(first, "stu-cat", AnimalPassword("dog"))
        second = AttemptState()
        assert verifier.attempt_login(second, "stu-cat", AnimalPassword("dog")) == Failure(attempts_remaining=4)

    def test_match_is_exact(self, verifier, state):
        assert isinstance(verifier.attempt_login(state, "stu-cat", AnimalPassword("Cat")), Failure)
        assert isinstance(verifier.attempt_login(state, "stu-cat", AnimalPassword(" cat")), Failure)

    def test_key_outside_catalog_is_wrong_guess(self, verifier, state):
        assert verifier.attempt_login(state, "stu-cat", AnimalPassword("dragon")) == Failure(4)


class TestColorShape:
    def test_partial_match_fails(self, verifier, state):
        result = verifier.attempt_login(state, "stu-blue-star", ColorShapePassword("blue", "circle"))
        assert result == Failure(attempts_remaining=4)
        result = verifier.attempt_login(state, "stu-blue-star", ColorShapePassword("red", "star"))
        assert result == Failure(attempts_remaining=3)

    def test_both_match_succeeds(self, verifier, state):
        verifier.attempt_login(state, "stu-blue-star", ColorShapePassword("blue", "circle"))
        result = verifier.attempt_login(state, "stu-blue-star", ColorShapePassword("blue", "star"))
        assert result == Success("stu-blue-star")


class TestObject:
    def test_object_password(self, verifier, state):
        assert verifier.attempt_login(state, "stu-book", ObjectPassword("book")) == Success("stu-book")


class TestUnknownStudent:
    def test_unknown_id(self, verifier, state):
        assert verifier.attempt_login(state, "nobody", AnimalPassword("cat")) == UnknownStudent()
        assert state.failed_attempt_count == 0

    def test_inactive_student(self, verifier, state):
        assert verifier.attempt_login(state, "stu-gone", AnimalPassword("dog")) == UnknownStudent()
        assert state.failed_attempt_count == 0

    def test_class_enrollment(self, verifier, state):
        result = verifier.attempt_login(state, "stu-cat", AnimalPassword("cat"), class_id="class-2")
        assert result == UnknownStudent()
        result = verifier.attempt_login(state, "stu-cat", AnimalPassword("cat"), class_id="class-1")
        assert result == Success("stu-cat")

    def test_locked_session_short_circuits_unknown(self, verifier, state, store):
        for _ in range(5):
            verifier.attempt_login(state, "stu-cat", AnimalPassword("dog"))
        lookups = store.lookup_count
        assert isinstance(verifier.attempt_login(state, "nobody", AnimalPassword("cat")), Locked)
        assert store.lookup_count == lookups


class TestDefects:
    def test_type_mismatch(self, verifier, state):
        with pytest.raises(SubmissionMismatch):
            verifier.attempt_login(state, "stu-blue-star", AnimalPassword("cat"))
        assert state.failed_attempt_count == 0

    def test_not_a_submission(self, verifier, state):
        with pytest.raises(TypeError):
            verifier.attempt_login(state, "stu-cat", "cat")


class TestAudit:
    def test_success_and_lock_events(self, verifier, state, audit_events):
        for _ in range(5):
            verifier.attempt_login(state, "stu-cat", AnimalPassword("dog"), ip_address="10.0.0.1")
        assert [e.action for e in audit_events] == [LOGIN_LOCKED]
        assert audit_events[0].details == {"failedAttempts": 5}
        assert audit_events[0].ip_address == "10.0.0.1"

        fresh = AttemptState()
        verifier.attempt_login(fresh, "stu-cat", AnimalPassword("cat"))
        assert audit_events[-1].action == LOGIN_SUCCESS
        assert audit_events[-1].student_id == "stu-cat"

    def test_failing_sink_does_not_block_login(self, store, tracker, state):
        from vpportal.verifier import VisualPasswordVerifier

        def broken_sink(event):
            raise RuntimeError("audit table unavailable")

        verifier = VisualPasswordVerifier(store, tracker, audit_sink=broken_sink)
        assert verifier.attempt_login(state, "stu-cat", AnimalPassword("cat")) == Success("stu-cat")


class TestUntypedSelection:
    def test_resolved_against_stored_type(self, verifier, state):
        assert verifier.attempt_login(state, "stu-book", UntypedSelection("car")) == Failure(4)
        assert verifier.attempt_login(state, "stu-book", UntypedSelection("book")) == Success("stu-book")

    def test_color_shape_needs_both_parts(self, verifier, state):
        with pytest.raises(MalformedSubmission):
            verifier.attempt_login(state, "stu-blue-star", UntypedSelection("blue"))
        assert state.failed_attempt_count == 0

    def test_locked_before_resolution(self, verifier, state, store):
        for _ in range(5):
            verifier.attempt_login(state, "stu-book", UntypedSelection("car"))
        lookups = store.lookup_count
        assert verifier.attempt_login(state, "stu-book", UntypedSelection("book")) == Locked(30)
        assert store.lookup_count == lookups
