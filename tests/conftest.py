"""
Shared pytest fixtures for the picture-password login tests.

Fixture summary
---------------
Clock:
    fake_clock           -- settable monotonic clock (seconds)

Credentials:
    store                -- InMemoryCredentialStore seeded with three students

Core:
    policy, tracker      -- LoginPolicy() and an AttemptTracker on fake_clock
    verifier             -- VisualPasswordVerifier over store + tracker
    audit_events         -- list collecting AuditEvents sent to the verifier

Flask:
    app                  -- app from create_app() wired to the fixtures above
    client               -- test client for ``app``
"""

import pytest

from vpportal.app import create_app
from vpportal.config import Settings
from vpportal.credentials import (
    AnimalPassword,
    ColorShapePassword,
    InMemoryCredentialStore,
    ObjectPassword,
    StudentRecord,
)
from vpportal.policy.login_policy import LoginPolicy
from vpportal.ratelimit import AttemptState, AttemptTracker
from vpportal.verifier import VisualPasswordVerifier


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryCredentialStore(
        [
            StudentRecord("stu-cat", AnimalPassword("cat"), class_ids=frozenset({"class-1"})),
            StudentRecord("stu-book", ObjectPassword("book")),
            StudentRecord("stu-blue-star", ColorShapePassword("blue", "star")),
            StudentRecord("stu-gone", AnimalPassword("dog"), active=False),
        ]
    )


@pytest.fixture
def policy():
    return LoginPolicy()


@pytest.fixture
def tracker(policy, fake_clock):
    return AttemptTracker(policy, clock=fake_clock)


@pytest.fixture
def state():
    return AttemptState()


@pytest.fixture
def audit_events():
    return []


@pytest.fixture
def verifier(store, tracker, audit_events):
    return VisualPasswordVerifier(store, tracker, audit_sink=audit_events.append)


@pytest.fixture
def app(store, fake_clock, audit_events):
    settings = Settings(secret_key="test-secret", session_cookie_secure=False)
    flask_app = create_app(settings, store=store, clock=fake_clock, audit_sink=audit_events.append)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()
