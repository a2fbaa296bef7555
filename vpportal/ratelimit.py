import math
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

@dataclass
class AttemptState:
    student_id: Optional[str] = None
    failed_attempt_count: int = 0
    locked_until: Optional[float] = None  # tracker clock seconds


@dataclass(frozen=True)
class AttemptStatus:
    failed_attempts: int
    attempts_remaining: int
    locked: bool
    remaining_seconds: int

    def to_dict(self) -> dict:
        return {
            "failedAttempts": self.failed_attempts,
            "attemptsRemaining": self.attempts_remaining,
            "locked": self.locked,
            "remainingSeconds": self.remaining_seconds,
        }


class AttemptTracker:
    """
    Lockout state machine for one login session's AttemptState.

    Active -> Locked once failed_attempt_count reaches policy.max_attempts;
    Locked -> Active (count back to 0) as soon as now >= locked_until.
    Every query takes an explicit ``now`` so one evaluation reads the clock once.
    """

    def __init__(self, policy, clock=time.monotonic):
        self.policy = policy
        self.clock = clock

    def now(self) -> float:
        return self.clock()

    def refresh(self, state: AttemptState, now: float) -> AttemptState:
        if state.locked_until is not None and now >= state.locked_until:
            self.reset(state)
        return state

    def is_locked(self, state: AttemptState, now: float) -> bool:
        self.refresh(state, now)
        return state.locked_until is not None

    def remaining_seconds(self, state: AttemptState, now: float) -> int:
        if not self.is_locked(state, now):
            return 0
        # recomputed from the deadline; round away float noise before ceil
        return max(0, math.ceil(round(state.locked_until - now, 3)))

    def attempts_remaining(self, state: AttemptState) -> int:
        return max(0, self.policy.max_attempts - state.failed_attempt_count)

    def record_failure(self, state: AttemptState, now: float) -> bool:
        """Count one wrong guess. Returns True if this failure started a lock."""
        if self.is_locked(state, now):
            return False
        state.failed_attempt_count = min(state.failed_attempt_count + 1, self.policy.max_attempts)
        if state.failed_attempt_count >= self.policy.max_attempts:
            state.locked_until = now + self.policy.lock_duration_sec
            return True
        return False

    def reset(self, state: AttemptState) -> None:
        state.failed_attempt_count = 0
        state.locked_until = None

    def snapshot(self, state: AttemptState, now: float) -> AttemptStatus:
        remaining = self.remaining_seconds(state, now)
        return AttemptStatus(
            failed_attempts=state.failed_attempt_count,
            attempts_remaining=self.attempts_remaining(state),
            locked=state.locked_until is not None,
            remaining_seconds=remaining,
        )


class _Slot:
    __slots__ = ("lock", "state", "users", "last_seen")

    def __init__(self):
        self.lock = threading.Lock()
        self.state = None      # AttemptState, or None once discarded
        self.users = 0         # requests holding or waiting on lock
        self.last_seen = 0.0


class AttemptRegistry:
    """
    In-memory (per process) AttemptState per login session key.

    hold() serializes requests for the same key so concurrent guesses from
    one session cannot lose an increment; different keys never contend.
    Unlocked states untouched for ``idle_ttl_sec`` are evicted, and a slot
    is dropped as soon as its state is gone and no request is using it.
    """

    def __init__(self, tracker: AttemptTracker, idle_ttl_sec: float = 900):
        self.tracker = tracker
        self.idle_ttl_sec = idle_ttl_sec
        self._slots = {}                 # key -> _Slot
        self._guard = threading.Lock()
        self._next_sweep = None

    def __len__(self) -> int:
        with self._guard:
            return sum(1 for slot in self._slots.values() if slot.state is not None)

    def _sweep(self, now: float) -> None:
        # caller holds _guard
        if self._next_sweep is not None and now < self._next_sweep:
            return
        self._next_sweep = now + min(self.idle_ttl_sec, 60)
        for key in list(self._slots):
            slot = self._slots[key]
            if slot.users:
                continue
            state = slot.state
            locked = state is not None and state.locked_until is not None and now < state.locked_until
            if state is None or (not locked and now - slot.last_seen >= self.idle_ttl_sec):
                del self._slots[key]

    def _acquire(self, key: str, create: bool) -> Optional[_Slot]:
        now = self.tracker.now()
        with self._guard:
            self._sweep(now)
            slot = self._slots.get(key)
            if slot is None:
                if not create:
                    return None
                slot = self._slots[key] = _Slot()
            slot.users += 1
        slot.lock.acquire()
        slot.last_seen = now
        return slot

    def _release(self, key: str, slot: _Slot) -> None:
        slot.lock.release()
        with self._guard:
            slot.users -= 1
            if slot.users == 0 and slot.state is None and self._slots.get(key) is slot:
                del self._slots[key]

    @contextmanager
    def hold(self, key: str):
        slot = self._acquire(key, create=True)
        try:
            if slot.state is None:
                slot.state = AttemptState()
            yield slot.state
        finally:
            self._release(key, slot)

    def begin(self, key: str, student_id: str, now: float) -> AttemptStatus:
        """
        Start a fresh AttemptState for ``student_id`` and return its status.
        A locked session stays locked, whichever student is picked next.
        """
        with self.hold(key) as state:
            if not self.tracker.is_locked(state, now):
                self.tracker.reset(state)
                state.student_id = student_id
            return self.tracker.snapshot(state, now)

    def status(self, key: str, now: float) -> AttemptStatus:
        """Current status for ``key`` without creating any state."""
        slot = self._acquire(key, create=False)
        if slot is None:
            return self.tracker.snapshot(AttemptState(), now)
        try:
            return self.tracker.snapshot(slot.state or AttemptState(), now)
        finally:
            self._release(key, slot)

    def discard(self, key: str, now: Optional[float] = None) -> bool:
        """Drop the session's state unless it is locked. Returns True if dropped."""
        slot = self._acquire(key, create=False)
        if slot is None:
            return True
        try:
            if slot.state is not None and now is not None and self.tracker.is_locked(slot.state, now):
                return False
            slot.state = None
            return True
        finally:
            self._release(key, slot)
