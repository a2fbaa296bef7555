"""
Visual password credentials, submissions and the in-memory credential store.

A submission is built from the same variant classes as the stored
credential, so checking a guess is plain equality between two values of
the same class.
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Optional, Union

from .catalog import ANIMALS, COLORS, OBJECTS, SHAPES, VisualPasswordType, is_catalog_key


class UnknownStudentError(LookupError):
    """Student id does not resolve to a configured visual password."""


class CredentialLookupError(UnknownStudentError):
    """The credential store could not be reached or returned garbage."""


class MalformedSubmission(ValueError):
    """A login payload that does not describe any visual password."""


class SubmissionMismatch(TypeError):
    """A submission of one password type checked against another type."""


@dataclass(frozen=True)
class AnimalPassword:
    animal: str

    type = VisualPasswordType.ANIMAL

    def in_catalog(self) -> bool:
        return is_catalog_key(ANIMALS, self.animal)


@dataclass(frozen=True)
class ObjectPassword:
    object_key: str

    type = VisualPasswordType.OBJECT

    def in_catalog(self) -> bool:
        return is_catalog_key(OBJECTS, self.object_key)


@dataclass(frozen=True)
class ColorShapePassword:
    color: str
    shape: str

    type = VisualPasswordType.COLOR_SHAPE

    def in_catalog(self) -> bool:
        return is_catalog_key(COLORS, self.color) and is_catalog_key(SHAPES, self.shape)


VisualPassword = Union[AnimalPassword, ObjectPassword, ColorShapePassword]


@dataclass(frozen=True)
class UntypedSelection:
    """
    A bare selection string (``"cat"``, ``"blue-star"``) whose password type
    is only known once the student has been looked up.
    """

    value: str

    def resolve(self, password_type) -> VisualPassword:
        ptype = VisualPasswordType.parse(password_type)
        if ptype is VisualPasswordType.ANIMAL:
            return AnimalPassword(self.value)
        if ptype is VisualPasswordType.OBJECT:
            return ObjectPassword(self.value)
        return _split_color_shape(self.value)


def _split_color_shape(combined: str) -> ColorShapePassword:
    color, sep, shape = combined.partition("-")
    if not sep or not color or not shape:
        raise MalformedSubmission("color_shape value must look like 'color-shape'")
    return ColorShapePassword(color, shape)


def _require_key(data, name: str) -> str:
    value = data.get(name)
    if not isinstance(value, str) or not value:
        raise MalformedSubmission(f"Missing or invalid '{name}'")
    return value


def parse_password(password_type, data) -> VisualPassword:
    """Build a credential from the stored type and its JSON data."""
    ptype = VisualPasswordType.parse(password_type)
    if not isinstance(data, dict):
        raise MalformedSubmission("Visual password data must be an object")

    if ptype is VisualPasswordType.ANIMAL:
        return AnimalPassword(_require_key(data, "animal"))
    if ptype is VisualPasswordType.OBJECT:
        return ObjectPassword(_require_key(data, "object"))
    return ColorShapePassword(_require_key(data, "color"), _require_key(data, "shape"))


def parse_submission(payload) -> Union[VisualPassword, UntypedSelection]:
    """
    Build a candidate credential from a login request payload.

    Accepted shapes:
        "cat" / "blue-star"                                  (bare selection)
        {"type": "animal", "value": "cat"}
        {"type": "object", "value": "star"}
        {"type": "color_shape", "color": "blue", "shape": "star"}
        {"type": "color_shape", "value": "blue-star"}

    A bare selection comes back as UntypedSelection and is resolved against
    the student's stored password type by the verifier.

    Raises:
        MalformedSubmission: payload is not one of the shapes above.
    """
    if isinstance(payload, str):
        if not payload.strip():
            raise MalformedSubmission("Empty visual password")
        return UntypedSelection(payload)
    if not isinstance(payload, dict):
        raise MalformedSubmission("Visual password must be a string or an object")
    try:
        ptype = VisualPasswordType.parse(payload.get("type"))
    except ValueError as e:
        raise MalformedSubmission(str(e)) from None

    if ptype is VisualPasswordType.ANIMAL:
        return AnimalPassword(_require_key(payload, "value"))
    if ptype is VisualPasswordType.OBJECT:
        return ObjectPassword(_require_key(payload, "value"))

    if "color" in payload or "shape" in payload:
        return ColorShapePassword(_require_key(payload, "color"), _require_key(payload, "shape"))
    return _split_color_shape(_require_key(payload, "value"))


@dataclass(frozen=True)
class StudentRecord:
    student_id: str
    password: VisualPassword
    active: bool = True
    class_ids: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def password_type(self) -> VisualPasswordType:
        return self.password.type

    def enrolled_in(self, class_id: str) -> bool:
        return class_id in self.class_ids


class InMemoryCredentialStore:
    """
    Dict-backed credential store for local runs and tests.

    ``lookup_count`` counts every lookup so callers can check that a locked
    session never reaches the store.
    """

    def __init__(self, records: Optional[Iterable[StudentRecord]] = None):
        self._records: Dict[str, StudentRecord] = {}
        self._lock = threading.Lock()
        self.lookup_count = 0
        for record in records or ():
            self.add(record)

    def add(self, record: StudentRecord) -> None:
        with self._lock:
            self._records[record.student_id] = record

    def lookup(self, student_id: str) -> StudentRecord:
        with self._lock:
            self.lookup_count += 1
            record = self._records.get(student_id)
        if record is None:
            raise UnknownStudentError(student_id)
        return record
