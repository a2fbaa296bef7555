import logging
from urllib.parse import quote

import requests

from .credentials import (
    CredentialLookupError,
    StudentRecord,
    UnknownStudentError,
    parse_password,
)

logger = logging.getLogger(__name__)


class RosterClient:
    """Credential store backed by the school roster service over HTTP."""

    def __init__(self, roster_url: str, api_token: str = "", timeout: float = 10):
        self.roster_url = roster_url.rstrip("/")
        self.api_token = api_token
        self.timeout = timeout

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        return headers

    def lookup(self, student_id: str) -> StudentRecord:
        """
        Resolve a student via GET /students/<id>/visual-password.
        Success: HTTP 200 with the student's visual password type and data.
        We never send the submitted guess to the roster (comparison is local).
        """
        # one path segment, whatever the id contains
        url = f"{self.roster_url}/students/{quote(student_id, safe='')}/visual-password"
        try:
            r = requests.get(url, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("roster lookup failed for student_id=%s: %s", student_id, e)
            raise CredentialLookupError(student_id) from e

        if r.status_code == 404:
            raise UnknownStudentError(student_id)
        if r.status_code != 200:
            logger.error("roster lookup for student_id=%s returned HTTP %s", student_id, r.status_code)
            raise CredentialLookupError(student_id)

        try:
            body = r.json()
            password = parse_password(body["visualPasswordType"], body["visualPasswordData"])
        except (ValueError, KeyError, TypeError) as e:
            # bad JSON or a stored credential that does not parse
            logger.error("roster returned an unusable credential for student_id=%s: %s", student_id, e)
            raise CredentialLookupError(student_id) from e

        return StudentRecord(
            student_id=str(body.get("studentId", student_id)),
            password=password,
            active=bool(body.get("active", True)),
            class_ids=frozenset(str(c) for c in body.get("classIds") or ()),
        )
