from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import ClassSession, NewClassSession


class SessionRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        raise NotImplementedError

    def get_by_course_and_date(self, *, course_id: int, session_date: date) -> Optional[ClassSession]:
        raise NotImplementedError

    def create(self, session: NewClassSession) -> ClassSession:
        """Insert a session.

        Raises ConflictError if (course_id, session_date) already exists.
        """

        raise NotImplementedError

    def list_for_course(self, course_id: int) -> Sequence[ClassSession]:
        raise NotImplementedError

    def list_for_organization(self, organization_id: int) -> Sequence[ClassSession]:
        raise NotImplementedError

    def list_for_course_between(self, *, course_id: int, start: date, end: date) -> Sequence[ClassSession]:
        raise NotImplementedError
