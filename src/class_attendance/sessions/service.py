from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import today_local
from ..core.constants import MISSING_COURSE_NAME, SESSION_NAME_SEPARATOR
from ..core.enums import Capability
from ..core.exceptions import ConflictError, ForbiddenError, InvalidStateError, NotFoundError
from ..core.permissions import CallerIdentity, can_access_organization, require
from ..directory.model import Course, User
from ..directory.repository import DirectoryRepository
from .model import ClassSession, NewClassSession, SessionDetails
from .repository import SessionRepository

logger = logging.getLogger(__name__)


def default_session_name(course_name: str, session_date: date) -> str:
    return f"{course_name}{SESSION_NAME_SEPARATOR}{session_date.isoformat()}"


class SessionService:
    """Use case: resolve the one session per (course, day) and read sessions back."""

    def __init__(self, sessions: SessionRepository, directory: DirectoryRepository):
        self._sessions = sessions
        self._directory = directory

    def _get_course(self, course_id: int) -> Course:
        course = self._directory.get_course(int(course_id))
        if not course:
            raise NotFoundError(f"Course {course_id} not found")
        return course

    def _new_session(
        self,
        caller: CallerIdentity,
        course: Course,
        session_date: date,
        name: Optional[str] = None,
    ) -> NewClassSession:
        organization_id = course.organization_id or caller.organization_id
        if organization_id is None:
            raise InvalidStateError("Cannot determine the organization for this session")

        return NewClassSession(
            course_id=course.course_id,
            session_date=session_date,
            name=(name or "").strip() or default_session_name(course.name, session_date),
            instructor_id=course.instructor_id or caller.user_id,
            organization_id=int(organization_id),
        )

    def get_or_create_today_session(
        self,
        caller: CallerIdentity,
        course_id: int,
        *,
        today: Optional[date] = None,
    ) -> ClassSession:
        require(caller, Capability.TAKE_ATTENDANCE)
        today = today or today_local()
        course = self._get_course(course_id)

        existing = self._sessions.get_by_course_and_date(course_id=course.course_id, session_date=today)
        if existing:
            return existing

        new_session = self._new_session(caller, course, today)
        try:
            created = self._sessions.create(new_session)
        except ConflictError:
            # Another request created the same (course, day) between our read and insert.
            winner = self._sessions.get_by_course_and_date(course_id=course.course_id, session_date=today)
            if not winner:
                raise
            logger.info("Session race for course %s on %s resolved to %s", course.course_id, today, winner.session_id)
            return winner

        logger.info("Created session %s for course %s on %s", created.session_id, course.course_id, today)
        return created

    def create_session(
        self,
        caller: CallerIdentity,
        *,
        course_id: int,
        session_date: date,
        name: Optional[str] = None,
    ) -> ClassSession:
        """Explicitly schedule a session on any date; a second one for the same day is a conflict."""

        require(caller, Capability.TAKE_ATTENDANCE)
        course = self._get_course(course_id)
        created = self._sessions.create(self._new_session(caller, course, session_date, name))
        logger.info("Created session %s for course %s on %s", created.session_id, course.course_id, session_date)
        return created

    def get_session(self, session_id: int) -> ClassSession:
        session = self._sessions.get_by_id(int(session_id))
        if not session:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    def list_for_course(self, course_id: int) -> Sequence[ClassSession]:
        return self._sessions.list_for_course(int(course_id))

    def list_for_organization(self, caller: CallerIdentity, organization_id: int) -> Sequence[ClassSession]:
        if not can_access_organization(caller, int(organization_id)):
            raise ForbiddenError("You cannot view sessions of another organization")
        if not self._directory.get_organization(int(organization_id)):
            raise NotFoundError(f"Organization {organization_id} not found")
        return self._sessions.list_for_organization(int(organization_id))

    def get_session_details(self, session_id: int) -> SessionDetails:
        session = self.get_session(session_id)
        course = self._directory.get_course(session.course_id) if session.course_id is not None else None
        return SessionDetails(
            session_id=session.session_id,
            name=session.name,
            session_date=session.session_date,
            course_name=course.name if course else MISSING_COURSE_NAME,
        )

    def list_roster(self, session_id: int) -> Sequence[User]:
        """Students to mark for a session: the current enrollment of its course."""

        session = self.get_session(session_id)
        if session.course_id is None:
            return []
        return self._directory.list_enrolled_students(session.course_id)
