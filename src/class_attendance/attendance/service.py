from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Mapping, Optional, Sequence

from ..common.validators import require_id
from ..core.enums import Capability, Role
from ..core.exceptions import ForbiddenError, InvalidStateError, NotFoundError, WriteConflictError
from ..core.permissions import CallerIdentity, can_access_organization, is_allowed, require
from ..directory.repository import DirectoryRepository
from ..sessions.model import ClassSession
from ..sessions.service import SessionService
from .model import AttendanceInput, AttendanceMark, AttendanceRecord, UpsertResult
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _collapse_marks(marks: Iterable[AttendanceMark]) -> list[AttendanceMark]:
    """One mark per student; the last one submitted wins."""

    by_student: dict[int, AttendanceMark] = {}
    for mark in marks:
        by_student[int(mark.student_id)] = AttendanceMark(student_id=int(mark.student_id), present=bool(mark.present))
    return list(by_student.values())


class AttendanceService:
    """Use cases: record attendance marks (upsert) and read them back scoped by role."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionService,
        directory: DirectoryRepository,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._directory = directory

    # ---- marking -------------------------------------------------------

    def _apply_marks(self, session: ClassSession, marks: Sequence[AttendanceMark]) -> UpsertResult:
        if session.course_id is None:
            raise InvalidStateError(f"Session {session.session_id} has no course")

        organization_id = session.organization_id
        if organization_id is None:
            course = self._directory.get_course(session.course_id)
            organization_id = course.organization_id if course else None

        marks = _collapse_marks(marks)
        if not marks:
            return UpsertResult()

        # Validate every student before writing anything so a bad id never leaves half a batch.
        wanted = {m.student_id for m in marks}
        missing = sorted(wanted - set(self._directory.existing_user_ids(wanted)))
        if missing:
            raise NotFoundError(f"Student {missing[0]} not found")

        upsert = dict(
            session_id=session.session_id,
            course_id=session.course_id,
            organization_id=organization_id,
            marks=marks,
        )
        try:
            result = self._attendance.upsert_marks(**upsert)
        except WriteConflictError:
            # The aborted transaction wrote nothing; run the batch once more.
            logger.warning("Lock conflict marking session %s, retrying", session.session_id)
            result = self._attendance.upsert_marks(**upsert)
        logger.info(
            "Attendance for session %s: %s created, %s updated",
            session.session_id,
            result.created,
            result.updated,
        )
        return result

    def register_attendance(
        self,
        caller: CallerIdentity,
        session_id: int,
        marks: Sequence[AttendanceMark],
    ) -> None:
        require(caller, Capability.TAKE_ATTENDANCE)
        session = self._sessions.get_session(session_id)
        self._apply_marks(session, marks)

    def register_attendance_by_course(
        self,
        caller: CallerIdentity,
        course_id: int,
        marks_by_student: Mapping[int, bool],
        *,
        today: Optional[date] = None,
    ) -> None:
        """Older API: resolve today's session for the course, then apply the marks."""

        session = self._sessions.get_or_create_today_session(caller, course_id, today=today)
        marks = [AttendanceMark(student_id=int(k), present=bool(v)) for k, v in marks_by_student.items()]
        self._apply_marks(session, marks)

    def save(self, caller: CallerIdentity, data: AttendanceInput) -> AttendanceRecord:
        session_id = require_id(data.session_id, "session_id")
        student_id = require_id(data.student_id, "student_id")
        require(caller, Capability.TAKE_ATTENDANCE)

        session = self._sessions.get_session(session_id)
        self._apply_marks(session, [AttendanceMark(student_id=student_id, present=data.attended)])

        record = self._attendance.get_for_student_and_session(student_id=student_id, session_id=session_id)
        if not record:
            raise NotFoundError(f"Attendance for student {student_id} in session {session_id} not found")
        return record

    # ---- scoped reads ----------------------------------------------------

    def find_all(self, caller: CallerIdentity) -> Sequence[AttendanceRecord]:
        if is_allowed(caller, Capability.VIEW_ALL_ATTENDANCE):
            return self._attendance.list_all()

        require(caller, Capability.VIEW_ORGANIZATION_ATTENDANCE)
        if caller.organization_id is None:
            if caller.role == Role.ADMIN:
                raise ForbiddenError("Administrator has no organization")
            return []
        return self._attendance.list_for_organization(caller.organization_id)

    def find_by_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_session(int(session_id))

    def find_by_course(self, course_id: int) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_course(int(course_id))

    def find_by_organization(self, caller: CallerIdentity, organization_id: int) -> Sequence[AttendanceRecord]:
        require(caller, Capability.VIEW_ORGANIZATION_ATTENDANCE)
        if not can_access_organization(caller, int(organization_id)):
            raise ForbiddenError("You cannot view attendance of another organization")
        if not self._directory.get_organization(int(organization_id)):
            raise NotFoundError(f"Organization {organization_id} not found")
        return self._attendance.list_for_organization(int(organization_id))

    def find_by_id(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError(f"Attendance {attendance_id} not found")
        return record

    def delete_by_id(self, caller: CallerIdentity, attendance_id: int) -> None:
        require(caller, Capability.DELETE_ATTENDANCE)
        if self._attendance.delete_by_id(int(attendance_id)):
            logger.info("Attendance %s deleted by user %s", attendance_id, caller.user_id)
