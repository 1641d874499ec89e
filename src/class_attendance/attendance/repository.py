from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceMark, AttendanceRecord, AttendanceReportRow, UpsertResult


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_student_and_session(self, *, student_id: int, session_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_marks(
        self,
        *,
        session_id: int,
        course_id: int,
        organization_id: Optional[int],
        marks: Sequence[AttendanceMark],
    ) -> UpsertResult:
        """Apply every mark in one transaction.

        Existing (student, session) rows only get ``attended`` updated; missing rows are
        created with the given course/organization snapshot.
        Raises ``WriteConflictError`` when the transaction is aborted on a lock conflict;
        nothing has been written in that case.
        """

        raise NotImplementedError

    def list_all(self) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_course(self, course_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_organization(self, organization_id: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def delete_by_id(self, attendance_id: int) -> bool:
        raise NotImplementedError

    def get_report_rows(self, *, course_id: int, start_date: date, end_date: date) -> Sequence[AttendanceReportRow]:
        """Records of a course whose session date falls in [start_date, end_date]."""

        raise NotImplementedError
