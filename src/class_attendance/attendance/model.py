from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's mark for one session.

    ``course_id`` and ``organization_id`` are snapshots taken when the record is created
    and are never rewritten by later marks.
    """

    attendance_id: int
    session_id: int
    student_id: int
    course_id: Optional[int]
    organization_id: Optional[int]
    attended: bool


@dataclass(frozen=True)
class AttendanceMark:
    student_id: int
    present: bool


@dataclass(frozen=True)
class AttendanceInput:
    """Single-record upsert request."""

    session_id: Optional[int]
    student_id: Optional[int]
    attended: bool = False


@dataclass(frozen=True)
class UpsertResult:
    created: int = 0
    updated: int = 0


@dataclass(frozen=True)
class AttendanceReportRow:
    """Read-model for monthly reports (record joined with student and session date)."""

    attendance_id: int
    session_id: int
    session_date: date
    student_id: int
    full_name: str
    attended: bool
