from __future__ import annotations

from collections import Counter

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import month_bounds
from ..common.validators import require_month
from ..core.exceptions import NotFoundError
from ..directory.model import Course
from ..directory.repository import DirectoryRepository
from ..sessions.repository import SessionRepository
from .model import CourseMonthlyStat, StudentMonthlyStat


def attendance_percent(present: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return present * 100.0 / total


class MonthlyReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        directory: DirectoryRepository,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._directory = directory

    def _get_course(self, course_id: int) -> Course:
        course = self._directory.get_course(int(course_id))
        if not course:
            raise NotFoundError(f"Course {course_id} not found")
        return course

    def get_course_monthly_stats(self, course_id: int, month: int, year: int) -> list[CourseMonthlyStat]:
        """Every enrolled student against the number of sessions held in the month.

        A session nobody was marked for still counts as a class; a session a student was
        never marked for simply does not add to their ``present``.
        """

        month, year = require_month(month, year)
        course = self._get_course(course_id)
        start, end = month_bounds(year, month)

        sessions = self._sessions.list_for_course_between(course_id=course.course_id, start=start, end=end)
        total_classes = len({s.session_id for s in sessions})

        rows = self._attendance.get_report_rows(course_id=course.course_id, start_date=start, end_date=end)
        present_by_student = Counter(r.student_id for r in rows if r.attended)

        stats = []
        for student in self._directory.list_enrolled_students(course.course_id):
            present = present_by_student.get(student.user_id, 0)
            stats.append(
                CourseMonthlyStat(
                    student_id=student.user_id,
                    student_name=student.full_name,
                    present=present,
                    total_classes=total_classes,
                    percent=attendance_percent(present, total_classes),
                )
            )

        stats.sort(key=lambda s: (s.student_name, s.student_id))
        return stats

    def get_monthly_stats(self, course_id: int, month: int, year: int) -> list[StudentMonthlyStat]:
        """Per-student present/absent counts built only from existing records."""

        month, year = require_month(month, year)
        course = self._get_course(course_id)
        start, end = month_bounds(year, month)

        rows = self._attendance.get_report_rows(course_id=course.course_id, start_date=start, end_date=end)

        summary_map: dict[int, dict] = {}
        for r in rows:
            s = summary_map.get(r.student_id)
            if not s:
                s = {"full_name": r.full_name, "present": 0, "absent": 0}
                summary_map[r.student_id] = s
            if r.attended:
                s["present"] += 1
            else:
                s["absent"] += 1

        stats = []
        for student_id, s in summary_map.items():
            total = s["present"] + s["absent"]
            stats.append(
                StudentMonthlyStat(
                    student_id=student_id,
                    full_name=s["full_name"],
                    present=s["present"],
                    absent=s["absent"],
                    total=total,
                    percent=attendance_percent(s["present"], total),
                )
            )

        stats.sort(key=lambda x: (x.full_name, x.student_id))
        return stats
