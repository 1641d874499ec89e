from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DatabaseConnection
from .directory.mysql_directory_repository import MySQLDirectoryRepository
from .directory.repository import DirectoryRepository
from .reports.service import MonthlyReportService
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService


@dataclass(frozen=True)
class Container:
    directory_repo: DirectoryRepository
    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository

    session_service: SessionService
    attendance_service: AttendanceService
    report_service: MonthlyReportService


def build_services(
    *,
    directory_repo: DirectoryRepository,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
) -> Container:
    session_service = SessionService(sessions_repo, directory_repo)
    attendance_service = AttendanceService(attendance_repo, session_service, directory_repo)
    report_service = MonthlyReportService(attendance_repo, sessions_repo, directory_repo)

    return Container(
        directory_repo=directory_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        session_service=session_service,
        attendance_service=attendance_service,
        report_service=report_service,
    )


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection.from_dict(db_config)

    return build_services(
        directory_repo=MySQLDirectoryRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
    )
