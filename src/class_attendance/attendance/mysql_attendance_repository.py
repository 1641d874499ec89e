from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import WriteConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_deadlock
from .model import AttendanceMark, AttendanceRecord, AttendanceReportRow, UpsertResult
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, session_id, student_id, course_id, organization_id, attended"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        session_id=int(r["session_id"]),
        student_id=int(r["student_id"]),
        course_id=r.get("course_id"),
        organization_id=r.get("organization_id"),
        attended=bool(r["attended"]),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_student_and_session(self, *, student_id: int, session_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE student_id=%s AND session_id=%s",
                (int(student_id), int(session_id)),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def upsert_marks(
        self,
        *,
        session_id: int,
        course_id: int,
        organization_id: Optional[int],
        marks: Sequence[AttendanceMark],
    ) -> UpsertResult:
        if not marks:
            return UpsertResult()

        student_ids = [int(m.student_id) for m in marks]
        created = 0
        updated = 0

        # The unique (session_id, student_id) key keeps one row per pair; a duplicate
        # only rewrites ``attended`` and leaves the snapshot columns alone.
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                for student_id, mark in zip(student_ids, marks):
                    cur.execute(
                        """
                        INSERT INTO attendance_records(session_id, student_id, course_id, organization_id, attended)
                        VALUES(%s,%s,%s,%s,%s)
                        ON DUPLICATE KEY UPDATE attended=VALUES(attended)
                        """,
                        (int(session_id), student_id, int(course_id), organization_id, bool(mark.present)),
                    )
                    # 1: inserted; 2: updated; 0: existing row already had this value.
                    if cur.rowcount == 1:
                        created += 1
                    else:
                        updated += 1
        except mysql.connector.Error as e:
            if is_deadlock(e):
                raise WriteConflictError(f"Attendance for session {session_id} hit a lock conflict") from e
            raise

        return UpsertResult(created=created, updated=updated)

    def list_all(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records ORDER BY attendance_id ASC")
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE session_id=%s ORDER BY attendance_id ASC",
                (int(session_id),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_course(self, course_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE course_id=%s ORDER BY attendance_id ASC",
                (int(course_id),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_organization(self, organization_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE organization_id=%s ORDER BY attendance_id ASC",
                (int(organization_id),),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def delete_by_id(self, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (int(attendance_id),))
            return cur.rowcount > 0

    def get_report_rows(self, *, course_id: int, start_date: date, end_date: date) -> Sequence[AttendanceReportRow]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    ar.attendance_id, ar.session_id, cs.session_date,
                    u.user_id AS student_id, u.full_name,
                    ar.attended
                FROM attendance_records ar
                JOIN class_sessions cs ON cs.session_id = ar.session_id
                JOIN users u ON u.user_id = ar.student_id
                WHERE ar.course_id=%s AND cs.session_date BETWEEN %s AND %s
                ORDER BY cs.session_date ASC, u.full_name ASC
                """,
                (int(course_id), start_date, end_date),
            )
            return [
                AttendanceReportRow(
                    attendance_id=int(r["attendance_id"]),
                    session_id=int(r["session_id"]),
                    session_date=r["session_date"],
                    student_id=int(r["student_id"]),
                    full_name=r["full_name"],
                    attended=bool(r["attended"]),
                )
                for r in fetchall(cur)
            ]
