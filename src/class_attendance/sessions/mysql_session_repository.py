from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import ClassSession, NewClassSession
from .repository import SessionRepository

_COLUMNS = "session_id, course_id, session_date, name, instructor_id, organization_id"


def _to_session(r: dict) -> ClassSession:
    return ClassSession(
        session_id=int(r["session_id"]),
        course_id=r.get("course_id"),
        session_date=r["session_date"],
        name=r["name"],
        instructor_id=r.get("instructor_id"),
        organization_id=r.get("organization_id"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM class_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_by_course_and_date(self, *, course_id: int, session_date: date) -> Optional[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM class_sessions WHERE course_id=%s AND session_date=%s",
                (int(course_id), session_date),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def create(self, session: NewClassSession) -> ClassSession:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO class_sessions(course_id, session_date, name, instructor_id, organization_id)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (
                        int(session.course_id),
                        session.session_date,
                        session.name,
                        session.instructor_id,
                        int(session.organization_id),
                    ),
                )
                session_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError(
                    f"A session already exists for course {session.course_id} on {session.session_date}"
                ) from e
            raise

        return ClassSession(
            session_id=session_id,
            course_id=session.course_id,
            session_date=session.session_date,
            name=session.name,
            instructor_id=session.instructor_id,
            organization_id=session.organization_id,
        )

    def list_for_course(self, course_id: int) -> Sequence[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM class_sessions WHERE course_id=%s ORDER BY session_date DESC",
                (int(course_id),),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_for_organization(self, organization_id: int) -> Sequence[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM class_sessions WHERE organization_id=%s ORDER BY session_date DESC",
                (int(organization_id),),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_for_course_between(self, *, course_id: int, start: date, end: date) -> Sequence[ClassSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM class_sessions
                WHERE course_id=%s AND session_date BETWEEN %s AND %s
                ORDER BY session_date ASC
                """,
                (int(course_id), start, end),
            )
            return [_to_session(r) for r in fetchall(cur)]
