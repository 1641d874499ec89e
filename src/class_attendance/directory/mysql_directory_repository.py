from __future__ import annotations

from typing import Iterable, Optional, Sequence, Set

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import Course, Organization, User
from .repository import DirectoryRepository

_USER_COLUMNS = "u.user_id, u.full_name, u.email, u.role, u.organization_id"


def _to_user(r: dict) -> User:
    return User(
        user_id=int(r["user_id"]),
        full_name=r["full_name"],
        email=r["email"],
        role=Role(r["role"]),
        organization_id=r.get("organization_id"),
    )


class MySQLDirectoryRepository(DirectoryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_organization(self, organization_id: int) -> Optional[Organization]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT organization_id, name, description, admin_user_id
                FROM organizations
                WHERE organization_id=%s
                """,
                (int(organization_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Organization(
                organization_id=int(r["organization_id"]),
                name=r["name"],
                description=r.get("description"),
                admin_user_id=r.get("admin_user_id"),
            )

    def get_course(self, course_id: int) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT course_id, name, description, program, instructor_id, organization_id
                FROM courses
                WHERE course_id=%s
                """,
                (int(course_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Course(
                course_id=int(r["course_id"]),
                name=r["name"],
                instructor_id=r.get("instructor_id"),
                organization_id=r.get("organization_id"),
                description=r.get("description"),
                program=r.get("program"),
            )

    def existing_user_ids(self, user_ids: Iterable[int]) -> Set[int]:
        ids = sorted({int(i) for i in user_ids})
        if not ids:
            return set()
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT user_id FROM users WHERE user_id IN ({placeholders(len(ids))})", tuple(ids))
            return {int(r["user_id"]) for r in fetchall(cur)}

    def list_enrolled_students(self, course_id: int) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_USER_COLUMNS}
                FROM users u
                JOIN course_students cs ON cs.user_id = u.user_id
                WHERE cs.course_id=%s
                ORDER BY u.full_name ASC
                """,
                (int(course_id),),
            )
            return [_to_user(r) for r in fetchall(cur)]
