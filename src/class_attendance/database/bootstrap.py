from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "class_attendance_db")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
            continue

        if ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
            continue

        if ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_script(db_config: dict, path: str | Path) -> int:
    target = _as_target(db_config)
    sql = _strip_create_db_and_use(_strip_comments(Path(path).read_text(encoding="utf-8")))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        count = 0
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
        return count
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, schema_path)
    logger.info("Applied %s schema statements from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_script(db_config, seed_path)
    logger.info("Applied %s seed statements from %s", count, seed_path)


def ensure_demo_users(db_config: dict) -> None:
    """Demo accounts, one per role, plus an enrolled course in the first organization.

    Password hashes are written for the external login collaborator; this package
    never verifies them.
    """

    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        def org_id(name: str) -> int:
            cur.execute("SELECT organization_id AS id FROM organizations WHERE name=%s", (name,))
            row = cur.fetchone()
            if not row:
                raise RuntimeError(f"Missing organizations row for name={name}")
            return int(row["id"])

        def upsert_user(full_name: str, email: str, password: str, role: str, organization_id) -> int:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    """
                    UPDATE users
                    SET full_name=%s, password_hash=%s, role=%s, organization_id=%s
                    WHERE email=%s
                    """,
                    (full_name, password_hash, role, organization_id, email),
                )
                return int(existing["user_id"])
            cur.execute(
                """
                INSERT INTO users (full_name, email, password_hash, role, organization_id)
                VALUES (%s, %s, %s, %s, %s)
                """,
                (full_name, email, password_hash, role, organization_id),
            )
            return int(cur.lastrowid)

        centro = org_id("Dojo Centro")

        upsert_user("Super Admin", "root@example.com", "admin123", "SUPER_ADMIN", None)
        upsert_user("Admin Centro", "admin@example.com", "admin123", "ADMIN", centro)
        instructor = upsert_user("Marcelo Instructor", "instructor@example.com", "instructor123", "INSTRUCTOR", centro)
        students = [
            upsert_user("Ana Alumna", "ana@example.com", "student123", "USER", centro),
            upsert_user("Bruno Alumno", "bruno@example.com", "student123", "USER", centro),
        ]

        cur.execute("SELECT course_id FROM courses WHERE name=%s AND organization_id=%s", ("BJJ Kids", centro))
        row = cur.fetchone()
        if row:
            course_id = int(row["course_id"])
        else:
            cur.execute(
                """
                INSERT INTO courses (name, description, program, instructor_id, organization_id)
                VALUES (%s, %s, %s, %s, %s)
                """,
                ("BJJ Kids", "Brazilian jiu-jitsu for kids", "BJJ", instructor, centro),
            )
            course_id = int(cur.lastrowid)

        for student_id in students:
            cur.execute("INSERT IGNORE INTO course_students (course_id, user_id) VALUES (%s, %s)", (course_id, student_id))

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
