from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

import pytest

from class_attendance.attendance.model import AttendanceMark, AttendanceRecord, AttendanceReportRow, UpsertResult
from class_attendance.container import build_services
from class_attendance.core.enums import Role
from class_attendance.core.exceptions import ConflictError, WriteConflictError
from class_attendance.core.permissions import CallerIdentity
from class_attendance.directory.model import Course, Organization, User
from class_attendance.sessions.model import ClassSession, NewClassSession

ORG_ID = 5
OTHER_ORG_ID = 6
COURSE_ID = 10
OTHER_COURSE_ID = 11
INSTRUCTOR_ID = 20
STUDENT_A = 31
STUDENT_B = 32
OUTSIDER_ID = 40


class InMemoryDirectory:
    def __init__(self):
        self.organizations: dict[int, Organization] = {}
        self.courses: dict[int, Course] = {}
        self.users: dict[int, User] = {}
        self.enrollments: dict[int, list[int]] = {}

    def add_user(self, user_id: int, full_name: str, role: Role = Role.USER, organization_id: Optional[int] = None) -> User:
        user = User(
            user_id=user_id,
            full_name=full_name,
            email=f"user{user_id}@example.com",
            role=role,
            organization_id=organization_id,
        )
        self.users[user_id] = user
        return user

    def enroll(self, course_id: int, *user_ids: int) -> None:
        enrolled = self.enrollments.setdefault(course_id, [])
        for user_id in user_ids:
            if user_id not in enrolled:
                enrolled.append(user_id)

    def get_organization(self, organization_id: int) -> Optional[Organization]:
        return self.organizations.get(organization_id)

    def get_course(self, course_id: int) -> Optional[Course]:
        return self.courses.get(course_id)

    def existing_user_ids(self, user_ids: Iterable[int]) -> set[int]:
        return {int(i) for i in user_ids if int(i) in self.users}

    def list_enrolled_students(self, course_id: int) -> Sequence[User]:
        users = [self.users[i] for i in self.enrollments.get(course_id, [])]
        return sorted(users, key=lambda u: u.full_name)


class InMemorySessions:
    def __init__(self):
        self._by_id: dict[int, ClassSession] = {}
        self._id = 0

    def get_by_id(self, session_id: int) -> Optional[ClassSession]:
        return self._by_id.get(session_id)

    def get_by_course_and_date(self, *, course_id: int, session_date: date) -> Optional[ClassSession]:
        for s in self._by_id.values():
            if s.course_id == course_id and s.session_date == session_date:
                return s
        return None

    def create(self, session: NewClassSession) -> ClassSession:
        if self.get_by_course_and_date(course_id=session.course_id, session_date=session.session_date):
            raise ConflictError("duplicate (course, date)")
        return self.insert(
            course_id=session.course_id,
            session_date=session.session_date,
            name=session.name,
            instructor_id=session.instructor_id,
            organization_id=session.organization_id,
        )

    def insert(self, *, course_id, session_date, name="Class", instructor_id=None, organization_id=None) -> ClassSession:
        """Store a row as-is (bypasses the unique check, like a legacy row)."""
        self._id += 1
        s = ClassSession(
            session_id=self._id,
            course_id=course_id,
            session_date=session_date,
            name=name,
            instructor_id=instructor_id,
            organization_id=organization_id,
        )
        self._by_id[s.session_id] = s
        return s

    def all(self) -> list[ClassSession]:
        return list(self._by_id.values())

    def list_for_course(self, course_id: int) -> Sequence[ClassSession]:
        items = [s for s in self._by_id.values() if s.course_id == course_id]
        return sorted(items, key=lambda s: s.session_date, reverse=True)

    def list_for_organization(self, organization_id: int) -> Sequence[ClassSession]:
        items = [s for s in self._by_id.values() if s.organization_id == organization_id]
        return sorted(items, key=lambda s: s.session_date, reverse=True)

    def list_for_course_between(self, *, course_id: int, start: date, end: date) -> Sequence[ClassSession]:
        items = [s for s in self._by_id.values() if s.course_id == course_id and start <= s.session_date <= end]
        return sorted(items, key=lambda s: s.session_date)


class InMemoryAttendance:
    def __init__(self, sessions: InMemorySessions, directory: InMemoryDirectory):
        self._sessions = sessions
        self._directory = directory
        self._by_id: dict[int, AttendanceRecord] = {}
        self._id = 0
        self.fail_on_student: Optional[int] = None
        self.lock_conflicts = 0
        self.upsert_calls = 0

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._by_id.get(attendance_id)

    def get_for_student_and_session(self, *, student_id: int, session_id: int) -> Optional[AttendanceRecord]:
        for r in self._by_id.values():
            if r.student_id == student_id and r.session_id == session_id:
                return r
        return None

    def upsert_marks(self, *, session_id, course_id, organization_id, marks: Sequence[AttendanceMark]) -> UpsertResult:
        self.upsert_calls += 1
        if self.lock_conflicts:
            self.lock_conflicts -= 1
            raise WriteConflictError("deadlock")
        # Work on a copy and swap it in at the end: all or nothing, like one DB transaction.
        staged = dict(self._by_id)
        next_id = self._id
        created = updated = 0
        for mark in marks:
            if self.fail_on_student == mark.student_id:
                raise RuntimeError("connection lost")
            existing = next(
                (r for r in staged.values() if r.student_id == mark.student_id and r.session_id == session_id),
                None,
            )
            if existing:
                staged[existing.attendance_id] = AttendanceRecord(
                    attendance_id=existing.attendance_id,
                    session_id=existing.session_id,
                    student_id=existing.student_id,
                    course_id=existing.course_id,
                    organization_id=existing.organization_id,
                    attended=mark.present,
                )
                updated += 1
            else:
                next_id += 1
                staged[next_id] = AttendanceRecord(
                    attendance_id=next_id,
                    session_id=session_id,
                    student_id=mark.student_id,
                    course_id=course_id,
                    organization_id=organization_id,
                    attended=mark.present,
                )
                created += 1
        self._by_id = staged
        self._id = next_id
        return UpsertResult(created=created, updated=updated)

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        self._by_id[record.attendance_id] = record
        self._id = max(self._id, record.attendance_id)
        return record

    def list_all(self) -> Sequence[AttendanceRecord]:
        return sorted(self._by_id.values(), key=lambda r: r.attendance_id)

    def list_for_session(self, session_id: int) -> Sequence[AttendanceRecord]:
        return [r for r in self.list_all() if r.session_id == session_id]

    def list_for_course(self, course_id: int) -> Sequence[AttendanceRecord]:
        return [r for r in self.list_all() if r.course_id == course_id]

    def list_for_organization(self, organization_id: int) -> Sequence[AttendanceRecord]:
        return [r for r in self.list_all() if r.organization_id == organization_id]

    def delete_by_id(self, attendance_id: int) -> bool:
        return self._by_id.pop(attendance_id, None) is not None

    def get_report_rows(self, *, course_id: int, start_date: date, end_date: date) -> Sequence[AttendanceReportRow]:
        rows = []
        for r in self.list_all():
            session = self._sessions.get_by_id(r.session_id)
            if r.course_id != course_id or not session or not (start_date <= session.session_date <= end_date):
                continue
            rows.append(
                AttendanceReportRow(
                    attendance_id=r.attendance_id,
                    session_id=r.session_id,
                    session_date=session.session_date,
                    student_id=r.student_id,
                    full_name=self._directory.users[r.student_id].full_name,
                    attended=r.attended,
                )
            )
        return rows


@pytest.fixture
def today() -> date:
    return date(2024, 3, 1)


@pytest.fixture
def directory() -> InMemoryDirectory:
    d = InMemoryDirectory()
    d.organizations[ORG_ID] = Organization(organization_id=ORG_ID, name="Dojo Centro")
    d.organizations[OTHER_ORG_ID] = Organization(organization_id=OTHER_ORG_ID, name="Dojo Norte")

    d.add_user(INSTRUCTOR_ID, "Marcelo", Role.INSTRUCTOR, ORG_ID)
    d.add_user(STUDENT_A, "Ana", Role.USER, ORG_ID)
    d.add_user(STUDENT_B, "Bruno", Role.USER, ORG_ID)
    d.add_user(OUTSIDER_ID, "Zoe", Role.USER, OTHER_ORG_ID)

    d.courses[COURSE_ID] = Course(
        course_id=COURSE_ID,
        name="BJJ Kids",
        instructor_id=INSTRUCTOR_ID,
        organization_id=ORG_ID,
        program="BJJ",
    )
    d.courses[OTHER_COURSE_ID] = Course(
        course_id=OTHER_COURSE_ID,
        name="Judo Adults",
        instructor_id=INSTRUCTOR_ID,
        organization_id=OTHER_ORG_ID,
    )
    d.enroll(COURSE_ID, STUDENT_B, STUDENT_A)
    d.enroll(OTHER_COURSE_ID, OUTSIDER_ID)
    return d


@pytest.fixture
def sessions_repo() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def attendance_repo(sessions_repo, directory) -> InMemoryAttendance:
    return InMemoryAttendance(sessions_repo, directory)


@pytest.fixture
def container(directory, sessions_repo, attendance_repo):
    return build_services(directory_repo=directory, sessions_repo=sessions_repo, attendance_repo=attendance_repo)


@pytest.fixture
def super_admin() -> CallerIdentity:
    return CallerIdentity(user_id=1, role=Role.SUPER_ADMIN, organization_id=None)


@pytest.fixture
def admin() -> CallerIdentity:
    return CallerIdentity(user_id=2, role=Role.ADMIN, organization_id=ORG_ID)


@pytest.fixture
def instructor() -> CallerIdentity:
    return CallerIdentity(user_id=INSTRUCTOR_ID, role=Role.INSTRUCTOR, organization_id=ORG_ID)


@pytest.fixture
def student() -> CallerIdentity:
    return CallerIdentity(user_id=STUDENT_A, role=Role.USER, organization_id=ORG_ID)
