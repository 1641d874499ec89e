from __future__ import annotations

import pytest

from class_attendance.attendance.model import AttendanceRecord
from class_attendance.core.enums import Role
from class_attendance.core.exceptions import ForbiddenError, NotFoundError
from class_attendance.core.permissions import CallerIdentity

from conftest import COURSE_ID, ORG_ID, OTHER_COURSE_ID, OTHER_ORG_ID, OUTSIDER_ID, STUDENT_A


@pytest.fixture
def records(attendance_repo):
    attendance_repo.add(
        AttendanceRecord(attendance_id=1, session_id=1, student_id=STUDENT_A, course_id=COURSE_ID, organization_id=ORG_ID, attended=True)
    )
    attendance_repo.add(
        AttendanceRecord(attendance_id=2, session_id=2, student_id=OUTSIDER_ID, course_id=OTHER_COURSE_ID, organization_id=OTHER_ORG_ID, attended=False)
    )
    return attendance_repo


def test_super_admin_sees_every_organization(container, records, super_admin):
    found = container.attendance_service.find_all(super_admin)

    assert {r.organization_id for r in found} == {ORG_ID, OTHER_ORG_ID}


def test_admin_sees_only_own_organization(container, records, admin):
    found = container.attendance_service.find_all(admin)

    assert [r.attendance_id for r in found] == [1]


def test_instructor_shares_the_organization_view(container, records, instructor):
    assert [r.attendance_id for r in container.attendance_service.find_all(instructor)] == [1]


def test_admin_without_organization_is_forbidden(container, records):
    caller = CallerIdentity(user_id=2, role=Role.ADMIN, organization_id=None)

    with pytest.raises(ForbiddenError):
        container.attendance_service.find_all(caller)


def test_instructor_without_organization_sees_nothing(container, records):
    caller = CallerIdentity(user_id=3, role=Role.INSTRUCTOR, organization_id=None)

    assert container.attendance_service.find_all(caller) == []


def test_student_cannot_list_attendance(container, records, student):
    with pytest.raises(ForbiddenError):
        container.attendance_service.find_all(student)


def test_unscoped_accessors(container, records):
    svc = container.attendance_service

    assert [r.attendance_id for r in svc.find_by_session(2)] == [2]
    assert [r.attendance_id for r in svc.find_by_course(COURSE_ID)] == [1]


def test_find_by_organization_respects_tenant(container, records, admin, super_admin):
    svc = container.attendance_service

    assert [r.attendance_id for r in svc.find_by_organization(admin, ORG_ID)] == [1]
    assert [r.attendance_id for r in svc.find_by_organization(super_admin, OTHER_ORG_ID)] == [2]
    with pytest.raises(ForbiddenError):
        svc.find_by_organization(admin, OTHER_ORG_ID)


def test_find_by_id(container, records):
    assert container.attendance_service.find_by_id(1).student_id == STUDENT_A
    with pytest.raises(NotFoundError):
        container.attendance_service.find_by_id(77)


def test_student_cannot_delete(container, records, student):
    with pytest.raises(ForbiddenError):
        container.attendance_service.delete_by_id(student, 1)

    assert records.get_by_id(1) is not None


def test_admin_delete_removes_record(container, records, admin):
    container.attendance_service.delete_by_id(admin, 1)

    assert [r.attendance_id for r in container.attendance_service.find_all(admin)] == []


def test_deleting_missing_record_is_silent(container, records, admin):
    container.attendance_service.delete_by_id(admin, 404)

    assert len(records.list_all()) == 2


def test_unknown_organization_is_not_found(container, records, super_admin):
    with pytest.raises(NotFoundError):
        container.attendance_service.find_by_organization(super_admin, 404)
