from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_caller, to_json
from ..container import Container
from ..core.exceptions import ValidationError
from .model import AttendanceInput, AttendanceMark


_TRUE_STRINGS = {"true", "1", "yes"}
_FALSE_STRINGS = {"false", "0", "no"}


def _parse_flag(value, field: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise ValidationError(f"{field} must be true or false, got {value!r}")


def _parse_marks(payload) -> list[AttendanceMark]:
    if not isinstance(payload, list):
        raise ValidationError("Expected a list of {student_id, present}")

    marks = []
    for item in payload:
        if not isinstance(item, dict):
            raise ValidationError("Each mark must be an object")
        student_id = item.get("student_id", item.get("user_id"))
        if student_id is None:
            raise ValidationError("student_id is required for each mark")
        try:
            student_id = int(student_id)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid student id: {student_id!r}")
        marks.append(AttendanceMark(student_id=student_id, present=_parse_flag(item.get("present"), "present")))
    return marks


def _parse_marks_by_student(payload) -> dict[int, bool]:
    if not isinstance(payload, dict):
        raise ValidationError("Expected an object mapping student id to present")
    try:
        student_ids = [int(k) for k in payload]
    except ValueError:
        raise ValidationError("Student ids must be integers")
    return {sid: _parse_flag(v, f"present for student {sid}") for sid, v in zip(student_ids, payload.values())}


def _optional_int(value):
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid id: {value!r}")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/classes/<int:session_id>/attendance", methods=["POST"], endpoint="attendance_register")
    def attendance_register(session_id: int):
        caller = current_caller()
        marks = _parse_marks(request.get_json(silent=True))
        container.attendance_service.register_attendance(caller, session_id, marks)
        return jsonify({"success": True})

    @app.route("/api/classes/<int:session_id>/attendance", methods=["GET"], endpoint="attendance_by_session")
    def attendance_by_session(session_id: int):
        current_caller()
        return jsonify(to_json(list(container.attendance_service.find_by_session(session_id))))

    @app.route("/api/courses/<int:course_id>/attendance", methods=["POST"], endpoint="attendance_register_by_course")
    def attendance_register_by_course(course_id: int):
        caller = current_caller()
        marks = _parse_marks_by_student(request.get_json(silent=True))
        container.attendance_service.register_attendance_by_course(caller, course_id, marks)
        return jsonify({"success": True, "message": f"Attendance saved for course {course_id}"})

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    def attendance_list():
        return jsonify(to_json(list(container.attendance_service.find_all(current_caller()))))

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_save")
    def attendance_save():
        caller = current_caller()
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict):
            raise ValidationError("Expected an object with session_id, student_id and attended")
        record = container.attendance_service.save(
            caller,
            AttendanceInput(
                session_id=_optional_int(data.get("session_id")),
                student_id=_optional_int(data.get("student_id")),
                attended=_parse_flag(data.get("attended"), "attended"),
            ),
        )
        return jsonify(to_json(record))

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="attendance_get")
    def attendance_get(attendance_id: int):
        current_caller()
        return jsonify(to_json(container.attendance_service.find_by_id(attendance_id)))

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    def attendance_delete(attendance_id: int):
        container.attendance_service.delete_by_id(current_caller(), attendance_id)
        return "", 204

    @app.route("/api/attendance/course/<int:course_id>", methods=["GET"], endpoint="attendance_by_course")
    def attendance_by_course(course_id: int):
        current_caller()
        return jsonify(to_json(list(container.attendance_service.find_by_course(course_id))))

    @app.route("/api/attendance/organization/<int:organization_id>", methods=["GET"], endpoint="attendance_by_organization")
    def attendance_by_organization(organization_id: int):
        records = container.attendance_service.find_by_organization(current_caller(), organization_id)
        return jsonify(to_json(list(records)))
