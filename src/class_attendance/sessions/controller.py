from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.web import current_caller, to_json
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _student_json(user) -> dict:
        return {
            "id": user.user_id,
            "full_name": user.full_name,
            "email": user.email,
            "role": user.role.value,
        }

    @app.route("/api/classes/today/<int:course_id>", methods=["GET", "POST"], endpoint="classes_today")
    def classes_today(course_id: int):
        """Get or create today's class for a course (opens the attendance screen)."""
        session = container.session_service.get_or_create_today_session(current_caller(), course_id)
        return jsonify(to_json(session))

    @app.route("/api/classes", methods=["POST"], endpoint="classes_create")
    def classes_create():
        caller = current_caller()
        data = request.get_json(silent=True) or {}
        if not isinstance(data, dict) or data.get("course_id") is None:
            raise ValidationError("course_id is required")
        name = data.get("name")
        if name is not None and not isinstance(name, str):
            raise ValidationError("name must be a string")
        try:
            course_id = int(data["course_id"])
            session_date = parse_iso_date(str(data.get("date") or ""))
        except (TypeError, ValueError):
            raise ValidationError("course_id must be an integer and date must be YYYY-MM-DD")

        created = container.session_service.create_session(
            caller,
            course_id=course_id,
            session_date=session_date,
            name=name,
        )
        return jsonify(to_json(created)), 201

    @app.route("/api/classes/<int:session_id>", methods=["GET"], endpoint="classes_get")
    def classes_get(session_id: int):
        current_caller()
        return jsonify(to_json(container.session_service.get_session(session_id)))

    @app.route("/api/classes/<int:session_id>/details", methods=["GET"], endpoint="classes_details")
    def classes_details(session_id: int):
        current_caller()
        return jsonify(to_json(container.session_service.get_session_details(session_id)))

    @app.route("/api/classes/<int:session_id>/students", methods=["GET"], endpoint="classes_students")
    def classes_students(session_id: int):
        current_caller()
        students = container.session_service.list_roster(session_id)
        return jsonify([_student_json(s) for s in students])

    @app.route("/api/classes/course/<int:course_id>", methods=["GET"], endpoint="classes_by_course")
    def classes_by_course(course_id: int):
        current_caller()
        return jsonify(to_json(list(container.session_service.list_for_course(course_id))))

    @app.route("/api/classes/organization/<int:organization_id>", methods=["GET"], endpoint="classes_by_organization")
    def classes_by_organization(organization_id: int):
        sessions = container.session_service.list_for_organization(current_caller(), organization_id)
        return jsonify(to_json(list(sessions)))
