from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import today_local
from ..common.web import current_caller, to_json
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    def _month_and_year() -> tuple[int, int]:
        today = today_local()
        try:
            month = int(request.args.get("month") or today.month)
            year = int(request.args.get("year") or today.year)
        except ValueError:
            raise ValidationError("month and year must be integers")
        return month, year

    @app.route("/api/reports/courses/<int:course_id>/monthly", methods=["GET"], endpoint="reports_course_monthly")
    def reports_course_monthly(course_id: int):
        current_caller()
        month, year = _month_and_year()
        stats = container.report_service.get_course_monthly_stats(course_id, month, year)
        return jsonify(to_json(stats))

    @app.route("/api/reports/courses/<int:course_id>/records-monthly", methods=["GET"], endpoint="reports_records_monthly")
    def reports_records_monthly(course_id: int):
        current_caller()
        month, year = _month_and_year()
        stats = container.report_service.get_monthly_stats(course_id, month, year)
        return jsonify(to_json(stats))
