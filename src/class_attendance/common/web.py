from __future__ import annotations

import dataclasses
import logging
from datetime import date
from enum import Enum
from typing import Any

from flask import Flask, jsonify, session
from werkzeug.exceptions import HTTPException, Unauthorized

from ..core.enums import Role
from ..core.exceptions import (
    ConflictError,
    DomainError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ..core.permissions import CallerIdentity

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (InvalidStateError, 422),
)


def current_caller() -> CallerIdentity:
    """Caller identity stored into the Flask session by the login service."""

    if "user_id" not in session or "role" not in session:
        raise Unauthorized("Please log in to continue")

    try:
        role = Role(session["role"])
        user_id = int(session["user_id"])
        organization_id = session.get("organization_id")
        organization_id = int(organization_id) if organization_id is not None else None
    except (TypeError, ValueError):
        raise Unauthorized("Invalid login session, please log in again")
    return CallerIdentity(user_id=user_id, role=role, organization_id=organization_id)


def to_json(value: Any) -> Any:
    """Dataclasses/enums/dates to plain JSON values (dates as YYYY-MM-DD)."""

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    return value


def error_status(error: DomainError) -> int:
    for kind, status in _STATUS_BY_ERROR:
        if isinstance(error, kind):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify({"success": False, "message": str(e)}), error_status(e)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"success": False, "message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        return jsonify({"success": False, "message": "Internal server error"}), 500
