from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class ClassSession:
    """Domain entity: the single day's instance of a course.

    ``organization_id`` is a snapshot of the course's organization taken at creation.
    """

    session_id: int
    course_id: Optional[int]
    session_date: date
    name: str
    instructor_id: Optional[int]
    organization_id: Optional[int]


@dataclass(frozen=True)
class NewClassSession:
    course_id: int
    session_date: date
    name: str
    instructor_id: Optional[int]
    organization_id: int


@dataclass(frozen=True)
class SessionDetails:
    """Read-model for the attendance screen header."""

    session_id: int
    name: str
    session_date: date
    course_name: str
