from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Organization:
    """Tenant boundary."""

    organization_id: int
    name: str
    description: Optional[str] = None
    admin_user_id: Optional[int] = None


@dataclass(frozen=True)
class Course:
    course_id: int
    name: str
    instructor_id: Optional[int]
    organization_id: Optional[int]
    description: Optional[str] = None
    program: Optional[str] = None


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Note: read-only view; users are managed by the external directory service.
    """

    user_id: int
    full_name: str
    email: str
    role: Role
    organization_id: Optional[int] = None
