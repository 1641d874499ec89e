from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles, lowest privilege last."""

    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    INSTRUCTOR = "INSTRUCTOR"
    USER = "USER"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]


_ROLE_RANK = {
    Role.USER: 0,
    Role.INSTRUCTOR: 1,
    Role.ADMIN: 2,
    Role.SUPER_ADMIN: 3,
}


class Capability(str, Enum):
    """Actions guarded by the authorization predicate."""

    VIEW_ALL_ATTENDANCE = "VIEW_ALL_ATTENDANCE"
    VIEW_ORGANIZATION_ATTENDANCE = "VIEW_ORGANIZATION_ATTENDANCE"
    TAKE_ATTENDANCE = "TAKE_ATTENDANCE"
    DELETE_ATTENDANCE = "DELETE_ATTENDANCE"
