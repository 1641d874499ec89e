from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .enums import Capability, Role
from .exceptions import ForbiddenError


@dataclass(frozen=True)
class CallerIdentity:
    """Authenticated caller, supplied by the identity collaborator per request."""

    user_id: int
    role: Role
    organization_id: Optional[int] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == Role.SUPER_ADMIN


# Minimum role needed for each capability. SUPER_ADMIN passes everything.
_MINIMUM_ROLE = {
    Capability.VIEW_ALL_ATTENDANCE: Role.SUPER_ADMIN,
    Capability.VIEW_ORGANIZATION_ATTENDANCE: Role.INSTRUCTOR,
    Capability.TAKE_ATTENDANCE: Role.INSTRUCTOR,
    Capability.DELETE_ATTENDANCE: Role.INSTRUCTOR,
}


def is_allowed(caller: CallerIdentity, capability: Capability) -> bool:
    if caller.is_super_admin:
        return True
    return caller.role.rank >= _MINIMUM_ROLE[capability].rank


def require(caller: CallerIdentity, capability: Capability) -> None:
    if not is_allowed(caller, capability):
        raise ForbiddenError("You do not have permission for this action")


def can_access_organization(caller: CallerIdentity, organization_id: Optional[int]) -> bool:
    """Tenant check: SUPER_ADMIN sees every organization, everyone else only their own."""

    if caller.is_super_admin:
        return True
    return caller.organization_id is not None and caller.organization_id == organization_id
