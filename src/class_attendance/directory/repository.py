from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence, Set

from .model import Course, Organization, User


class DirectoryRepository(Protocol):
    """Read access to organizations, courses and users.

    Note: the attendance engine never writes through this interface.
    """

    def get_organization(self, organization_id: int) -> Optional[Organization]:
        raise NotImplementedError

    def get_course(self, course_id: int) -> Optional[Course]:
        raise NotImplementedError

    def existing_user_ids(self, user_ids: Iterable[int]) -> Set[int]:
        """Subset of ``user_ids`` that exist."""

        raise NotImplementedError

    def list_enrolled_students(self, course_id: int) -> Sequence[User]:
        """Students enrolled in the course, ordered by full name."""

        raise NotImplementedError
