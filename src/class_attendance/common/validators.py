from __future__ import annotations

from typing import Optional

from ..core.exceptions import InvalidStateError, ValidationError


def require_month(month: int, year: int) -> tuple[int, int]:
    month = int(month)
    year = int(year)
    if month < 1 or month > 12:
        raise ValidationError("Month must be between 1 and 12")
    if year <= 0:
        raise ValidationError("Year is not valid")
    return month, year


def require_id(value: Optional[int], field_name: str) -> int:
    """Identifiers that must be present for an operation to make sense."""
    if value is None:
        raise InvalidStateError(f"{field_name} is required")
    return int(value)
