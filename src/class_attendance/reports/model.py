from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CourseMonthlyStat:
    """Enrolled student measured against every class held that month."""

    student_id: int
    student_name: str
    present: int
    total_classes: int
    percent: float


@dataclass(frozen=True)
class StudentMonthlyStat:
    """What the existing records of a month say about one student."""

    student_id: int
    full_name: str
    present: int
    absent: int
    total: int
    percent: float
