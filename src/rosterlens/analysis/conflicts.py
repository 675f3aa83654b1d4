"""Double-booking detection across a schedule's assignments.

Assignments are grouped by normalized staff identity and every pair within
a group is tested for overlap. Per-staff assignment counts are small, so
the full pairwise scan is fine and keeps the reporting order predictable:
staff in order of first appearance, then pairs ``(i, j)`` with ``i < j``.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Sequence

from rosterlens.domain.interval import Interval, overlaps
from rosterlens.domain.models import (
    Schedule,
    StaffAssignment,
    StaffId,
    StaffLike,
    StaffRef,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Conflict:
    """Two assignments for the same staff member that overlap."""

    staff_name: StaffId
    first: StaffAssignment
    second: StaffAssignment

    @property
    def overlap(self) -> Interval:
        """The window both assignments claim."""
        return self.first.interval.intersection(self.second)

    @property
    def overlap_hours(self) -> float:
        return self.overlap.duration_hours

    def __str__(self) -> str:
        return (
            f"{self.staff_name}: {self.first.id} ({self.first.slot_name}) overlaps "
            f"{self.second.id} ({self.second.slot_name}) by {self.overlap_hours:.1f}h"
        )


@dataclass
class ScheduleValidity:
    """Outcome of checking a schedule for double-booking."""

    valid: bool
    conflicts: list[Conflict] = field(default_factory=list)


def group_assignments_by_staff(
    assignments: Iterable[StaffAssignment],
) -> dict[StaffId, list[StaffAssignment]]:
    """Group by staff identity, keeping first-seen and relative order."""
    grouped: dict[StaffId, list[StaffAssignment]] = {}
    for assignment in assignments:
        grouped.setdefault(assignment.staff_id, []).append(assignment)
    return grouped


class ConflictDetector:
    """Finds staff members booked into overlapping assignments.

    Example:
        >>> detector = ConflictDetector()
        >>> result = detector.is_valid(schedule)
        >>> for conflict in result.conflicts:
        ...     print(conflict)
    """

    def find_conflicts(self, assignments: Sequence[StaffAssignment]) -> list[Conflict]:
        """Every overlapping pair of assignments for the same staff member.

        The input is neither sorted nor modified.
        """
        conflicts = []

        for staff_id, group in group_assignments_by_staff(assignments).items():
            for i in range(len(group)):
                for j in range(i + 1, len(group)):
                    if overlaps(group[i], group[j]):
                        conflicts.append(Conflict(staff_id, group[i], group[j]))

        logger.debug(
            "Checked %d assignments, found %d conflicts", len(assignments), len(conflicts)
        )
        return conflicts

    def is_valid(self, schedule: Schedule) -> ScheduleValidity:
        """Check a schedule has no double-booked staff."""
        conflicts = self.find_conflicts(schedule.assignments)
        return ScheduleValidity(valid=not conflicts, conflicts=conflicts)

    def conflicts_by_staff(
        self, assignments: Sequence[StaffAssignment]
    ) -> dict[StaffId, list[Conflict]]:
        """Conflicts grouped by the staff member involved."""
        grouped: dict[StaffId, list[Conflict]] = defaultdict(list)
        for conflict in self.find_conflicts(assignments):
            grouped[conflict.staff_name].append(conflict)
        return dict(grouped)

    def find_overlapping_pairs(
        self, assignments: Sequence[StaffAssignment]
    ) -> list[tuple[StaffAssignment, StaffAssignment]]:
        """Every overlapping pair regardless of who is assigned.

        Useful when the list is already filtered to one staff member.
        """
        pairs = []
        for i in range(len(assignments)):
            for j in range(i + 1, len(assignments)):
                if overlaps(assignments[i], assignments[j]):
                    pairs.append((assignments[i], assignments[j]))
        return pairs

    def is_staff_available_at(
        self,
        assignments: Iterable[StaffAssignment],
        staff: StaffLike,
        start: datetime,
        end: datetime,
    ) -> bool:
        """True if the staff member has nothing booked during ``[start, end)``."""
        staff_id = StaffRef.coerce(staff).staff_id
        window = Interval(start, end)
        return not any(
            a.staff_id == staff_id and overlaps(a, window) for a in assignments
        )


_default_detector = ConflictDetector()


def find_conflicts(assignments: Sequence[StaffAssignment]) -> list[Conflict]:
    return _default_detector.find_conflicts(assignments)


def is_valid(schedule: Schedule) -> ScheduleValidity:
    return _default_detector.is_valid(schedule)
