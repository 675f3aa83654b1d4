"""Roll-up statistics over constraints, slots, assignments and schedules.

Every function here accepts an empty collection and returns zeros and
``None`` extrema for it; nothing divides by zero.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Sequence

from rosterlens.analysis.conflicts import ConflictDetector
from rosterlens.analysis.grouping import all_required_qualifications
from rosterlens.domain.interval import Timed, contains
from rosterlens.domain.models import (
    PreferenceLevel,
    Schedule,
    ScheduleRequirement,
    StaffAssignment,
    StaffConstraint,
    StaffId,
    StaffSlot,
)

logger = logging.getLogger(__name__)


def _extrema(items: Sequence[Timed]) -> tuple[Optional[datetime], Optional[datetime]]:
    """Earliest start and latest end, or (None, None) when empty."""
    if not items:
        return None, None
    return min(i.start_time for i in items), max(i.end_time for i in items)


def _empty_hours_by_preference() -> dict[PreferenceLevel, float]:
    return {level: 0.0 for level in PreferenceLevel}


@dataclass
class ConstraintStats:
    """Statistics about a set of constraints."""

    total_constraints: int = 0
    total_hours: float = 0.0
    hours_by_preference: dict[PreferenceLevel, float] = field(
        default_factory=_empty_hours_by_preference
    )
    constraints_by_preference: dict[PreferenceLevel, int] = field(default_factory=dict)
    earliest_start: Optional[datetime] = None
    latest_end: Optional[datetime] = None

    @property
    def unavailable_hours(self) -> float:
        return self.hours_by_preference[PreferenceLevel.UNAVAILABLE]

    @property
    def not_preferred_hours(self) -> float:
        return self.hours_by_preference[PreferenceLevel.NOT_PREFERRED]

    @property
    def neutral_hours(self) -> float:
        return self.hours_by_preference[PreferenceLevel.NEUTRAL]

    @property
    def preferred_hours(self) -> float:
        return self.hours_by_preference[PreferenceLevel.PREFERRED]


@dataclass
class RequirementStats:
    """Statistics about the slots a schedule needs filled."""

    total_slots: int = 0
    total_hours: float = 0.0
    qualifications_list: list[str] = field(default_factory=list)
    average_slot_duration: float = 0.0
    earliest_start: Optional[datetime] = None
    latest_end: Optional[datetime] = None
    slots_outside_window: int = 0

    @property
    def unique_qualifications(self) -> int:
        return len(self.qualifications_list)


@dataclass
class AssignmentStats:
    """Statistics about a set of assignments."""

    total_assignments: int = 0
    total_hours: float = 0.0
    unique_staff_count: int = 0
    average_hours_per_assignment: float = 0.0
    earliest_start: Optional[datetime] = None
    latest_end: Optional[datetime] = None
    hours_by_staff: dict[StaffId, float] = field(default_factory=dict)
    assignments_by_staff: dict[StaffId, int] = field(default_factory=dict)


@dataclass
class ScheduleStats:
    """Assignment statistics plus fill rate and conflict information."""

    assignments: AssignmentStats
    unfilled_slots: int = 0
    fill_rate: float = 0.0
    conflict_count: int = 0

    @property
    def has_conflicts(self) -> bool:
        return self.conflict_count > 0


def constraint_stats(constraints: Sequence[StaffConstraint]) -> ConstraintStats:
    """Count, total hours and per-level breakdown of a set of constraints."""
    stats = ConstraintStats()

    for constraint in constraints:
        hours = constraint.duration_hours
        stats.total_hours += hours
        stats.hours_by_preference[constraint.preference] += hours
        stats.constraints_by_preference[constraint.preference] = (
            stats.constraints_by_preference.get(constraint.preference, 0) + 1
        )

    stats.total_constraints = len(constraints)
    stats.earliest_start, stats.latest_end = _extrema(constraints)
    return stats


def slot_stats(
    slots: Sequence[StaffSlot],
    window: Optional[Timed] = None,
) -> RequirementStats:
    """Statistics over slots, optionally counting those outside a window."""
    total_hours = sum(slot.duration_hours for slot in slots)
    earliest, latest = _extrema(slots)

    outside = 0
    if window is not None:
        outside = sum(
            1 for slot in slots if not contains(window, slot.start_time, slot.end_time)
        )

    return RequirementStats(
        total_slots=len(slots),
        total_hours=total_hours,
        qualifications_list=all_required_qualifications(slots),
        average_slot_duration=total_hours / len(slots) if slots else 0.0,
        earliest_start=earliest,
        latest_end=latest,
        slots_outside_window=outside,
    )


def requirement_stats(requirement: ScheduleRequirement) -> RequirementStats:
    """Statistics over a requirement's slots, checked against its window."""
    return slot_stats(requirement.staff_slots, window=requirement)


def assignment_stats(assignments: Sequence[StaffAssignment]) -> AssignmentStats:
    """Totals, per-staff hours and counts for a set of assignments."""
    stats = AssignmentStats()

    for assignment in assignments:
        hours = assignment.duration_hours
        staff = assignment.staff_id
        stats.total_hours += hours
        stats.hours_by_staff[staff] = stats.hours_by_staff.get(staff, 0.0) + hours
        stats.assignments_by_staff[staff] = stats.assignments_by_staff.get(staff, 0) + 1

    stats.total_assignments = len(assignments)
    stats.unique_staff_count = len(stats.hours_by_staff)
    if assignments:
        stats.average_hours_per_assignment = stats.total_hours / len(assignments)
    stats.earliest_start, stats.latest_end = _extrema(assignments)
    return stats


def fill_rate(assigned: int, unfilled: int) -> float:
    """Percentage of slots that were filled; 0 when there are none."""
    total = assigned + unfilled
    if total == 0:
        return 0.0
    return assigned / total * 100


def schedule_fill_rate(schedule: Schedule) -> float:
    return fill_rate(len(schedule.assignments), len(schedule.unfilled_slots))


def schedule_stats(
    schedule: Schedule,
    detector: Optional[ConflictDetector] = None,
) -> ScheduleStats:
    """Full roll-up for a schedule, including double-booking count."""
    detector = detector or ConflictDetector()
    conflicts = detector.find_conflicts(schedule.assignments)

    stats = ScheduleStats(
        assignments=assignment_stats(schedule.assignments),
        unfilled_slots=len(schedule.unfilled_slots),
        fill_rate=schedule_fill_rate(schedule),
        conflict_count=len(conflicts),
    )
    logger.debug(
        "Schedule %s: %d assignments, fill rate %.1f%%, %d conflicts",
        schedule.id,
        stats.assignments.total_assignments,
        stats.fill_rate,
        stats.conflict_count,
    )
    return stats

