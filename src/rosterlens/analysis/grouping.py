"""Filtering, sorting and grouping helpers over record collections.

All helpers are pure: they return new lists or dicts and never reorder or
modify their input.
"""

from datetime import datetime
from typing import Iterable, Sequence, TypeVar

from rosterlens.domain.interval import Timed, contains
from rosterlens.domain.models import (
    PreferenceLevel,
    Schedule,
    ScheduleRequirement,
    StaffAssignment,
    StaffConstraint,
    StaffLike,
    StaffRef,
    StaffSlot,
)

T = TypeVar("T", bound=Timed)


# --- Any timed record --------------------------------------------------------


def sort_by_start_time(items: Iterable[T]) -> list[T]:
    """New list ordered by start time (stable for equal starts)."""
    return sorted(items, key=lambda item: item.start_time)


def group_by_date(items: Iterable[T]) -> dict[str, list[T]]:
    """Group by the calendar date of the start, keyed ``YYYY-MM-DD``."""
    grouped: dict[str, list[T]] = {}
    for item in items:
        grouped.setdefault(item.start_time.date().isoformat(), []).append(item)
    return grouped


def in_range(items: Iterable[T], range_start: datetime, range_end: datetime) -> list[T]:
    """Items that overlap ``[range_start, range_end)`` at all."""
    return [i for i in items if i.start_time < range_end and i.end_time > range_start]


def within_window(
    items: Iterable[T], window_start: datetime, window_end: datetime
) -> list[T]:
    """Items that lie entirely inside the window (inclusive)."""
    return [i for i in items if i.start_time >= window_start and i.end_time <= window_end]


# --- Constraints -------------------------------------------------------------


def filter_by_preference(
    constraints: Iterable[StaffConstraint], preference: PreferenceLevel
) -> list[StaffConstraint]:
    preference = PreferenceLevel.parse(preference)
    return [c for c in constraints if c.preference is preference]


def unavailable_constraints(
    constraints: Iterable[StaffConstraint],
) -> list[StaffConstraint]:
    return filter_by_preference(constraints, PreferenceLevel.UNAVAILABLE)


def preferred_constraints(constraints: Iterable[StaffConstraint]) -> list[StaffConstraint]:
    return filter_by_preference(constraints, PreferenceLevel.PREFERRED)


def group_by_preference(
    constraints: Iterable[StaffConstraint],
) -> dict[PreferenceLevel, list[StaffConstraint]]:
    """Group constraints by level, in first-seen order of the levels."""
    grouped: dict[PreferenceLevel, list[StaffConstraint]] = {}
    for constraint in constraints:
        grouped.setdefault(constraint.preference, []).append(constraint)
    return grouped


def constraints_in_range(
    constraints: Iterable[StaffConstraint], range_start: datetime, range_end: datetime
) -> list[StaffConstraint]:
    return in_range(constraints, range_start, range_end)


def covering_constraints(
    constraints: Iterable[StaffConstraint], slot_start: datetime, slot_end: datetime
) -> list[StaffConstraint]:
    """Constraints whose window fully contains the slot."""
    return [c for c in constraints if contains(c, slot_start, slot_end)]


# --- Assignments -------------------------------------------------------------


def find_for_staff(
    assignments: Iterable[StaffAssignment], staff: StaffLike
) -> list[StaffAssignment]:
    """Assignments for one staff member, given by name, record or ref."""
    staff_id = StaffRef.coerce(staff).staff_id
    return [a for a in assignments if a.staff_id == staff_id]


def assigned_staff(schedule: Schedule) -> list[str]:
    """Sorted, de-duplicated staff names with at least one assignment."""
    return sorted({a.staff_id for a in schedule.assignments})


# --- Slots and requirements --------------------------------------------------


def filter_slots_by_qualification(
    slots: Iterable[StaffSlot], qualification: str
) -> list[StaffSlot]:
    return [s for s in slots if s.requires(qualification)]


def total_required_hours(requirement: ScheduleRequirement) -> float:
    return sum(slot.duration_hours for slot in requirement.staff_slots)


def all_required_qualifications(slots: Iterable[StaffSlot]) -> list[str]:
    """Unique qualifications across slots, sorted (case-sensitive)."""
    qualifications = set()
    for slot in slots:
        qualifications.update(slot.required_qualifications)
    return sorted(qualifications)


def count_slots_requiring(slots: Iterable[StaffSlot], qualification: str) -> int:
    return sum(1 for s in slots if s.requires(qualification))


def group_slots_by_qualifications(
    slots: Iterable[StaffSlot],
) -> dict[str, list[StaffSlot]]:
    """Group slots by their qualification set, keyed ``"A,B"`` (sorted)."""
    grouped: dict[str, list[StaffSlot]] = {}
    for slot in slots:
        key = ",".join(sorted(slot.required_qualifications))
        grouped.setdefault(key, []).append(slot)
    return grouped


def slots_outside_window(requirement: ScheduleRequirement) -> list[StaffSlot]:
    """Slots that start before or end after the requirement window."""
    return [
        slot
        for slot in requirement.staff_slots
        if not contains(requirement, slot.start_time, slot.end_time)
    ]


def all_slots_in_window(requirement: ScheduleRequirement) -> bool:
    return not slots_outside_window(requirement)


def slots_on_date(slots: Sequence[StaffSlot], day) -> list[StaffSlot]:
    return [s for s in slots if s.is_on_date(day)]
