"""Half-open time intervals and the predicates built on them.

Every record that carries a time window exposes ``start_time`` and
``end_time`` attributes, so the predicates here accept an ``Interval`` or
any record directly. Intervals are half-open ``[start, end)``: two
back-to-back shifts touch but do not overlap.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol

from rosterlens.domain.errors import FieldError, raise_if_invalid

SECONDS_PER_HOUR = 3600


class Timed(Protocol):
    """Anything with a start and end timestamp."""

    start_time: datetime
    end_time: datetime


def check_interval(
    start: object,
    end: object,
    start_field: str = "start_time",
    end_field: str = "end_time",
) -> list[FieldError]:
    """Validate a pair of endpoints.

    Args:
        start: Candidate start timestamp.
        end: Candidate end timestamp.
        start_field: Field name reported for start problems.
        end_field: Field name reported for end problems.

    Returns:
        List of field errors (empty when the pair is a valid interval).
    """
    errors = []

    if not isinstance(start, datetime):
        errors.append(FieldError(start_field, f"{start_field} must be a datetime"))
    if not isinstance(end, datetime):
        errors.append(FieldError(end_field, f"{end_field} must be a datetime"))

    if errors:
        return errors

    if (start.tzinfo is None) != (end.tzinfo is None):
        errors.append(
            FieldError(
                end_field,
                f"{start_field} and {end_field} must both be timezone-aware or both naive",
            )
        )
    elif end <= start:
        errors.append(FieldError(end_field, f"{end_field} must be after {start_field}"))

    return errors


@dataclass(frozen=True)
class Interval:
    """A half-open time window ``[start_time, end_time)``.

    Raises:
        ConstructionError: If either endpoint is not a datetime or the
            window is empty or inverted.
    """

    start_time: datetime
    end_time: datetime

    def __post_init__(self):
        raise_if_invalid("Interval", check_interval(self.start_time, self.end_time))

    @property
    def duration_hours(self) -> float:
        return duration_hours(self)

    def overlaps(self, other: Timed) -> bool:
        return overlaps(self, other)

    def contains(self, start: datetime, end: datetime) -> bool:
        return contains(self, start, end)

    def contains_point(self, t: datetime) -> bool:
        return point_in_interval(self, t)

    def intersection(self, other: Timed) -> Optional["Interval"]:
        """Overlapping part of two windows, or None if they don't overlap."""
        if not overlaps(self, other):
            return None
        return Interval(
            max(self.start_time, other.start_time),
            min(self.end_time, other.end_time),
        )

    def __repr__(self) -> str:
        return f"Interval({self.start_time.isoformat()} - {self.end_time.isoformat()})"


def as_interval(item: Timed) -> Interval:
    """Copy the window of any timed record into an Interval."""
    return Interval(item.start_time, item.end_time)


def overlaps(a: Timed, b: Timed) -> bool:
    """True iff the two windows share at least one instant.

    Strict on both sides, so ``[8, 12)`` and ``[12, 16)`` do not overlap.
    """
    return a.start_time < b.end_time and b.start_time < a.end_time


def contains(outer: Timed, start: datetime, end: datetime) -> bool:
    """True iff ``[start, end)`` lies entirely inside ``outer``.

    Inclusive on both ends: a window contains itself.
    """
    return outer.start_time <= start and outer.end_time >= end


def duration_hours(item: Timed) -> float:
    """Length of the window in (fractional) hours."""
    return (item.end_time - item.start_time).total_seconds() / SECONDS_PER_HOUR


def point_in_interval(item: Timed, t: datetime) -> bool:
    """True iff ``start <= t < end``."""
    return item.start_time <= t < item.end_time
