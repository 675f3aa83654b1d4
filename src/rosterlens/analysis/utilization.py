"""Hours-per-staff utilization against a target band."""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from rosterlens.domain.models import StaffAssignment, StaffId, StaffLike, StaffRef
from rosterlens.domain.policies import HourTarget, UtilizationBand

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UtilizationEntry:
    """One staff member's total hours and gap from the target band.

    ``difference`` is the absolute distance from the target and is None
    for staff who are on target.
    """

    staff: StaffId
    hours: float
    difference: Optional[float] = None


@dataclass
class UtilizationReport:
    """Staff split into under-utilized, over-utilized and on-target.

    Under- and over-utilized staff are listed largest gap first; on-target
    staff are listed alphabetically.
    """

    target: HourTarget
    under_utilized: list[UtilizationEntry] = field(default_factory=list)
    over_utilized: list[UtilizationEntry] = field(default_factory=list)
    on_target: list[UtilizationEntry] = field(default_factory=list)

    @property
    def staff_count(self) -> int:
        return len(self.under_utilized) + len(self.over_utilized) + len(self.on_target)

    def band_of(self, staff: StaffId) -> Optional[UtilizationBand]:
        """Band a staff member fell into, or None if they have no hours."""
        for band, entries in (
            (UtilizationBand.UNDER, self.under_utilized),
            (UtilizationBand.OVER, self.over_utilized),
            (UtilizationBand.ON_TARGET, self.on_target),
        ):
            if any(e.staff == staff for e in entries):
                return band
        return None


def hours_by_staff(assignments: Iterable[StaffAssignment]) -> dict[StaffId, float]:
    """Total assigned hours per staff member, in first-seen order."""
    totals: dict[StaffId, float] = {}
    for assignment in assignments:
        totals[assignment.staff_id] = (
            totals.get(assignment.staff_id, 0.0) + assignment.duration_hours
        )
    return totals


def staff_hours(assignments: Iterable[StaffAssignment], staff: StaffLike) -> float:
    """Total hours for one staff member (0 if they have no assignments)."""
    staff_id = StaffRef.coerce(staff).staff_id
    return sum(a.duration_hours for a in assignments if a.staff_id == staff_id)


class UtilizationAnalyzer:
    """Classifies staff against an hour target.

    Example:
        >>> analyzer = UtilizationAnalyzer(HourTarget(40, tolerance=4))
        >>> report = analyzer.analyze(schedule.assignments)
        >>> [e.staff for e in report.over_utilized]
        ['Nurse A']
    """

    def __init__(self, target: HourTarget):
        self.target = target

    def analyze(self, assignments: Iterable[StaffAssignment]) -> UtilizationReport:
        """Sum hours per staff member and place each in a band."""
        report = UtilizationReport(target=self.target)

        for staff, hours in hours_by_staff(assignments).items():
            difference = hours - self.target.target_hours
            band = self.target.classify(hours)

            if band is UtilizationBand.UNDER:
                report.under_utilized.append(UtilizationEntry(staff, hours, abs(difference)))
            elif band is UtilizationBand.OVER:
                report.over_utilized.append(UtilizationEntry(staff, hours, difference))
            else:
                report.on_target.append(UtilizationEntry(staff, hours))

        report.under_utilized.sort(key=lambda e: e.difference, reverse=True)
        report.over_utilized.sort(key=lambda e: e.difference, reverse=True)
        report.on_target.sort(key=lambda e: e.staff)

        logger.debug(
            "Utilization vs %.1fh: %d under, %d over, %d on target",
            self.target.target_hours,
            len(report.under_utilized),
            len(report.over_utilized),
            len(report.on_target),
        )
        return report


def find_by_hour_target(
    assignments: Iterable[StaffAssignment],
    target_hours: float,
    tolerance: float = 0.0,
) -> UtilizationReport:
    """Classify staff as under, over or on a target number of hours."""
    return UtilizationAnalyzer(HourTarget(target_hours, tolerance)).analyze(assignments)
