"""Validation module for checking schedule consistency.

This module gathers every rule a finished schedule is checked against:
double-booking, assignments outside the schedule window, assignments that
ignore a staff member's unavailability, and missing qualifications.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Sequence

from rosterlens.analysis.conflicts import ConflictDetector
from rosterlens.analysis.grouping import slots_outside_window
from rosterlens.analysis.resolver import ConstraintResolver
from rosterlens.analysis.utilization import UtilizationAnalyzer
from rosterlens.domain.interval import contains
from rosterlens.domain.models import (
    PreferenceLevel,
    RefKind,
    Schedule,
    ScheduleRequirement,
    StaffAssignment,
    StaffConstraint,
    StaffId,
    StaffMember,
)
from rosterlens.domain.policies import HourTarget

logger = logging.getLogger(__name__)


class ValidationErrorType(Enum):
    """Types of validation errors."""

    DOUBLE_BOOKING = "double_booking"
    ASSIGNMENT_OUTSIDE_SCHEDULE = "assignment_outside_schedule"
    SLOT_OUTSIDE_WINDOW = "slot_outside_window"
    STAFF_UNAVAILABLE = "staff_unavailable"
    MISSING_QUALIFICATION = "missing_qualification"
    OVER_TARGET_HOURS = "over_target_hours"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    staff_name: Optional[str] = None
    assignment_id: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.staff_name:
            parts.append(f"{self.staff_name}:")
        parts.append(self.message)
        if self.assignment_id:
            parts.append(f"(assignment {self.assignment_id})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a schedule."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def errors_of_type(self, error_type: ValidationErrorType) -> list[ValidationError]:
        return [e for e in self.errors if e.error_type is error_type]


class ScheduleValidator:
    """Validates schedules against staff constraints and each other.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate(schedule, constraints_by_staff=constraints)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def __init__(
        self,
        detector: Optional[ConflictDetector] = None,
        resolver: Optional[ConstraintResolver] = None,
    ):
        self.detector = detector or ConflictDetector()
        self.resolver = resolver or ConstraintResolver()

    def validate(
        self,
        schedule: Schedule,
        constraints_by_staff: Optional[Mapping[StaffId, Sequence[StaffConstraint]]] = None,
        members: Optional[Mapping[StaffId, StaffMember]] = None,
    ) -> ValidationResult:
        """Validate a complete schedule.

        Args:
            schedule: The schedule to validate.
            constraints_by_staff: Constraints per staff member. Members
                embedded in assignments contribute their own constraints
                when a staff member has no entry here or an empty one.
            members: Staff records by identity, used for qualification
                checks when assignments only carry names.

        Returns:
            ValidationResult with is_valid flag, errors and warnings.
        """
        result = ValidationResult(is_valid=True)
        constraints_by_staff = constraints_by_staff or {}
        members = members or {}

        for conflict in self.detector.find_conflicts(schedule.assignments):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.DOUBLE_BOOKING,
                    message=(
                        f"{conflict.first.id} overlaps {conflict.second.id} "
                        f"by {conflict.overlap_hours:.1f}h"
                    ),
                    staff_name=conflict.staff_name,
                    assignment_id=conflict.second.id,
                    details={
                        "first": conflict.first.id,
                        "second": conflict.second.id,
                        "overlap_hours": conflict.overlap_hours,
                    },
                )
            )

        for assignment in schedule.assignments:
            self._validate_window(assignment, schedule, result)

            member = self._member_for(assignment, members)
            constraints = constraints_by_staff.get(assignment.staff_id)
            if not constraints and member is not None:
                constraints = member.constraints
            if constraints:
                self._validate_constraints(assignment, constraints, result)
            if member is not None:
                self._validate_qualifications(assignment, member, result)

        for unfilled in schedule.unfilled_slots:
            result.add_warning(f"Slot {unfilled.slot_name} unfilled: {unfilled.reason}")

        if not result.is_valid:
            logger.warning(
                "Schedule %s failed validation with %d errors",
                schedule.id,
                len(result.errors),
            )
        return result

    def _member_for(
        self,
        assignment: StaffAssignment,
        members: Mapping[StaffId, StaffMember],
    ) -> Optional[StaffMember]:
        if assignment.staff.kind is RefKind.RECORD:
            return assignment.staff.member
        return members.get(assignment.staff_id)

    def _validate_window(
        self,
        assignment: StaffAssignment,
        schedule: Schedule,
        result: ValidationResult,
    ) -> None:
        """Check the assignment lies inside the schedule period."""
        if not contains(schedule, assignment.start_time, assignment.end_time):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.ASSIGNMENT_OUTSIDE_SCHEDULE,
                    message="Assignment falls outside the schedule period",
                    staff_name=assignment.staff_name,
                    assignment_id=assignment.id,
                )
            )

    def _validate_constraints(
        self,
        assignment: StaffAssignment,
        constraints: Sequence[StaffConstraint],
        result: ValidationResult,
    ) -> None:
        """Check the assignment against the staff member's constraints."""
        if self.resolver.has_blocking_conflict(assignment, constraints):
            reasons = [
                c.reason
                for c in self.resolver.overlapping_constraints(assignment, constraints)
                if c.is_blocking and c.reason
            ]
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.STAFF_UNAVAILABLE,
                    message="Assigned during an unavailable period",
                    staff_name=assignment.staff_name,
                    assignment_id=assignment.id,
                    details={"reasons": reasons},
                )
            )
            return

        level = self.resolver.resolve_preference(assignment, constraints)
        if level is PreferenceLevel.NOT_PREFERRED:
            result.add_warning(
                f"{assignment.staff_name} assigned to {assignment.slot_name} "
                f"during a not-preferred period ({assignment.id})"
            )

    def _validate_qualifications(
        self,
        assignment: StaffAssignment,
        member: StaffMember,
        result: ValidationResult,
    ) -> None:
        """Check the member holds what the slot requires (when known)."""
        if assignment.slot.kind is not RefKind.RECORD:
            return

        missing = [
            q
            for q in assignment.slot.slot.required_qualifications
            if not member.has_qualification(q)
        ]
        if missing:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.MISSING_QUALIFICATION,
                    message=f"Missing qualifications: {', '.join(missing)}",
                    staff_name=assignment.staff_name,
                    assignment_id=assignment.id,
                    details={"missing": missing},
                )
            )

    def validate_requirement(self, requirement: ScheduleRequirement) -> ValidationResult:
        """Check every slot lies inside the requirement window."""
        result = ValidationResult(is_valid=True)

        for slot in slots_outside_window(requirement):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.SLOT_OUTSIDE_WINDOW,
                    message=f"Slot {slot.name} falls outside the requirement window",
                    details={"slot": slot.name},
                )
            )

        return result

    def validate_hours(self, schedule: Schedule, target: HourTarget) -> ValidationResult:
        """Check total hours per staff member against a target band.

        Over-utilized staff are errors; under-utilized staff are warnings.
        """
        result = ValidationResult(is_valid=True)
        report = UtilizationAnalyzer(target).analyze(schedule.assignments)

        for entry in report.over_utilized:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.OVER_TARGET_HOURS,
                    message=(
                        f"{entry.hours:.1f}h exceeds target {target.target_hours:.1f}h "
                        f"by {entry.difference:.1f}h"
                    ),
                    staff_name=entry.staff,
                    details={"hours": entry.hours, "difference": entry.difference},
                )
            )

        for entry in report.under_utilized:
            result.add_warning(
                f"{entry.staff}: {entry.hours:.1f}h is {entry.difference:.1f}h "
                f"under target {target.target_hours:.1f}h"
            )

        return result
