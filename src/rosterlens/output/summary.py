"""Plain-text summaries of constraints, requirements and schedules.

This module creates human-readable text showing:
- Constraint hours per preference level
- Slot totals and the qualifications they need
- Hours per staff member, fill rate and double-bookings for a schedule
"""

from pathlib import Path
from typing import Optional, Sequence, Union

from rosterlens.analysis.conflicts import ConflictDetector
from rosterlens.analysis.statistics import (
    assignment_stats,
    constraint_stats,
    requirement_stats,
    schedule_stats,
)
from rosterlens.analysis.utilization import UtilizationAnalyzer
from rosterlens.domain.models import (
    PreferenceLevel,
    Schedule,
    ScheduleRequirement,
    StaffAssignment,
    StaffConstraint,
)
from rosterlens.domain.policies import HourTarget

WIDTH = 80


def _fmt_time(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


def _section(lines: list[str], title: str) -> None:
    lines.append("-" * WIDTH)
    lines.append(title)
    lines.append("-" * WIDTH)


class SummaryGenerator:
    """Generates text summaries for records and schedules.

    Example:
        >>> generator = SummaryGenerator(target=HourTarget(40, tolerance=4))
        >>> print(generator.schedule_summary(schedule))
    """

    def __init__(
        self,
        detector: Optional[ConflictDetector] = None,
        target: Optional[HourTarget] = None,
    ):
        self.detector = detector or ConflictDetector()
        self.target = target

    def generate(
        self,
        schedule: Schedule,
        output_path: Union[str, Path],
        requirement: Optional[ScheduleRequirement] = None,
    ) -> str:
        """Generate a schedule summary and save it to a file.

        Args:
            schedule: The schedule to summarize.
            output_path: Path to save the text file.
            requirement: Requirement the schedule answers, if known.

        Returns:
            The generated text content.
        """
        parts = []
        if requirement is not None:
            parts.append(self.requirement_summary(requirement))
        parts.append(self.schedule_summary(schedule))
        content = "\n".join(parts)
        Path(output_path).write_text(content)
        return content

    def constraint_summary(self, constraints: Sequence[StaffConstraint]) -> str:
        stats = constraint_stats(constraints)
        lines = [
            f"Total Constraints: {stats.total_constraints}",
            f"Total Hours: {stats.total_hours:.1f}",
            f"Span: {_fmt_time(stats.earliest_start)} - {_fmt_time(stats.latest_end)}",
        ]
        for level in PreferenceLevel:
            count = stats.constraints_by_preference.get(level, 0)
            hours = stats.hours_by_preference[level]
            lines.append(f"  {level.value:<14} {count:>3} constraints {hours:>7.1f}h")
        return "\n".join(lines)

    def requirement_summary(self, requirement: ScheduleRequirement) -> str:
        stats = requirement_stats(requirement)
        lines = []

        lines.append("=" * WIDTH)
        lines.append(f"REQUIREMENT - {requirement.display_name}")
        lines.append("=" * WIDTH)
        lines.append(
            f"Window: {_fmt_time(requirement.schedule_start)} - "
            f"{_fmt_time(requirement.schedule_end)}"
        )
        lines.append(f"Total Slots: {stats.total_slots}")
        lines.append(f"Total Hours: {stats.total_hours:.1f}")
        lines.append(f"Average Slot: {stats.average_slot_duration:.1f}h")
        if stats.qualifications_list:
            lines.append(f"Qualifications: {', '.join(stats.qualifications_list)}")
        if stats.slots_outside_window:
            lines.append(f"Slots outside window: {stats.slots_outside_window}")
        lines.append("")
        return "\n".join(lines)

    def assignment_summary(self, assignments: Sequence[StaffAssignment]) -> str:
        """Per-staff hours and assignment counts, most hours first."""
        stats = assignment_stats(assignments)
        lines = [
            f"Total Assignments: {stats.total_assignments}",
            f"Total Hours: {stats.total_hours:.1f}",
            f"Staff: {stats.unique_staff_count}",
            f"Average Assignment: {stats.average_hours_per_assignment:.1f}h",
        ]
        if stats.hours_by_staff:
            lines.append("")
            lines.append(f"{'Staff':<24} {'Shifts':>6} {'Hours':>8}")
            ranked = sorted(stats.hours_by_staff.items(), key=lambda kv: kv[1], reverse=True)
            for staff, hours in ranked:
                lines.append(
                    f"{staff[:24]:<24} {stats.assignments_by_staff[staff]:>6} {hours:>8.1f}"
                )
        return "\n".join(lines)

    def schedule_summary(self, schedule: Schedule) -> str:
        """Full text summary of a schedule."""
        stats = schedule_stats(schedule, self.detector)
        lines = []

        # Header
        lines.append("=" * WIDTH)
        lines.append(f"SCHEDULE SUMMARY - {schedule.display_name}")
        lines.append("=" * WIDTH)
        lines.append(
            f"Window: {_fmt_time(schedule.schedule_start)} - "
            f"{_fmt_time(schedule.schedule_end)}"
        )
        if schedule.source_requirement:
            lines.append(f"Requirement: {schedule.source_requirement}")
        for key in ("algorithm", "generated_at"):
            if key in schedule.metadata:
                lines.append(f"{key.replace('_', ' ').title()}: {schedule.metadata[key]}")
        lines.append(f"Fill Rate: {stats.fill_rate:.1f}%")
        lines.append(f"Unfilled Slots: {stats.unfilled_slots}")
        lines.append("")

        _section(lines, "ASSIGNMENTS")
        lines.append(self.assignment_summary(schedule.assignments))
        lines.append("")

        _section(lines, "DOUBLE BOOKINGS")
        conflicts = self.detector.find_conflicts(schedule.assignments)
        if conflicts:
            for conflict in conflicts:
                lines.append(str(conflict))
        else:
            lines.append("None")
        lines.append("")

        if schedule.unfilled_slots:
            _section(lines, "UNFILLED SLOTS")
            for unfilled in schedule.unfilled_slots:
                status = ""
                if unfilled.fill_status is not None:
                    status = (
                        f" ({unfilled.fill_status.assigned}/"
                        f"{unfilled.fill_status.needed} filled)"
                    )
                lines.append(f"{unfilled.slot_name}: {unfilled.reason}{status}")
            lines.append("")

        if self.target is not None:
            _section(lines, f"UTILIZATION (target {self.target.target_hours:.1f}h)")
            report = UtilizationAnalyzer(self.target).analyze(schedule.assignments)
            for entry in report.over_utilized:
                lines.append(f"  over   {entry.staff:<24} {entry.hours:>6.1f}h +{entry.difference:.1f}")
            for entry in report.under_utilized:
                lines.append(f"  under  {entry.staff:<24} {entry.hours:>6.1f}h -{entry.difference:.1f}")
            for entry in report.on_target:
                lines.append(f"  ok     {entry.staff:<24} {entry.hours:>6.1f}h")
            lines.append("")

        lines.append("=" * WIDTH)
        return "\n".join(lines)
