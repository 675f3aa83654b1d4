"""Command-line interface for the rosterlens schedule analysis tool."""

import argparse
import logging
import sys
from datetime import datetime, timedelta
from typing import Optional

from rosterlens.analysis.conflicts import ConflictDetector
from rosterlens.analysis.resolver import ConstraintResolver
from rosterlens.analysis.statistics import requirement_stats, schedule_stats
from rosterlens.analysis.utilization import UtilizationAnalyzer
from rosterlens.config import AnalysisConfig, load_config
from rosterlens.domain.errors import ConstructionError
from rosterlens.domain.models import (
    FillStatus,
    PreferenceLevel,
    Schedule,
    ScheduleRequirement,
    StaffAssignment,
    StaffConstraint,
    StaffMember,
    StaffSlot,
    UnfilledSlot,
)
from rosterlens.domain.policies import HourTarget
from rosterlens.output.pdf_generator import PDFGenerator
from rosterlens.output.summary import SummaryGenerator
from rosterlens.serialization import Document, dumps, load_document
from rosterlens.validation.validator import ScheduleValidator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def create_sample_document(week_start: Optional[datetime] = None) -> Document:
    """Create a small sample week: three staff, five slots, one double-booking.

    Args:
        week_start: Monday 00:00 of the sample week. Defaults to the
            Monday of the current week.
    """
    if week_start is None:
        today = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
        week_start = today - timedelta(days=today.weekday())

    def at(day: int, hour: int) -> datetime:
        return week_start + timedelta(days=day, hours=hour)

    staff = [
        StaffMember(
            name="Nurse A",
            rank=2,
            start_of_service=week_start - timedelta(days=3 * 365),
            qualifications=["RN", "ACLS"],
            constraints=[
                StaffConstraint(at(0, 7), at(0, 15), PreferenceLevel.PREFERRED),
                StaffConstraint(at(0, 12), at(0, 13), PreferenceLevel.NOT_PREFERRED, "Lunch"),
                StaffConstraint(at(0, 15), at(0, 17), PreferenceLevel.UNAVAILABLE, "School pickup"),
            ],
        ),
        StaffMember(
            name="Nurse B",
            rank=1,
            start_of_service=week_start - timedelta(days=400),
            qualifications=["RN"],
            constraints=[
                StaffConstraint(at(2, 0), at(3, 0), PreferenceLevel.UNAVAILABLE, "Day off"),
            ],
        ),
        StaffMember(
            name="Tech C",
            rank=0,
            start_of_service=week_start - timedelta(days=90),
            qualifications=["CNA"],
        ),
    ]

    slots = [
        StaffSlot("Mon Day RN", at(0, 7), at(0, 15), ["RN"]),
        StaffSlot("Mon Evening RN", at(0, 15), at(0, 23), ["RN"]),
        StaffSlot("Tue Day RN", at(1, 7), at(1, 15), ["RN"]),
        StaffSlot("Tue Day Tech", at(1, 7), at(1, 15), ["CNA"]),
        StaffSlot("Wed Charge", at(2, 7), at(2, 19), ["RN", "ACLS"]),
    ]

    requirement = ScheduleRequirement(
        id="req-sample",
        schedule_start=week_start,
        schedule_end=week_start + timedelta(days=7),
        staff_slots=slots,
        name="Sample Week",
    )

    assignments = [
        StaffAssignment("a1", staff[0], slots[0], at(0, 7), at(0, 15)),
        StaffAssignment("a2", staff[1], slots[1], at(0, 15), at(0, 23)),
        StaffAssignment("a3", staff[0], slots[2], at(1, 7), at(1, 15)),
        # Overlaps a3 by two hours
        StaffAssignment("a4", staff[0], "Tue Cover", at(1, 13), at(1, 19)),
        StaffAssignment("a5", staff[2], slots[3], at(1, 7), at(1, 15)),
    ]

    schedule = Schedule(
        id="sched-sample",
        schedule_start=week_start,
        schedule_end=week_start + timedelta(days=7),
        assignments=assignments,
        unfilled_slots=[
            UnfilledSlot(
                slots[4],
                "No qualified staff available",
                fill_status=FillStatus(needed=1, assigned=0),
            )
        ],
        name="Sample Week",
        source_requirement=requirement.id,
        metadata={"algorithm": "manual"},
    )

    return Document(staff=staff, requirement=requirement, schedule=schedule)


def _load(path: Optional[str]) -> Document:
    if path is None:
        return create_sample_document()
    return load_document(path)


def _require_schedule(document: Document) -> Schedule:
    if document.schedule is None:
        raise ValueError("Input has no schedule")
    return document.schedule


def _target(args, config: AnalysisConfig) -> HourTarget:
    target_hours = args.target if args.target is not None else config.target_hours
    tolerance = args.tolerance if args.tolerance is not None else config.tolerance
    return HourTarget(target_hours, tolerance)


def run_check(document: Document, config: AnalysisConfig, as_json: bool) -> int:
    """Validate a schedule; exit status 1 when it has errors."""
    schedule = _require_schedule(document)
    validator = ScheduleValidator(
        resolver=ConstraintResolver(config.preference_policy())
    )
    result = validator.validate(
        schedule,
        constraints_by_staff=document.constraints_by_staff(),
        members=document.members_by_id(),
    )
    if document.requirement is not None:
        for error in validator.validate_requirement(document.requirement).errors:
            result.add_error(error)

    if as_json:
        print(dumps(result))
    else:
        print(f"Schedule {schedule.display_name}: {'VALID' if result.is_valid else 'INVALID'}")
        for error in result.errors:
            print(f"  ERROR   {error}")
        for warning in result.warnings:
            print(f"  WARNING {warning}")
    return 0 if result.is_valid else 1


def run_stats(document: Document, as_json: bool) -> int:
    """Print statistics for the requirement and schedule in the input."""
    if as_json:
        payload = {}
        if document.requirement is not None:
            payload["requirement"] = requirement_stats(document.requirement)
        if document.schedule is not None:
            payload["schedule"] = schedule_stats(document.schedule)
        print(dumps(payload))
        return 0

    generator = SummaryGenerator()
    if document.requirement is not None:
        print(generator.requirement_summary(document.requirement))
    if document.schedule is not None:
        print(generator.schedule_summary(document.schedule))
    for member in document.staff:
        if member.constraints:
            print(f"Constraints for {member.name}:")
            print(generator.constraint_summary(member.constraints))
            print()
    return 0


def run_utilization(document: Document, target: HourTarget, as_json: bool) -> int:
    """Print staff hours against the target band."""
    schedule = _require_schedule(document)
    report = UtilizationAnalyzer(target).analyze(schedule.assignments)

    if as_json:
        print(dumps(report))
        return 0

    print(f"Target: {target.target_hours:.1f}h (+/- {target.tolerance:.1f}h)")
    print(f"\nOver-utilized ({len(report.over_utilized)}):")
    for entry in report.over_utilized:
        print(f"  {entry.staff:<24} {entry.hours:>6.1f}h  +{entry.difference:.1f}h")
    print(f"\nUnder-utilized ({len(report.under_utilized)}):")
    for entry in report.under_utilized:
        print(f"  {entry.staff:<24} {entry.hours:>6.1f}h  -{entry.difference:.1f}h")
    print(f"\nOn target ({len(report.on_target)}):")
    for entry in report.on_target:
        print(f"  {entry.staff:<24} {entry.hours:>6.1f}h")
    return 0


def run_score(
    document: Document,
    config: AnalysisConfig,
    staff_name: Optional[str],
    as_json: bool,
) -> int:
    """Score every requirement slot for each staff member's constraints."""
    if document.requirement is None:
        raise ValueError("Input has no requirement to score")

    members = document.staff
    if staff_name is not None:
        members = [m for m in members if m.name == staff_name]
        if not members:
            raise ValueError(f"No staff member named {staff_name!r}")

    resolver = ConstraintResolver(config.preference_policy())
    results = {
        member.name: resolver.score_candidates(
            document.requirement.staff_slots, member.constraints
        )
        for member in members
    }

    if as_json:
        print(dumps(results))
        return 0

    for name, scored in results.items():
        print(f"{name}:")
        for entry in scored:
            level = entry.level.value if entry.level else "no constraint"
            print(f"  {entry.score:>5}  {entry.candidate.name:<24} ({level})")
        print()
    return 0


def run_report(
    document: Document,
    target: HourTarget,
    output_path: str,
    text: bool,
) -> int:
    """Write a PDF (or text) report for the schedule."""
    schedule = _require_schedule(document)
    if text:
        SummaryGenerator(target=target).generate(
            schedule, output_path, requirement=document.requirement
        )
    else:
        PDFGenerator(target=target).generate(schedule, output_path)
    print(f"Report saved to: {output_path}")
    return 0


def run_demo(config: AnalysisConfig, output_path: Optional[str] = None) -> int:
    """Analyze the built-in sample week."""
    print("Analyzing sample schedule...")
    document = create_sample_document()
    schedule = document.schedule

    print(SummaryGenerator(target=config.hour_target()).schedule_summary(schedule))

    validity = ConflictDetector().is_valid(schedule)
    print(f"\nDouble-booking free: {validity.valid}")

    if output_path:
        PDFGenerator(target=config.hour_target()).generate(schedule, output_path)
        print(f"PDF saved to: {output_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="rosterlens - staff schedule constraint and conflict analysis",
    )
    parser.add_argument("--config", "-c", type=str, help="JSON config file")
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    def add_input(sub):
        sub.add_argument(
            "input",
            nargs="?",
            help="JSON document with staff, requirement and schedule "
            "(default: built-in sample)",
        )
        sub.add_argument("--json", action="store_true", help="Print JSON output")

    check_parser = subparsers.add_parser("check", help="Validate a schedule")
    add_input(check_parser)

    stats_parser = subparsers.add_parser("stats", help="Print statistics")
    add_input(stats_parser)

    util_parser = subparsers.add_parser("utilization", help="Hours against a target")
    add_input(util_parser)
    util_parser.add_argument("--target", "-T", type=float, help="Target hours")
    util_parser.add_argument("--tolerance", type=float, help="Allowed deviation in hours")

    score_parser = subparsers.add_parser("score", help="Score slots against constraints")
    add_input(score_parser)
    score_parser.add_argument("--staff", "-s", type=str, help="Only this staff member")

    report_parser = subparsers.add_parser("report", help="Write a schedule report")
    report_parser.add_argument("input", nargs="?", help="JSON document")
    report_parser.add_argument(
        "--output", "-o", type=str, default="schedule.pdf", help="Output path"
    )
    report_parser.add_argument("--text", action="store_true", help="Write text, not PDF")
    report_parser.add_argument("--target", "-T", type=float, help="Target hours")
    report_parser.add_argument("--tolerance", type=float, help="Allowed deviation in hours")

    demo_parser = subparsers.add_parser("demo", help="Analyze a built-in sample week")
    demo_parser.add_argument("--output", "-o", type=str, help="Output PDF path")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config) if args.config else AnalysisConfig()
    except (OSError, ValueError) as e:
        print(f"Error: could not load config: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format=LOG_FORMAT,
    )

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == "demo":
            return run_demo(config, args.output)

        document = _load(args.input)
        if args.command == "check":
            return run_check(document, config, args.json)
        elif args.command == "stats":
            return run_stats(document, args.json)
        elif args.command == "utilization":
            return run_utilization(document, _target(args, config), args.json)
        elif args.command == "score":
            return run_score(document, config, args.staff, args.json)
        elif args.command == "report":
            return run_report(document, _target(args, config), args.output, args.text)
    except ConstructionError as e:
        logger.debug("Rejected input: %s", e.fields)
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
