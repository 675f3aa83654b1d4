"""Constraint resolution, conflict detection and schedule statistics."""

from rosterlens.analysis.conflicts import (
    Conflict,
    ConflictDetector,
    ScheduleValidity,
    find_conflicts,
    is_valid,
)
from rosterlens.analysis.resolver import (
    CandidateScore,
    ConstraintResolver,
    has_blocking_conflict,
    preference_score,
    resolve_preference,
)
from rosterlens.analysis.statistics import (
    AssignmentStats,
    ConstraintStats,
    RequirementStats,
    ScheduleStats,
    assignment_stats,
    constraint_stats,
    fill_rate,
    requirement_stats,
    schedule_stats,
)
from rosterlens.analysis.utilization import (
    UtilizationAnalyzer,
    UtilizationEntry,
    UtilizationReport,
    find_by_hour_target,
)

__all__ = [
    # Resolver
    "CandidateScore",
    "ConstraintResolver",
    "has_blocking_conflict",
    "preference_score",
    "resolve_preference",
    # Conflicts
    "Conflict",
    "ConflictDetector",
    "ScheduleValidity",
    "find_conflicts",
    "is_valid",
    # Utilization
    "UtilizationAnalyzer",
    "UtilizationEntry",
    "UtilizationReport",
    "find_by_hour_target",
    # Statistics
    "AssignmentStats",
    "ConstraintStats",
    "RequirementStats",
    "ScheduleStats",
    "assignment_stats",
    "constraint_stats",
    "fill_rate",
    "requirement_stats",
    "schedule_stats",
]
