"""Constraint resolution for candidate time windows.

Given one staff member's constraints and a candidate window, the resolver
works out which constraints apply, the most restrictive preference among
them, and a numeric desirability score. Callers pass constraints already
filtered to a single staff member.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from rosterlens.domain.interval import Timed, overlaps
from rosterlens.domain.models import PreferenceLevel, StaffConstraint
from rosterlens.domain.policies import DefaultPreferencePolicy, PreferencePolicy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateScore:
    """Score of one candidate window against a set of constraints."""

    candidate: Timed
    score: int
    level: Optional[PreferenceLevel]

    @property
    def is_blocked(self) -> bool:
        return self.level is PreferenceLevel.UNAVAILABLE


class ConstraintResolver:
    """Resolves a staff member's constraints against candidate windows.

    Example:
        >>> resolver = ConstraintResolver()
        >>> resolver.resolve_preference(Interval(start, end), constraints)
        <PreferenceLevel.NOT_PREFERRED: 'not_preferred'>
    """

    def __init__(self, policy: Optional[PreferencePolicy] = None):
        self.policy = policy or DefaultPreferencePolicy()

    def overlapping_constraints(
        self,
        candidate: Timed,
        constraints: Iterable[StaffConstraint],
    ) -> list[StaffConstraint]:
        """Constraints whose window overlaps the candidate, in input order."""
        return [c for c in constraints if overlaps(candidate, c)]

    def resolve_preference(
        self,
        candidate: Timed,
        constraints: Iterable[StaffConstraint],
    ) -> Optional[PreferenceLevel]:
        """Most restrictive preference among the overlapping constraints.

        Restrictiveness runs unavailable > not_preferred > neutral >
        preferred.

        Returns:
            The winning level, or None when no constraint overlaps the
            candidate (which is distinct from neutral).
        """
        applicable = self.overlapping_constraints(candidate, constraints)
        if not applicable:
            return None
        return max((c.preference for c in applicable), key=lambda level: level.rank)

    def preference_score(
        self,
        candidate: Timed,
        constraints: Iterable[StaffConstraint],
    ) -> int:
        """Desirability of the candidate; higher is better."""
        return self.policy.score(self.resolve_preference(candidate, constraints))

    def has_blocking_conflict(
        self,
        candidate: Timed,
        constraints: Iterable[StaffConstraint],
    ) -> bool:
        """True iff any unavailable constraint overlaps the candidate."""
        blocking = self.policy.blocking_level()
        return any(
            c.preference is blocking and overlaps(candidate, c) for c in constraints
        )

    def covering_constraints(
        self,
        candidate: Timed,
        constraints: Iterable[StaffConstraint],
    ) -> list[StaffConstraint]:
        """Constraints that span the whole candidate window."""
        return [
            c
            for c in constraints
            if c.start_time <= candidate.start_time and c.end_time >= candidate.end_time
        ]

    def score_candidates(
        self,
        candidates: Iterable[Timed],
        constraints: Sequence[StaffConstraint],
    ) -> list[CandidateScore]:
        """Score several candidate windows, best first.

        Ties keep the order the candidates were given in.
        """
        scored = []
        for candidate in candidates:
            level = self.resolve_preference(candidate, constraints)
            scored.append(CandidateScore(candidate, self.policy.score(level), level))

        scored.sort(key=lambda s: s.score, reverse=True)
        logger.debug(
            "Scored %d candidates against %d constraints", len(scored), len(constraints)
        )
        return scored


_default_resolver = ConstraintResolver()


def overlapping_constraints(
    candidate: Timed, constraints: Iterable[StaffConstraint]
) -> list[StaffConstraint]:
    return _default_resolver.overlapping_constraints(candidate, constraints)


def resolve_preference(
    candidate: Timed, constraints: Iterable[StaffConstraint]
) -> Optional[PreferenceLevel]:
    return _default_resolver.resolve_preference(candidate, constraints)


def preference_score(candidate: Timed, constraints: Iterable[StaffConstraint]) -> int:
    return _default_resolver.preference_score(candidate, constraints)


def has_blocking_conflict(
    candidate: Timed, constraints: Iterable[StaffConstraint]
) -> bool:
    return _default_resolver.has_blocking_conflict(candidate, constraints)
