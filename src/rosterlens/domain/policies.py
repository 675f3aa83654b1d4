"""Policy definitions for scoring and hour targets.

Policies hold the tunable numbers the analysis layer applies (preference
scores, target hours and tolerance). They are kept apart from the
analysis code so they can be tested and swapped independently.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

from rosterlens.domain.models import PreferenceLevel

DEFAULT_PREFERENCE_SCORES = {
    PreferenceLevel.UNAVAILABLE: -100,
    PreferenceLevel.NOT_PREFERRED: -10,
    PreferenceLevel.NEUTRAL: 0,
    PreferenceLevel.PREFERRED: 10,
}

# Score when no constraint applies to a window.
NO_CONSTRAINT_SCORE = 0


class PreferencePolicy(ABC):
    """Abstract base class for preference scoring policies."""

    @abstractmethod
    def score(self, level: Optional[PreferenceLevel]) -> int:
        """Desirability score for a resolved level (None = no constraint)."""
        pass

    @abstractmethod
    def blocking_level(self) -> PreferenceLevel:
        """Level that rules a window out entirely."""
        pass


class DefaultPreferencePolicy(PreferencePolicy):
    """Default scoring.

    - unavailable: -100
    - not_preferred: -10
    - neutral: 0
    - preferred: +10
    - no constraint: 0
    """

    def __init__(
        self,
        scores: Optional[Mapping[PreferenceLevel, int]] = None,
        no_constraint_score: int = NO_CONSTRAINT_SCORE,
    ):
        self._scores = dict(DEFAULT_PREFERENCE_SCORES)
        if scores:
            self._scores.update(
                {PreferenceLevel.parse(level): value for level, value in scores.items()}
            )
        self._no_constraint_score = no_constraint_score

    def score(self, level: Optional[PreferenceLevel]) -> int:
        if level is None:
            return self._no_constraint_score
        return self._scores[level]

    def blocking_level(self) -> PreferenceLevel:
        return PreferenceLevel.UNAVAILABLE


class UtilizationBand(Enum):
    """Where a staff member's total hours fall relative to a target."""

    UNDER = "under"
    ON_TARGET = "on_target"
    OVER = "over"


@dataclass(frozen=True)
class HourTarget:
    """Target hours with a symmetric tolerance band.

    Attributes:
        target_hours: Hours each staff member should work.
        tolerance: Allowed deviation either side; 0 means any difference
            counts as over or under.
    """

    target_hours: float
    tolerance: float = 0.0

    def __post_init__(self):
        if self.tolerance < 0:
            raise ValueError("tolerance cannot be negative")

    def classify(self, hours: float) -> UtilizationBand:
        """Place a total in the under / on-target / over band."""
        difference = hours - self.target_hours
        if difference < -self.tolerance:
            return UtilizationBand.UNDER
        if difference > self.tolerance:
            return UtilizationBand.OVER
        return UtilizationBand.ON_TARGET

    @property
    def lower_bound(self) -> float:
        return self.target_hours - self.tolerance

    @property
    def upper_bound(self) -> float:
        return self.target_hours + self.tolerance
