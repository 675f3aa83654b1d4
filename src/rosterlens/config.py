"""Configuration for analysis runs.

Settings live in a single dataclass that can be built from a mapping or a
JSON file, e.g.::

    {"target_hours": 36, "tolerance": 4, "preference_scores": {"preferred": 5}}
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Union

from rosterlens.domain.models import PreferenceLevel
from rosterlens.domain.policies import (
    DEFAULT_PREFERENCE_SCORES,
    DefaultPreferencePolicy,
    HourTarget,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class AnalysisConfig:
    """Settings for scoring and utilization analysis.

    Attributes:
        target_hours: Hours each staff member should work in the period.
        tolerance: Allowed deviation from target_hours either side.
        preference_scores: Score per preference level.
        log_level: Logging level used by the command line.
    """

    target_hours: float = 40.0
    tolerance: float = 0.0
    preference_scores: dict[PreferenceLevel, int] = field(
        default_factory=lambda: dict(DEFAULT_PREFERENCE_SCORES)
    )
    log_level: str = "WARNING"

    def __post_init__(self):
        for name in ("target_hours", "tolerance"):
            if not _is_number(getattr(self, name)):
                raise ValueError(f"{name} must be a number")
        if self.tolerance < 0:
            raise ValueError("tolerance cannot be negative")
        if not isinstance(self.log_level, str):
            raise ValueError("log_level must be a string")
        if not isinstance(self.preference_scores, Mapping):
            raise ValueError("preference_scores must be an object")
        for level, score in self.preference_scores.items():
            if not _is_number(score):
                raise ValueError(f"preference_scores.{getattr(level, 'value', level)} must be a number")
        self.log_level = self.log_level.upper()
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        scores = dict(DEFAULT_PREFERENCE_SCORES)
        scores.update(
            {PreferenceLevel.parse(k): int(v) for k, v in self.preference_scores.items()}
        )
        self.preference_scores = scores

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "AnalysisConfig":
        """Build a config, rejecting unknown keys."""
        if not isinstance(data, Mapping):
            raise ValueError("config must be a JSON object")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**data)

    def hour_target(self) -> HourTarget:
        return HourTarget(self.target_hours, self.tolerance)

    def preference_policy(self) -> DefaultPreferencePolicy:
        return DefaultPreferencePolicy(scores=self.preference_scores)


def load_config(path: Union[str, Path]) -> AnalysisConfig:
    """Read an AnalysisConfig from a JSON file."""
    with open(path, encoding="utf-8") as f:
        return AnalysisConfig.from_mapping(json.load(f))
