"""Tests for analysis configuration."""

import json

import pytest

from rosterlens.config import AnalysisConfig, load_config
from rosterlens.domain.models import PreferenceLevel


class TestAnalysisConfig:
    """Tests for AnalysisConfig."""

    def test_defaults(self):
        config = AnalysisConfig()
        assert config.target_hours == 40.0
        assert config.tolerance == 0.0
        assert config.log_level == "WARNING"
        assert config.preference_scores[PreferenceLevel.UNAVAILABLE] == -100

    def test_partial_scores_merged(self):
        config = AnalysisConfig(preference_scores={"preferred": 5})
        assert config.preference_scores[PreferenceLevel.PREFERRED] == 5
        assert config.preference_scores[PreferenceLevel.NOT_PREFERRED] == -10
        assert config.preference_policy().score(PreferenceLevel.PREFERRED) == 5

    def test_hour_target(self):
        target = AnalysisConfig(target_hours=36, tolerance=4).hour_target()
        assert (target.lower_bound, target.upper_bound) == (32, 40)

    def test_log_level_normalized(self):
        assert AnalysisConfig(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize(
        "kwargs",
        [{"tolerance": -1}, {"log_level": "LOUD"}, {"preference_scores": {"maybe": 1}}],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            AnalysisConfig(**kwargs)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"tolerance": "5"},
            {"target_hours": None},
            {"tolerance": True},
            {"log_level": 3},
            {"preference_scores": {"preferred": None}},
            {"preference_scores": [1]},
        ],
    )
    def test_wrongly_typed_values_rejected(self, kwargs):
        """Values of the wrong type raise ValueError, not TypeError."""
        with pytest.raises(ValueError):
            AnalysisConfig(**kwargs)

    def test_non_object_config_rejected(self):
        with pytest.raises(ValueError, match="object"):
            AnalysisConfig.from_mapping([["tolerance", 1]])

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError, match="target"):
            AnalysisConfig.from_mapping({"target": 40})

    def test_load_config(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"target_hours": 36, "tolerance": 4}))
        config = load_config(path)
        assert config.target_hours == 36
        assert config.tolerance == 4
