"""Unit tests for config validators and small config models."""

import pytest
from pydantic import ValidationError

from inforanker.config import DedupConfig, EnsembleConfig, JudgeConfig, TitleMatching
from inforanker.config.validators import validate_weights_sum


class TestValidateWeightsSum:
    """Tests for validate_weights_sum function."""

    def test_valid_sum_exact(self):
        validate_weights_sum({"native": 0.3, "llm": 0.7})

    def test_valid_sum_within_tolerance(self):
        """Test weights within tolerance."""
        validate_weights_sum({"a": 0.333, "b": 0.333, "c": 0.333})

    @pytest.mark.parametrize("values", [{"a": 0.5, "b": 0.6}, {"a": 0.2, "b": 0.3}])
    def test_invalid_sum(self, values):
        with pytest.raises(ValueError, match="must sum to 1.0"):
            validate_weights_sum(values)

    def test_custom_expected_sum(self):
        validate_weights_sum({"a": 50, "b": 50}, expected_sum=100)

        with pytest.raises(ValueError):
            validate_weights_sum({"a": 0.5, "b": 0.5}, expected_sum=100)


class TestDedupConfig:
    """Tests for DedupConfig."""

    def test_defaults(self):
        config = DedupConfig()

        assert config.title_matching == TitleMatching.EXACT
        assert "fbclid" in config.strip_query_params

    def test_title_matching_from_string(self):
        assert DedupConfig(title_matching="off").title_matching == TitleMatching.OFF


class TestEnsembleValidation:
    """Tests for EnsembleConfig validators."""

    def test_duplicate_judge_ids(self):
        judges = [JudgeConfig(judge_id="a", model="m/1"), JudgeConfig(judge_id="a", model="m/2")]

        with pytest.raises(ValidationError, match="Duplicate judge ids"):
            EnsembleConfig(judges=judges)

    def test_enabled_without_active_judges(self):
        judges = [JudgeConfig(judge_id="a", model="m/1", enabled=False)]

        with pytest.raises(ValidationError, match="no judge is enabled"):
            EnsembleConfig(enabled=True, judges=judges)

        # Disabled ensembles may have an empty lineup
        assert EnsembleConfig(judges=judges).active_judges == []

    def test_weight_must_be_positive(self):
        with pytest.raises(ValidationError):
            JudgeConfig(judge_id="a", model="m/1", weight=0)
