"""Tests for pipeline and ensemble configuration loading."""

import pytest

from inforanker.config import (
    EnsembleConfig,
    FilteringPreset,
    JudgeConfig,
    ScoringPreset,
    TitleMatching,
)
from inforanker.core.config import Config
from inforanker.core.config_loader import (
    build_pipeline_config,
    load_defaults,
    load_ensemble_config,
)
from inforanker.core.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError


class TestLoadDefaults:
    """Tests for config/defaults.yaml."""

    def test_defaults_contain_sections(self):
        """Test the shipped defaults file parses."""
        defaults = load_defaults()
        assert defaults["relevance"]["batch_size"] == 15
        assert defaults["scoring"]["native"]["max_scores"]["Hacker News"] == 500


class TestBuildPipelineConfig:
    """Tests for build_pipeline_config."""

    def test_environment_overrides_presets(self):
        """Test presets and dedup strictness come from settings."""
        config = Config(
            filtering_preset=FilteringPreset.STRICT,
            scoring_preset=ScoringPreset.BALANCED,
            dedup_title_matching=TitleMatching.OFF,
            collection_lookback_days=7,
            debug_article_limit=5,
        )

        pipeline = build_pipeline_config(config)

        assert pipeline.relevance.effective_threshold == 6.0
        assert pipeline.scoring.weights.native == 0.5
        assert pipeline.dedup.title_matching == TitleMatching.OFF
        assert pipeline.collection.lookback_days == 7
        assert pipeline.collection.debug_article_limit == 5

    def test_ensemble_disabled_by_default(self):
        """Test no ensemble is loaded when switched off."""
        pipeline = build_pipeline_config(Config(ensemble_enabled=False))
        assert pipeline.ensemble.enabled is False

    def test_given_ensemble_follows_switch(self):
        """Test a pre-loaded lineup is enabled by the settings switch."""
        ensemble = EnsembleConfig(judges=[JudgeConfig(judge_id="a", model="m/a")])

        pipeline = build_pipeline_config(Config(ensemble_enabled=True), ensemble=ensemble)

        assert pipeline.ensemble.enabled is True
        assert [j.judge_id for j in pipeline.ensemble.active_judges] == ["a"]

    def test_enabled_ensemble_without_judges_is_invalid(self):
        """Test an enabled ensemble needs an active judge."""
        with pytest.raises(ConfigValidationError):
            build_pipeline_config(Config(ensemble_enabled=True), ensemble=EnsembleConfig())


class TestLoadEnsembleConfig:
    """Tests for load_ensemble_config."""

    def test_shipped_lineup(self):
        """Test config/ensemble.yaml loads three judges and a meta-judge."""
        ensemble = load_ensemble_config("config/ensemble.yaml")

        assert len(ensemble.active_judges) == 3
        assert ensemble.meta_judge.enabled is True
        assert ensemble.consensus_tolerance == 5.0

    def test_missing_file(self, tmp_path):
        """Test a missing file raises ConfigNotFoundError."""
        with pytest.raises(ConfigNotFoundError):
            load_ensemble_config(tmp_path / "missing.yaml")

    def test_duplicate_judge_ids(self, tmp_path):
        """Test validation errors are wrapped."""
        path = tmp_path / "ensemble.yaml"
        path.write_text(
            "ensemble:\n"
            "  judges:\n"
            "    - {judge_id: a, model: m/a}\n"
            "    - {judge_id: a, model: m/b}\n",
            encoding="utf-8",
        )

        with pytest.raises(ConfigValidationError):
            load_ensemble_config(path)

    def test_non_mapping_yaml(self, tmp_path):
        """Test a YAML list is rejected."""
        path = tmp_path / "ensemble.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_ensemble_config(path)
