"""Configuration loader for pipeline defaults and the judge lineup.

Pipeline tuning lives in config/defaults.yaml and the ensemble judge
lineup in config/ensemble.yaml. Environment settings (see
inforanker.core.config) select presets and switch the ensemble on.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from inforanker.config import EnsembleConfig, PipelineConfig
from inforanker.core.config import Config, get_config
from inforanker.core.exceptions import ConfigError, ConfigNotFoundError, ConfigValidationError
from inforanker.core.logging import get_logger

logger = get_logger(__name__)

# Base config directory (project root/config)
_CONFIG_BASE_DIR = Path(__file__).parent.parent.parent / "config"


@lru_cache(maxsize=1)
def load_defaults() -> dict[str, Any]:
    """Load pipeline defaults from config/defaults.yaml.

    Returns:
        Dictionary with relevance, quality, scoring, dedup and collection sections.
        Empty when the file does not exist.

    Raises:
        ConfigError: If the file is invalid YAML.
    """
    defaults_path = _CONFIG_BASE_DIR / "defaults.yaml"
    if not defaults_path.exists():
        logger.debug("No defaults file, using model defaults", path=str(defaults_path))
        return {}
    return _load_yaml_file(defaults_path, "defaults")


def load_ensemble_config(path: str | Path | None = None) -> EnsembleConfig:
    """Load the ensemble judge lineup.

    Args:
        path: YAML file path. Relative paths resolve against the project
            root. Defaults to the configured ensemble_config_path.

    Returns:
        Validated EnsembleConfig

    Raises:
        ConfigNotFoundError: If the file does not exist
        ConfigValidationError: If the content does not validate
    """
    resolved = Path(path or get_config().ensemble_config_path)
    if not resolved.is_absolute():
        resolved = _CONFIG_BASE_DIR.parent / resolved
    if not resolved.exists():
        raise ConfigNotFoundError("ensemble", config_path=str(resolved))

    data = _load_yaml_file(resolved, "ensemble")
    try:
        config = EnsembleConfig.model_validate(data.get("ensemble", data))
    except ValidationError as e:
        raise ConfigValidationError(
            f"Invalid ensemble config: {e}", config_path=str(resolved)
        ) from e

    logger.info(
        "Loaded ensemble config",
        path=str(resolved),
        judges=[j.judge_id for j in config.active_judges],
    )
    return config


def build_pipeline_config(
    config: Config | None = None,
    ensemble: EnsembleConfig | None = None,
) -> PipelineConfig:
    """Assemble the pipeline configuration.

    YAML defaults provide tuning values; environment settings override the
    presets, lookback window, dedup strictness and ensemble switch.

    Args:
        config: Application settings (defaults to the global Config)
        ensemble: Pre-loaded ensemble lineup. Loaded from YAML when the
            ensemble is enabled and none is given.

    Returns:
        Validated PipelineConfig

    Raises:
        ConfigValidationError: If the merged configuration is invalid
    """
    config = config or get_config()
    data: dict[str, Any] = {k: dict(v) for k, v in load_defaults().items() if isinstance(v, dict)}

    data.setdefault("relevance", {})["preset"] = config.filtering_preset
    data.setdefault("scoring", {})["preset"] = config.scoring_preset
    data.setdefault("dedup", {})["title_matching"] = config.dedup_title_matching
    collection = data.setdefault("collection", {})
    collection["lookback_days"] = config.collection_lookback_days
    collection["debug_article_limit"] = config.debug_article_limit

    if ensemble is None and config.ensemble_enabled:
        ensemble = load_ensemble_config()
    if ensemble is not None:
        data["ensemble"] = ensemble.model_dump()
        data["ensemble"]["enabled"] = config.ensemble_enabled

    try:
        return PipelineConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid pipeline config: {e}") from e


def _load_yaml_file(path: Path, name: str) -> dict[str, Any]:
    """Load a YAML file from disk.

    Args:
        path: Path to the YAML file.
        name: Human-readable name for error messages.

    Returns:
        Parsed YAML content as dictionary.

    Raises:
        ConfigError: If file doesn't exist or parsing fails.
    """
    if not path.exists():
        logger.error("Config file not found", name=name, path=str(path))
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            content = yaml.safe_load(f)

        if not isinstance(content, dict):
            raise ConfigError(f"Config file must contain a YAML object: {path}")

        logger.debug("Loaded config file", name=name, path=str(path))
        return content

    except yaml.YAMLError as e:
        logger.error("YAML parsing failed", name=name, path=str(path), error=str(e))
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e


def clear_config_cache() -> None:
    """Clear cached configuration files."""
    load_defaults.cache_clear()
    logger.info("Config cache cleared")
