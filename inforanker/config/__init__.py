"""Domain configuration models."""

from inforanker.config.collection import CollectionConfig, DedupConfig, TitleMatching
from inforanker.config.ensemble import EnsembleConfig, JudgeConfig, MetaJudgeConfig
from inforanker.config.pipeline import PipelineConfig
from inforanker.config.scoring import (
    FilteringPreset,
    NativeScoreConfig,
    QualityConfig,
    RelevanceFilterConfig,
    ScoringConfig,
    ScoringPreset,
    ScoringWeights,
)
from inforanker.config.sources import ArxivConfig, HackerNewsConfig, RedditConfig

__all__ = [
    "PipelineConfig",
    # Collection
    "CollectionConfig",
    "DedupConfig",
    "TitleMatching",
    # Evaluation
    "FilteringPreset",
    "RelevanceFilterConfig",
    "QualityConfig",
    "EnsembleConfig",
    "JudgeConfig",
    "MetaJudgeConfig",
    # Scoring
    "ScoringPreset",
    "ScoringWeights",
    "NativeScoreConfig",
    "ScoringConfig",
    # Sources
    "HackerNewsConfig",
    "RedditConfig",
    "ArxivConfig",
]
