"""Aggregate configuration of the collection pipeline."""

from pydantic import BaseModel, Field

from inforanker.config.collection import CollectionConfig, DedupConfig
from inforanker.config.ensemble import EnsembleConfig
from inforanker.config.scoring import QualityConfig, RelevanceFilterConfig, ScoringConfig


class PipelineConfig(BaseModel):
    """Every setting a collection run needs.

    Attributes:
        relevance: Relevance filter settings
        quality: Single-judge settings and relevance cutoff
        ensemble: Ensemble lineup and consensus settings
        scoring: Final score settings
        dedup: Deduplication settings
        collection: Lookback window and debug caps
    """

    relevance: RelevanceFilterConfig = Field(default_factory=RelevanceFilterConfig)
    quality: QualityConfig = Field(default_factory=QualityConfig)
    ensemble: EnsembleConfig = Field(default_factory=EnsembleConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    dedup: DedupConfig = Field(default_factory=DedupConfig)
    collection: CollectionConfig = Field(default_factory=CollectionConfig)


__all__ = ["PipelineConfig"]
