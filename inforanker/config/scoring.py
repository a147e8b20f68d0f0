"""Evaluation and scoring configuration models.

Presets are selected by name; the numeric values live here.
"""

import enum

from pydantic import BaseModel, Field, model_validator

from inforanker.config.validators import validate_weights_sum


class FilteringPreset(str, enum.Enum):
    """Relevance filter threshold preset (0-10 scale)."""

    LOOSE = "loose"
    NORMAL = "normal"
    STRICT = "strict"

    @property
    def threshold(self) -> float:
        return _FILTERING_THRESHOLDS[self]


_FILTERING_THRESHOLDS = {
    FilteringPreset.LOOSE: 2.0,
    FilteringPreset.NORMAL: 3.0,
    FilteringPreset.STRICT: 6.0,
}


class ScoringWeights(BaseModel):
    """Native/LLM weights of the final score. Must sum to 1.0."""

    native: float = Field(..., ge=0, le=1)
    llm: float = Field(..., ge=0, le=1)

    @model_validator(mode="after")
    def check_weights_sum(self) -> "ScoringWeights":
        """Validate that native + llm = 1.0."""
        validate_weights_sum({"native": self.native, "llm": self.llm})
        return self


class ScoringPreset(str, enum.Enum):
    """Final score weight preset."""

    QUALITY_FOCUSED = "quality_focused"
    BALANCED = "balanced"
    POPULARITY_FOCUSED = "popularity_focused"

    @property
    def weights(self) -> ScoringWeights:
        native, llm = _SCORING_WEIGHTS[self]
        return ScoringWeights(native=native, llm=llm)


_SCORING_WEIGHTS = {
    ScoringPreset.QUALITY_FOCUSED: (0.3, 0.7),
    ScoringPreset.BALANCED: (0.5, 0.5),
    ScoringPreset.POPULARITY_FOCUSED: (0.7, 0.3),
}


class RelevanceFilterConfig(BaseModel):
    """Relevance filter settings.

    Attributes:
        preset: Threshold preset
        threshold: Explicit threshold, used only when preset is None
        batch_size: Articles per model call
        retry_batch_size: Articles per call when a failed batch is retried
        max_tokens: Completion token limit per call
        summary_chars: Summary excerpt length sent to the model
    """

    preset: FilteringPreset | None = Field(default=FilteringPreset.NORMAL)
    threshold: float = Field(default=3.0, ge=0, le=10)
    batch_size: int = Field(default=15, ge=1, le=50)
    retry_batch_size: int = Field(default=5, ge=1, le=50)
    max_tokens: int = Field(default=2000, ge=100, le=16000)
    summary_chars: int = Field(default=300, ge=0, le=4000)

    @property
    def effective_threshold(self) -> float:
        return self.preset.threshold if self.preset is not None else self.threshold

    @model_validator(mode="after")
    def check_retry_batch_size(self) -> "RelevanceFilterConfig":
        """Retry batches must be smaller than the original batch."""
        if self.batch_size > 1 and self.retry_batch_size >= self.batch_size:
            raise ValueError("retry_batch_size must be smaller than batch_size")
        return self


class QualityConfig(BaseModel):
    """Single-judge quality evaluation settings.

    Attributes:
        batch_size: Articles per model call
        max_tokens: Completion token limit per call
        content_chars: Content excerpt length sent to the model
        relevance_cutoff: Relevance axis (0-20) below which an article is
            excluded from ranking
    """

    batch_size: int = Field(default=3, ge=1, le=20)
    max_tokens: int = Field(default=4000, ge=500, le=16000)
    content_chars: int = Field(default=1500, ge=0, le=20000)
    relevance_cutoff: float = Field(default=6.0, ge=0, le=20)


class NativeScoreConfig(BaseModel):
    """Per-source native score normalization.

    Raw scores are log-scaled against the source's expected maximum.
    """

    max_scores: dict[str, int] = Field(
        default_factory=lambda: {
            "Hacker News": 500,
            "Reddit": 1000,
            "Qiita": 200,
            "Zenn": 200,
            "はてなブックマーク": 500,
        }
    )
    default_max_score: int = Field(default=100, ge=1)

    def max_for(self, source_name: str) -> int:
        return self.max_scores.get(source_name, self.default_max_score)


class ScoringConfig(BaseModel):
    """Final score calculation settings.

    All fields have defaults - can be used without any configuration.
    """

    preset: ScoringPreset = Field(default=ScoringPreset.QUALITY_FOCUSED)
    native: NativeScoreConfig = Field(default_factory=NativeScoreConfig)

    @property
    def weights(self) -> ScoringWeights:
        return self.preset.weights


__all__ = [
    "FilteringPreset",
    "ScoringPreset",
    "ScoringWeights",
    "RelevanceFilterConfig",
    "QualityConfig",
    "NativeScoreConfig",
    "ScoringConfig",
]
