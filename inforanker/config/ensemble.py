"""Ensemble evaluation configuration models.

The judge lineup is normally loaded from YAML (see
inforanker.core.config_loader.load_ensemble_config).
"""

from pydantic import BaseModel, Field, field_validator, model_validator


class JudgeConfig(BaseModel):
    """One independent quality judge.

    Attributes:
        judge_id: Unique identifier (e.g., "judge_a")
        display_name: Human-readable name
        model: LiteLLM model name (provider/model)
        weight: Weight in the consensus mean
        specialty: Optional focus injected into the prompt ("technical", "reasoning")
        max_tokens: Completion token limit
        temperature: Sampling temperature
        enabled: Whether the judge takes part
    """

    judge_id: str = Field(..., min_length=1, max_length=50)
    display_name: str = Field(default="")
    model: str = Field(..., min_length=1)
    weight: float = Field(default=1.0, gt=0, le=10)
    specialty: str | None = Field(default=None)
    max_tokens: int = Field(default=2000, ge=100, le=16000)
    temperature: float = Field(default=0.3, ge=0, le=2)
    enabled: bool = Field(default=True)

    @property
    def label(self) -> str:
        return self.display_name or self.judge_id


class MetaJudgeConfig(BaseModel):
    """Consolidating meta-judge.

    Attributes:
        enabled: When False, disagreements resolve to the weighted mean
        model: LiteLLM model name
        max_tokens: Completion token limit
        temperature: Sampling temperature
    """

    enabled: bool = Field(default=True)
    model: str = Field(default="openai/gpt-4o")
    max_tokens: int = Field(default=3000, ge=100, le=16000)
    temperature: float = Field(default=0.2, ge=0, le=2)


class EnsembleConfig(BaseModel):
    """Multi-judge ensemble settings.

    Attributes:
        enabled: Use ensemble instead of the single judge
        judges: Judge lineup
        meta_judge: Meta-judge settings
        consensus_tolerance: Max pairwise difference per axis (0-20 scale)
            for the judges to count as agreeing
        skip_meta_judge_on_consensus: Use the weighted mean when judges agree
        max_parallel_judges: Concurrent judge calls per article
        judge_timeout_seconds: Timeout of one judge call
    """

    enabled: bool = Field(default=False)
    judges: list[JudgeConfig] = Field(default_factory=list)
    meta_judge: MetaJudgeConfig = Field(default_factory=MetaJudgeConfig)
    consensus_tolerance: float = Field(default=5.0, ge=0, le=20)
    skip_meta_judge_on_consensus: bool = Field(default=True)
    max_parallel_judges: int = Field(default=3, ge=1, le=16)
    judge_timeout_seconds: float = Field(default=60.0, gt=0, le=600)

    @field_validator("judges")
    @classmethod
    def check_unique_ids(cls, v: list[JudgeConfig]) -> list[JudgeConfig]:
        """Judge ids must be unique."""
        ids = [j.judge_id for j in v]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate judge ids: {duplicates}")
        return v

    @model_validator(mode="after")
    def check_enabled_judges(self) -> "EnsembleConfig":
        """An enabled ensemble needs at least one enabled judge."""
        if self.enabled and not self.active_judges:
            raise ValueError("Ensemble is enabled but no judge is enabled")
        return self

    @property
    def active_judges(self) -> list[JudgeConfig]:
        return [j for j in self.judges if j.enabled]


__all__ = [
    "JudgeConfig",
    "MetaJudgeConfig",
    "EnsembleConfig",
]
