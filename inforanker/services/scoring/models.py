"""Evaluation result DTOs.

These value objects live for one collection run. Only the fields they
finally produce are written onto Article rows.
"""

import enum
import uuid

from pydantic import BaseModel, Field

from inforanker.core.exceptions import CollectionFailure


class QualityAxis(str, enum.Enum):
    """Stage 2 scoring axes, each on a 0-20 scale."""

    RELEVANCE = "relevance"
    TECHNICAL = "technical"
    NOVELTY = "novelty"
    IMPACT = "impact"
    QUALITY = "quality"


AXES: tuple[QualityAxis, ...] = tuple(QualityAxis)
AXIS_MAX = 20.0
TOTAL_MAX = 100.0
RELEVANCE_MAX = 10.0


def clamp(value: float, low: float, high: float) -> float:
    """Clamp a value into [low, high]."""
    return max(low, min(high, value))


class TokenUsage(BaseModel):
    """Token counts of one or more model calls."""

    input_tokens: int = 0
    output_tokens: int = 0
    api_calls: int = 0

    def add(self, input_tokens: int, output_tokens: int, api_calls: int = 1) -> None:
        self.input_tokens += input_tokens
        self.output_tokens += output_tokens
        self.api_calls += api_calls

    def merge(self, other: "TokenUsage") -> None:
        self.add(other.input_tokens, other.output_tokens, other.api_calls)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


# ============================================
# Stage 1
# ============================================


class ArticleRelevance(BaseModel):
    """Relevance filter decision for one article."""

    article_id: uuid.UUID
    relevance_score: float | None = Field(default=None, ge=0, le=RELEVANCE_MAX)
    is_relevant: bool
    reason: str = ""


class RelevanceBatchResult(BaseModel):
    """Relevance filter output for a set of articles.

    Attributes:
        evaluations: Decisions for every evaluated article
        unevaluated_ids: Articles the model never returned a score for
        bypassed: True when the source filters server side
        usage: Token usage of every call
        warnings: Article-level failures
    """

    evaluations: list[ArticleRelevance] = Field(default_factory=list)
    unevaluated_ids: list[uuid.UUID] = Field(default_factory=list)
    bypassed: bool = False
    usage: TokenUsage = Field(default_factory=TokenUsage)
    warnings: list[CollectionFailure] = Field(default_factory=list)

    @property
    def relevant_ids(self) -> list[uuid.UUID]:
        return [e.article_id for e in self.evaluations if e.is_relevant]

    @property
    def relevant_count(self) -> int:
        return len(self.relevant_ids)


# ============================================
# Stage 2
# ============================================


class ArticleQuality(BaseModel):
    """Final Stage 2 scores for one article.

    Attributes:
        article_id: Evaluated article
        scores: Final axis scores (0-20)
        total: Aggregate LLM score (0-100)
        summary_ja: Localized summary
        confidence: Agreement confidence (ensemble mode)
        skipped_meta_judge: Ensemble judges agreed, meta-judge not called
    """

    article_id: uuid.UUID
    scores: dict[QualityAxis, float]
    total: float = Field(ge=0, le=TOTAL_MAX)
    summary_ja: str = ""
    confidence: float | None = None
    skipped_meta_judge: bool | None = None

    @property
    def relevance(self) -> float:
        return self.scores[QualityAxis.RELEVANCE]


class QualityBatchResult(BaseModel):
    """Stage 2 output for a set of articles."""

    evaluations: list[ArticleQuality] = Field(default_factory=list)
    unevaluated_ids: list[uuid.UUID] = Field(default_factory=list)
    excluded_ids: list[uuid.UUID] = Field(default_factory=list)
    usage: TokenUsage = Field(default_factory=TokenUsage)
    judge_usage: dict[str, TokenUsage] = Field(default_factory=dict)
    judge_seconds: dict[str, float] = Field(default_factory=dict)
    meta_judge_calls: int = 0
    warnings: list[CollectionFailure] = Field(default_factory=list)

    def record_judge(self, judge_id: str, usage: TokenUsage, seconds: float) -> None:
        self.judge_usage.setdefault(judge_id, TokenUsage()).merge(usage)
        self.judge_seconds[judge_id] = self.judge_seconds.get(judge_id, 0.0) + seconds


# ============================================
# Ensemble
# ============================================


class JudgeEvaluation(BaseModel):
    """One judge's evaluation of one article."""

    judge_id: str
    display_name: str = ""
    weight: float = Field(default=1.0, gt=0)
    scores: dict[QualityAxis, float]
    reasons: dict[QualityAxis, str] = Field(default_factory=dict)
    summary_ja: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    duration_seconds: float = 0.0

    @property
    def total(self) -> float:
        return clamp(sum(self.scores.values()), 0, TOTAL_MAX)


class ContradictionDetail(BaseModel):
    """Disagreement of two judges on one axis."""

    axis: QualityAxis
    judge_a: str
    score_a: float
    judge_b: str
    score_b: float
    difference: float
    resolution: str = ""


class MetaJudgeResult(BaseModel):
    """Consolidated verdict of the meta-judge."""

    scores: dict[QualityAxis, float]
    confidence: float = Field(default=0.0, ge=0, le=1)
    rationale: str = ""
    summary_ja: str = ""
    contradictions: list[ContradictionDetail] = Field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0
    duration_seconds: float = 0.0

    @property
    def total(self) -> float:
        return clamp(sum(self.scores.values()), 0, TOTAL_MAX)


class EnsembleEvaluationResult(BaseModel):
    """Ensemble outcome for one article.

    Attributes:
        article_id: Evaluated article
        judge_evaluations: Successful judge evaluations
        failed_judges: Judges that errored or timed out
        meta_judge_result: Meta-judge verdict, when it ran and succeeded
        final_scores: Authoritative axis scores
        confidence: Agreement confidence
        summary_ja: Final localized summary
        contradictions: Axes on which judges disagreed beyond tolerance
        skipped_meta_judge: True when the judges agreed (or the meta-judge
            is disabled) and the weighted mean was used
        meta_judge_failed: True when the meta-judge errored and the weighted
            mean was used instead
    """

    article_id: uuid.UUID
    judge_evaluations: list[JudgeEvaluation] = Field(default_factory=list)
    failed_judges: list[str] = Field(default_factory=list)
    meta_judge_result: MetaJudgeResult | None = None
    final_scores: dict[QualityAxis, float]
    confidence: float = 0.0
    summary_ja: str = ""
    contradictions: list[ContradictionDetail] = Field(default_factory=list)
    skipped_meta_judge: bool = False
    meta_judge_failed: bool = False

    @property
    def final_total(self) -> float:
        return clamp(sum(self.final_scores.values()), 0, TOTAL_MAX)

    @property
    def usage(self) -> TokenUsage:
        usage = TokenUsage()
        for evaluation in self.judge_evaluations:
            usage.add(evaluation.input_tokens, evaluation.output_tokens)
        if self.meta_judge_result is not None:
            usage.add(self.meta_judge_result.input_tokens, self.meta_judge_result.output_tokens)
        return usage

    def to_quality(self) -> ArticleQuality:
        return ArticleQuality(
            article_id=self.article_id,
            scores=dict(self.final_scores),
            total=self.final_total,
            summary_ja=self.summary_ja,
            confidence=self.confidence,
            skipped_meta_judge=self.skipped_meta_judge,
        )


__all__ = [
    "QualityAxis",
    "AXES",
    "AXIS_MAX",
    "TOTAL_MAX",
    "RELEVANCE_MAX",
    "clamp",
    "TokenUsage",
    "ArticleRelevance",
    "RelevanceBatchResult",
    "ArticleQuality",
    "QualityBatchResult",
    "JudgeEvaluation",
    "ContradictionDetail",
    "MetaJudgeResult",
    "EnsembleEvaluationResult",
]
