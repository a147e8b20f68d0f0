"""Article evaluation and scoring services.

This package implements the two-tier evaluation pipeline:
1. Relevance filter (Stage 1) classifies articles with a light model
2. Quality evaluator (Stage 2) scores relevant articles on five axes,
   with a single judge or an ensemble consolidated by a meta-judge
3. Score calculator combines native popularity and LLM score
"""

from inforanker.services.scoring.calculator import ScoreCalculator
from inforanker.services.scoring.consensus import (
    check_consensus,
    detect_contradictions,
    weighted_mean_scores,
)
from inforanker.services.scoring.ensemble import EnsembleEvaluator
from inforanker.services.scoring.evaluator import QualityEvaluator
from inforanker.services.scoring.models import (
    ArticleQuality,
    ArticleRelevance,
    ContradictionDetail,
    EnsembleEvaluationResult,
    JudgeEvaluation,
    MetaJudgeResult,
    QualityAxis,
    QualityBatchResult,
    RelevanceBatchResult,
    TokenUsage,
)
from inforanker.services.scoring.quality import SingleJudgeEvaluator
from inforanker.services.scoring.relevance import RelevanceFilter

__all__ = [
    # Stage 1
    "RelevanceFilter",
    "ArticleRelevance",
    "RelevanceBatchResult",
    # Stage 2
    "QualityEvaluator",
    "SingleJudgeEvaluator",
    "EnsembleEvaluator",
    "QualityAxis",
    "ArticleQuality",
    "QualityBatchResult",
    "JudgeEvaluation",
    "MetaJudgeResult",
    "ContradictionDetail",
    "EnsembleEvaluationResult",
    "check_consensus",
    "detect_contradictions",
    "weighted_mean_scores",
    # Scoring
    "ScoreCalculator",
    "TokenUsage",
]
