"""Final score calculation.

Combines a source's normalized popularity metric with the LLM quality
score, weighted by preset and multiplied by the source's authority.
No I/O.
"""

import math

from inforanker.config.scoring import ScoringConfig
from inforanker.core.logging import get_logger
from inforanker.models.article import Article
from inforanker.models.source import Source

logger = get_logger(__name__)

SCORE_MIN = 0.0
SCORE_MAX = 100.0


class ScoreCalculator:
    """Hybrid final score calculator.

    Example:
        >>> calculator = ScoreCalculator()
        >>> calculator.compute_final_score(50, 80, 0.8)
        56.8
    """

    def __init__(self, config: ScoringConfig | None = None):
        self.config = config or ScoringConfig()

    def normalize_native_score(self, raw_score: int | float | None, source_name: str) -> float:
        """Map a raw popularity metric onto 0-100.

        Scores are log-scaled against the source's expected maximum, so a
        post with the maximum maps to 100 and anything above is capped.

        Args:
            raw_score: Points, upvotes, likes or bookmarks
            source_name: Source display name selecting the curve

        Returns:
            Normalized score
        """
        if raw_score is None or raw_score <= 0:
            return 0.0
        max_score = self.config.native.max_for(source_name)
        normalized = math.log10(raw_score + 1) / math.log10(max_score + 1) * 100
        return min(SCORE_MAX, normalized)

    def compute_final_score(
        self,
        normalized_native: float,
        llm_score: float,
        authority_weight: float,
    ) -> float:
        """Weighted hybrid of native and LLM scores times source authority.

        The result is not clamped.

        Raises:
            ValueError: If the result is outside 0-100
        """
        weights = self.config.weights
        score = (normalized_native * weights.native + llm_score * weights.llm) * authority_weight
        return self.validate_score_bounds(round(score, 4))

    def validate_score_bounds(self, score: float) -> float:
        if not SCORE_MIN <= score <= SCORE_MAX:
            raise ValueError(f"Final score {score} outside [{SCORE_MIN}, {SCORE_MAX}]")
        return score

    def score_article(self, article: Article, source: Source) -> float:
        """Compute and set an article's final score.

        Articles from sources without a popularity metric, or without a
        value for it, are scored on the LLM score alone.

        Args:
            article: Article with an LLM score
            source: Owning source

        Returns:
            Final score

        Raises:
            ValueError: If the article has no LLM score or the score is out of range
        """
        if article.llm_score is None:
            raise ValueError(f"Article {article.id} has no LLM score")

        if source.has_native_score and article.native_score is not None:
            normalized = self.normalize_native_score(article.native_score, source.name)
            score = self.compute_final_score(normalized, article.llm_score, source.authority_weight)
        else:
            score = self.validate_score_bounds(
                round(article.llm_score * source.authority_weight, 4)
            )

        article.final_score = score
        logger.debug(
            "Final score computed",
            article_id=str(article.id),
            source=source.name,
            final_score=score,
        )
        return score


__all__ = ["ScoreCalculator", "SCORE_MIN", "SCORE_MAX"]
