"""Stage 2 facade.

Selects single-judge or ensemble evaluation from configuration, refuses
articles that did not pass the relevance filter, and writes final quality
fields onto articles including the post-hoc relevance gate.
"""

from collections.abc import Sequence

from inforanker.config.ensemble import EnsembleConfig
from inforanker.config.scoring import QualityConfig
from inforanker.core.logging import get_logger
from inforanker.infrastructure.llm import LLMClient
from inforanker.models.article import Article
from inforanker.prompts.manager import PromptManager
from inforanker.services.scoring.ensemble import EnsembleEvaluator
from inforanker.services.scoring.models import ArticleQuality, QualityAxis, QualityBatchResult
from inforanker.services.scoring.quality import SingleJudgeEvaluator

logger = get_logger(__name__)


class QualityEvaluator:
    """Quality evaluation entry point used by the orchestrator.

    Attributes:
        config: Single-judge settings, also holding the relevance cutoff
        ensemble_config: Ensemble settings; ``enabled`` selects the mode
    """

    def __init__(
        self,
        llm_client: LLMClient,
        prompt_manager: PromptManager,
        model: str,
        config: QualityConfig | None = None,
        ensemble_config: EnsembleConfig | None = None,
        timeout: int = 60,
    ):
        """Initialize quality evaluator.

        Args:
            llm_client: LLM client
            prompt_manager: Prompt manager
            model: Heavy model for single-judge mode
            config: Quality configuration
            ensemble_config: Ensemble configuration (disabled if None)
            timeout: LLM call timeout in seconds
        """
        self.config = config or QualityConfig()
        self.ensemble_config = ensemble_config or EnsembleConfig()
        self.single = SingleJudgeEvaluator(
            llm_client, prompt_manager, model, config=self.config, timeout=timeout
        )
        self.ensemble = (
            EnsembleEvaluator(
                llm_client,
                prompt_manager,
                self.ensemble_config,
                content_chars=self.config.content_chars,
            )
            if self.ensemble_config.enabled
            else None
        )

    @property
    def mode(self) -> str:
        return "ensemble" if self.ensemble is not None else "single"

    async def evaluate(
        self,
        articles: Sequence[Article],
        search_terms: Sequence[str],
    ) -> QualityBatchResult:
        """Evaluate relevant articles and apply the results to them.

        Args:
            articles: Articles that passed the relevance filter
            search_terms: Keyword term and aliases

        Returns:
            Quality results; ``excluded_ids`` lists articles below the
            relevance cutoff

        Raises:
            ValueError: If any article has not passed the relevance filter
            CollectionError: Critical, on persistent evaluation failure
        """
        rejected = [a for a in articles if a.is_relevant is not True]
        if rejected:
            raise ValueError(
                f"{len(rejected)} article(s) have not passed the relevance filter"
            )
        if not articles:
            return QualityBatchResult()

        if self.ensemble is not None:
            result = await self.ensemble.evaluate(articles, search_terms)
        else:
            result = await self.single.evaluate(articles, search_terms)

        by_id = {a.id: a for a in articles}
        for quality in result.evaluations:
            article = by_id[quality.article_id]
            self._apply(article, quality)
            if article.excluded_from_ranking:
                result.excluded_ids.append(article.id)

        logger.info(
            "Stage 2 complete",
            mode=self.mode,
            evaluated=len(result.evaluations),
            excluded=len(result.excluded_ids),
            warnings=len(result.warnings),
        )
        return result

    def _apply(self, article: Article, quality: ArticleQuality) -> None:
        """Write final quality fields and the relevance gate decision."""
        article.ensemble_relevance_score = quality.scores[QualityAxis.RELEVANCE]
        article.technical_score = quality.scores[QualityAxis.TECHNICAL]
        article.novelty_score = quality.scores[QualityAxis.NOVELTY]
        article.impact_score = quality.scores[QualityAxis.IMPACT]
        article.quality_score = quality.scores[QualityAxis.QUALITY]
        article.llm_score = quality.total
        article.summary_ja = quality.summary_ja or None
        article.excluded_from_ranking = quality.relevance < self.config.relevance_cutoff


__all__ = ["QualityEvaluator"]
