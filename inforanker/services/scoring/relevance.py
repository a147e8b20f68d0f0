"""Stage 1 relevance filter.

Classifies freshly persisted articles against the keyword with a low-cost
model, in batches. Articles scoring at or above the preset threshold pass
to quality evaluation.
"""

import uuid
from collections.abc import Sequence

from inforanker.config.scoring import RelevanceFilterConfig
from inforanker.core.exceptions import CollectionError, CollectionFailure, LLMError
from inforanker.core.logging import get_logger
from inforanker.infrastructure.llm import LLMClient, LLMConfig
from inforanker.models.article import Article
from inforanker.prompts.manager import PromptManager, PromptType
from inforanker.services.scoring.models import (
    RELEVANCE_MAX,
    ArticleRelevance,
    RelevanceBatchResult,
    TokenUsage,
    clamp,
)
from inforanker.services.scoring.prompting import (
    articles_json,
    chunked,
    evaluations_by_position,
    keywords_label,
    parse_number,
    source_name_of,
)

logger = get_logger(__name__)


class RelevanceFilter:
    """Batch relevance classifier.

    Example:
        >>> relevance = RelevanceFilter(llm_client, prompt_manager, "openai/gpt-4o-mini")
        >>> result = await relevance.evaluate(articles, ["quantum computing"])
        >>> result.relevant_count
        5
    """

    def __init__(
        self,
        llm_client: LLMClient,
        prompt_manager: PromptManager,
        model: str,
        config: RelevanceFilterConfig | None = None,
        timeout: int = 60,
    ):
        """Initialize relevance filter.

        Args:
            llm_client: LLM client
            prompt_manager: Prompt manager
            model: Model used when the template names none
            config: Filter configuration
            timeout: LLM call timeout in seconds
        """
        self.llm_client = llm_client
        self.prompt_manager = prompt_manager
        self.model = model
        self.config = config or RelevanceFilterConfig()
        self.timeout = timeout

    @property
    def threshold(self) -> float:
        return self.config.effective_threshold

    def bypass(self, articles: Sequence[Article]) -> RelevanceBatchResult:
        """Mark every article relevant without calling the model.

        Used for sources whose search is already keyword scoped.
        """
        result = RelevanceBatchResult(bypassed=True)
        for article in articles:
            article.is_relevant = True
            article.relevance_score = None
            result.evaluations.append(ArticleRelevance(article_id=article.id, is_relevant=True))
        logger.info("Relevance filter bypassed", count=len(articles))
        return result

    async def evaluate(
        self,
        articles: Sequence[Article],
        search_terms: Sequence[str],
    ) -> RelevanceBatchResult:
        """Score articles and record the relevance decision on each.

        Args:
            articles: Articles to classify
            search_terms: Keyword term and aliases

        Returns:
            Decisions, unevaluated articles, usage and warnings

        Raises:
            CollectionError: Critical, when a batch still fails after its retry
        """
        result = RelevanceBatchResult()
        if not articles:
            return result

        for batch in chunked(articles, self.config.batch_size):
            scored = await self._evaluate_batch(batch, search_terms, result.usage)

            missing = [a for a in batch if a.id not in scored]
            if missing:
                logger.warning("Articles missing from relevance response", count=len(missing))
                try:
                    scored.update(await self._call(missing, search_terms, result.usage))
                except LLMError as e:
                    logger.warning("Retry of missing articles failed", error=str(e))

            for article in batch:
                evaluation = scored.get(article.id)
                if evaluation is None:
                    result.unevaluated_ids.append(article.id)
                    result.warnings.append(
                        CollectionFailure.warning(
                            "No relevance score returned",
                            source_name=source_name_of(article),
                            article_url=article.url,
                            article_title=article.title,
                        )
                    )
                    continue
                article.relevance_score = evaluation.relevance_score
                article.is_relevant = evaluation.is_relevant
                result.evaluations.append(evaluation)

        logger.info(
            "Relevance filter complete",
            total=len(articles),
            relevant=result.relevant_count,
            unevaluated=len(result.unevaluated_ids),
            threshold=self.threshold,
            api_calls=result.usage.api_calls,
        )
        return result

    async def _evaluate_batch(
        self,
        batch: list[Article],
        search_terms: Sequence[str],
        usage: TokenUsage,
    ) -> dict[uuid.UUID, ArticleRelevance]:
        """Evaluate one batch, retrying once in smaller batches on failure."""
        try:
            return await self._call(batch, search_terms, usage)
        except LLMError as e:
            logger.warning(
                "Relevance batch failed, retrying in smaller batches",
                batch_size=len(batch),
                error=str(e),
            )

        retry_size = min(self.config.retry_batch_size, max(1, len(batch) // 2))
        scored: dict[uuid.UUID, ArticleRelevance] = {}
        for sub_batch in chunked(batch, retry_size):
            try:
                scored.update(await self._call(sub_batch, search_terms, usage))
            except LLMError as e:
                raise CollectionError(
                    CollectionFailure.critical(
                        f"Relevance evaluation failed after retry: {e}",
                        source_name=source_name_of(sub_batch[0]),
                    )
                ) from e
        return scored

    async def _call(
        self,
        batch: list[Article],
        search_terms: Sequence[str],
        usage: TokenUsage,
    ) -> dict[uuid.UUID, ArticleRelevance]:
        """Run one model call and map its answers back to articles."""
        settings = self.prompt_manager.get_llm_settings(PromptType.RELEVANCE_FILTER)
        messages = self.prompt_manager.render_messages(
            PromptType.RELEVANCE_FILTER,
            keywords=keywords_label(search_terms),
            articles_json=articles_json(batch, self.config.summary_chars),
        )
        llm_config = LLMConfig(
            model=settings.model or self.model,
            max_tokens=self.config.max_tokens,
            temperature=settings.temperature,
            timeout=self.timeout,
        )

        response = await self.llm_client.complete_json(llm_config, messages)
        usage.add(response.input_tokens, response.output_tokens)

        scored: dict[uuid.UUID, ArticleRelevance] = {}
        for position, entry in evaluations_by_position(response.data, len(batch)).items():
            score = parse_number(entry.get("relevance"))
            if score is None:
                continue
            score = clamp(score, 0, RELEVANCE_MAX)
            article = batch[position]
            scored[article.id] = ArticleRelevance(
                article_id=article.id,
                relevance_score=score,
                is_relevant=score >= self.threshold,
                reason=str(entry.get("reason") or ""),
            )
        return scored


__all__ = ["RelevanceFilter"]
