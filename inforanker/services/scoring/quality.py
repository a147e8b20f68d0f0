"""Stage 2 single-judge quality evaluation.

One higher-capability model scores small batches of relevant articles on
five axes and writes a Japanese summary for each.
"""

import uuid
from collections.abc import Sequence

from inforanker.config.scoring import QualityConfig
from inforanker.core.exceptions import CollectionError, CollectionFailure, LLMError
from inforanker.core.logging import get_logger
from inforanker.infrastructure.llm import LLMClient, LLMConfig
from inforanker.models.article import Article
from inforanker.prompts.manager import PromptManager, PromptType
from inforanker.services.scoring.models import (
    TOTAL_MAX,
    ArticleQuality,
    QualityBatchResult,
    TokenUsage,
    clamp,
)
from inforanker.services.scoring.prompting import (
    articles_json,
    chunked,
    evaluations_by_position,
    keywords_label,
    parse_axis_scores,
    source_name_of,
)

logger = get_logger(__name__)


class SingleJudgeEvaluator:
    """Batch quality evaluation with a single model."""

    def __init__(
        self,
        llm_client: LLMClient,
        prompt_manager: PromptManager,
        model: str,
        config: QualityConfig | None = None,
        timeout: int = 60,
    ):
        """Initialize evaluator.

        Args:
            llm_client: LLM client
            prompt_manager: Prompt manager
            model: Model used when the template names none
            config: Quality configuration
            timeout: LLM call timeout in seconds
        """
        self.llm_client = llm_client
        self.prompt_manager = prompt_manager
        self.model = model
        self.config = config or QualityConfig()
        self.timeout = timeout

    async def evaluate(
        self,
        articles: Sequence[Article],
        search_terms: Sequence[str],
    ) -> QualityBatchResult:
        """Evaluate articles batch by batch.

        A failed batch is retried once article by article. Articles the model
        leaves out of its answer are reported as warnings.

        Args:
            articles: Relevant articles
            search_terms: Keyword term and aliases

        Returns:
            Quality scores, usage and warnings

        Raises:
            CollectionError: Critical, when a retried call still fails
        """
        result = QualityBatchResult()

        for batch in chunked(articles, self.config.batch_size):
            try:
                scored = await self._call(batch, search_terms, result.usage)
            except LLMError as e:
                logger.warning(
                    "Quality batch failed, retrying per article",
                    batch_size=len(batch),
                    error=str(e),
                )
                scored = {}
                for article in batch:
                    try:
                        scored.update(await self._call([article], search_terms, result.usage))
                    except LLMError as retry_error:
                        raise CollectionError(
                            CollectionFailure.critical(
                                f"Quality evaluation failed after retry: {retry_error}",
                                source_name=source_name_of(article),
                            )
                        ) from retry_error

            for article in batch:
                quality = scored.get(article.id)
                if quality is None:
                    result.unevaluated_ids.append(article.id)
                    result.warnings.append(
                        CollectionFailure.warning(
                            "No quality evaluation returned",
                            source_name=source_name_of(article),
                            article_url=article.url,
                            article_title=article.title,
                        )
                    )
                else:
                    result.evaluations.append(quality)

        logger.info(
            "Quality evaluation complete",
            mode="single",
            total=len(articles),
            evaluated=len(result.evaluations),
            api_calls=result.usage.api_calls,
        )
        return result

    async def _call(
        self,
        batch: list[Article],
        search_terms: Sequence[str],
        usage: TokenUsage,
    ) -> dict[uuid.UUID, ArticleQuality]:
        settings = self.prompt_manager.get_llm_settings(PromptType.QUALITY_EVALUATION)
        messages = self.prompt_manager.render_messages(
            PromptType.QUALITY_EVALUATION,
            keywords=keywords_label(search_terms),
            articles_json=articles_json(
                batch,
                summary_chars=500,
                content_chars=self.config.content_chars,
                include_native_score=True,
            ),
        )
        llm_config = LLMConfig(
            model=settings.model or self.model,
            max_tokens=self.config.max_tokens,
            temperature=settings.temperature,
            timeout=self.timeout,
        )

        response = await self.llm_client.complete_json(llm_config, messages)
        usage.add(response.input_tokens, response.output_tokens)

        scored: dict[uuid.UUID, ArticleQuality] = {}
        for position, entry in evaluations_by_position(response.data, len(batch)).items():
            scores = parse_axis_scores(entry)
            if scores is None:
                continue
            article = batch[position]
            scored[article.id] = ArticleQuality(
                article_id=article.id,
                scores=scores,
                total=clamp(sum(scores.values()), 0, TOTAL_MAX),
                summary_ja=str(entry.get("summary_ja") or ""),
            )
        return scored


__all__ = ["SingleJudgeEvaluator"]
