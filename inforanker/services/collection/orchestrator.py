"""Collection orchestrator.

Runs one keyword's collection: sources are processed one after another,
each through fetch, deduplication, relevance filter, quality evaluation
and final scoring. Every step emits progress events.

Failure policy by severity:
- warning: recorded, the article is skipped
- error: the source is abandoned, the next source runs
- critical: the job fails and no further source runs

Already persisted articles are kept when a job fails.
"""

import uuid
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

import httpx
import structlog
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inforanker.config.pipeline import PipelineConfig
from inforanker.core.exceptions import (
    CollectionError,
    CollectionFailure,
    EscalationAction,
    RecordNotFoundError,
    decide_escalation,
)
from inforanker.core.logging import get_logger
from inforanker.core.state_machine import StateMachine, create_collection_state_machine
from inforanker.infrastructure.llm import LLMClient
from inforanker.models.article import Article
from inforanker.models.collection import (
    ArticlePreview,
    CollectionJob,
    CollectionPhase,
    SourceCollectionResult,
)
from inforanker.models.keyword import Keyword
from inforanker.models.source import Source
from inforanker.services.collection.events import (
    ArticlesFetchedEvent,
    ArticlesPassedFilterEvent,
    ArticlesQualityScoredEvent,
    JobCompletedEvent,
    JobErrorEvent,
    PhaseChangedEvent,
    SourceCompletedEvent,
    TokenUsageEvent,
)
from inforanker.services.collection.progress import ProgressSink, estimate_cost
from inforanker.services.collector.base import BaseSourceAdapter, CandidateArticle
from inforanker.services.collector.deduplicator import ArticleDeduplicator
from inforanker.services.collector.repository import KeywordRepository
from inforanker.services.collector.sources.factory import SourceAdapterRegistry
from inforanker.services.scoring.calculator import ScoreCalculator
from inforanker.services.scoring.evaluator import QualityEvaluator
from inforanker.services.scoring.models import TokenUsage
from inforanker.services.scoring.relevance import RelevanceFilter

logger = get_logger(__name__)

FETCH_ATTEMPTS = 2


class CollectionOutcome(BaseModel):
    """Result of one orchestrated job.

    Attributes:
        keyword_id: Collected keyword
        phase: Terminal phase
        source_results: Per-source results in processing order
        total_collected: Newly persisted articles
        total_scored: Articles that received a final score
        usage: Token usage of every model call
        failures: Warnings and errors recorded along the way
        fatal_error: Message of the critical failure, if the job failed
    """

    keyword_id: uuid.UUID
    phase: CollectionPhase = CollectionPhase.QUEUED
    source_results: list[SourceCollectionResult] = Field(default_factory=list)
    total_collected: int = 0
    total_scored: int = 0
    usage: TokenUsage = Field(default_factory=TokenUsage)
    failures: list[CollectionFailure] = Field(default_factory=list)
    fatal_error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.phase == CollectionPhase.COMPLETED


class CollectionOrchestrator:
    """Per-keyword collection state machine.

    Example:
        >>> orchestrator = CollectionOrchestrator(session, registry, relevance, quality,
        ...                                       calculator, sink, llm_client, pipeline_config)
        >>> outcome = await orchestrator.run(job)
        >>> outcome.phase
        <CollectionPhase.COMPLETED: 'completed'>
    """

    def __init__(
        self,
        session: AsyncSession,
        registry: SourceAdapterRegistry,
        relevance_filter: RelevanceFilter,
        quality_evaluator: QualityEvaluator,
        calculator: ScoreCalculator,
        sink: ProgressSink,
        llm_client: LLMClient,
        config: PipelineConfig | None = None,
        health_check_model: str | None = None,
        input_cost_per_million: float = 0.15,
        output_cost_per_million: float = 0.60,
    ):
        """Initialize orchestrator.

        Args:
            session: Database session for this job
            registry: Source adapter registry
            relevance_filter: Stage 1 filter
            quality_evaluator: Stage 2 evaluator
            calculator: Final score calculator
            sink: Progress sink
            llm_client: LLM client, for the health check
            config: Pipeline configuration
            health_check_model: Model pinged before collection (skipped if None)
            input_cost_per_million: USD per million input tokens
            output_cost_per_million: USD per million output tokens
        """
        self.session = session
        self.registry = registry
        self.relevance_filter = relevance_filter
        self.quality_evaluator = quality_evaluator
        self.calculator = calculator
        self.sink = sink
        self.llm_client = llm_client
        self.config = config or PipelineConfig()
        self.health_check_model = health_check_model
        self.input_cost_per_million = input_cost_per_million
        self.output_cost_per_million = output_cost_per_million

        self.keywords = KeywordRepository(session)
        self.deduplicator = ArticleDeduplicator(session, self.config.dedup)

    async def run(self, job: CollectionJob) -> CollectionOutcome:
        """Collect, evaluate and score one keyword.

        Args:
            job: Collection job

        Returns:
            Outcome with terminal phase, per-source results and failures

        Raises:
            asyncio.CancelledError: If the job is cancelled
        """
        structlog.contextvars.bind_contextvars(keyword_id=str(job.keyword_id))
        try:
            return await self._run(job)
        finally:
            structlog.contextvars.unbind_contextvars("keyword_id")

    async def _run(self, job: CollectionJob) -> CollectionOutcome:
        outcome = CollectionOutcome(keyword_id=job.keyword_id)
        machine = create_collection_state_machine()

        try:
            keyword = await self.keywords.get(job.keyword_id)
            sources = await self.keywords.sources_for(keyword.id)
            await self._check_evaluation_service()
        except RecordNotFoundError as e:
            return await self._fail(job, machine, outcome, CollectionFailure.critical(str(e)))
        except CollectionError as e:
            return await self._fail(job, machine, outcome, e.failure)

        search_terms = list(keyword.search_terms())
        since = datetime.now(UTC) - timedelta(days=self.config.collection.lookback_days)
        logger.info(
            "Collection started",
            keyword=keyword.term,
            sources=[s.name for s in sources],
            search_terms=search_terms,
            debug_mode=job.debug_mode,
        )

        for index, source in enumerate(sources, start=1):
            await self._change_phase(
                job, machine, CollectionPhase.COLLECTING_SOURCE, source, index, len(sources)
            )
            try:
                result = await self._process_source(
                    job, machine, keyword, source, index, len(sources), search_terms, since, outcome
                )
            except CollectionError as e:
                action = decide_escalation(e.failure)
                if action == EscalationAction.ABORT_JOB:
                    await self._keep_partial_results()
                    return await self._fail(job, machine, outcome, e.failure)
                if action == EscalationAction.SKIP_SOURCE:
                    result = SourceCollectionResult(
                        source_name=source.name, success=False, error_message=e.failure.message
                    )
                else:
                    result = SourceCollectionResult(source_name=source.name)
                await self._record(job, outcome, e.failure)

            outcome.source_results.append(result)
            await self.sink.emit(SourceCompletedEvent(keyword_id=job.keyword_id, result=result))

        machine.transition(CollectionPhase.COMPLETED)
        outcome.phase = CollectionPhase.COMPLETED
        await self.sink.emit(
            JobCompletedEvent(
                keyword_id=job.keyword_id,
                total_collected=outcome.total_collected,
                total_scored=outcome.total_scored,
                message=(
                    f"Collected {outcome.total_collected}, scored {outcome.total_scored} "
                    f"from {len(sources)} source(s)"
                ),
            )
        )
        logger.info(
            "Collection completed",
            keyword=keyword.term,
            collected=outcome.total_collected,
            scored=outcome.total_scored,
            failures=len(outcome.failures),
            total_tokens=outcome.usage.total_tokens,
        )
        return outcome

    # ============================================
    # Per-source pipeline
    # ============================================

    async def _process_source(
        self,
        job: CollectionJob,
        machine: StateMachine[CollectionPhase],
        keyword: Keyword,
        source: Source,
        index: int,
        total: int,
        search_terms: list[str],
        since: datetime,
        outcome: CollectionOutcome,
    ) -> SourceCollectionResult:
        """Run one source through every stage.

        Raises:
            CollectionError: Error to abandon the source, critical to abort
        """
        adapter = self.registry.resolve(source)
        if adapter is None:
            raise CollectionError(
                CollectionFailure.error("No adapter handles this source", source_name=source.name)
            )

        candidates: list[CandidateArticle] = []
        for term in search_terms:
            candidates.extend(await self._fetch(adapter, source, term, since))
        if job.debug_mode:
            candidates = candidates[: job.debug_article_limit]

        try:
            articles = await self.deduplicator.filter_and_persist(keyword.id, source, candidates)
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise CollectionError(
                CollectionFailure.critical(f"Persisting articles failed: {e}", source.name)
            ) from e

        outcome.total_collected += len(articles)
        await self.sink.emit(
            ArticlesFetchedEvent(
                keyword_id=job.keyword_id,
                source_name=source.name,
                articles=[_preview(a, source) for a in articles],
            )
        )
        if not articles:
            logger.info("No new articles", source=source.name, candidates=len(candidates))
            return SourceCollectionResult(source_name=source.name)

        await self._change_phase(job, machine, CollectionPhase.SCORING_SOURCE, source, index, total)

        # Stage 1
        if source.has_server_side_filtering:
            relevance = self.relevance_filter.bypass(articles)
        else:
            relevance = await self.relevance_filter.evaluate(articles, search_terms)
        for failure in relevance.warnings:
            await self._record(job, outcome, failure)
        await self._add_usage(job, outcome, relevance.usage)

        relevant = [a for a in articles if a.is_relevant is True]
        await self.sink.emit(
            ArticlesPassedFilterEvent(
                keyword_id=job.keyword_id,
                source_name=source.name,
                evaluated_count=len(articles),
                articles=[_preview(a, source) for a in relevant],
                bypassed=relevance.bypassed,
            )
        )
        await self._commit(source)

        # Stage 2 and final score
        quality = await self.quality_evaluator.evaluate(relevant, search_terms)
        for failure in quality.warnings:
            await self._record(job, outcome, failure)
        await self._add_usage(job, outcome, quality.usage)

        scored, score_failures = self._score(source, relevant)
        for failure in score_failures:
            await self._record(job, outcome, failure)
        await self._commit(source)

        outcome.total_scored += len(scored)
        await self.sink.emit(
            ArticlesQualityScoredEvent(
                keyword_id=job.keyword_id,
                source_name=source.name,
                articles=[_preview(a, source) for a in scored],
            )
        )
        logger.info(
            "Source processed",
            source=source.name,
            persisted=len(articles),
            relevant=len(relevant),
            scored=len(scored),
            excluded=len(quality.excluded_ids),
        )
        return SourceCollectionResult(
            source_name=source.name, count=len(articles), scored_count=len(scored)
        )

    async def _fetch(
        self,
        adapter: BaseSourceAdapter,
        source: Source,
        term: str,
        since: datetime,
    ) -> list[CandidateArticle]:
        """Fetch one term, retrying once.

        Raises:
            CollectionError: Error severity when both attempts fail
        """
        for attempt in range(1, FETCH_ATTEMPTS + 1):
            try:
                return await adapter.collect(source, term, since)
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(
                    "Source fetch failed",
                    source=source.name,
                    term=term,
                    attempt=attempt,
                    error=str(e),
                )
                if attempt == FETCH_ATTEMPTS:
                    raise CollectionError(
                        CollectionFailure.error(f"Fetch failed: {e}", source_name=source.name)
                    ) from e
        return []

    def _score(
        self,
        source: Source,
        articles: Sequence[Article],
    ) -> tuple[list[Article], list[CollectionFailure]]:
        """Compute final scores of evaluated, rankable articles.

        An out-of-range score is a warning and skips the article.
        """
        scored: list[Article] = []
        failures: list[CollectionFailure] = []
        for article in articles:
            if article.llm_score is None or article.excluded_from_ranking:
                continue
            try:
                self.calculator.score_article(article, source)
            except ValueError as e:
                failures.append(
                    CollectionFailure.warning(
                        str(e),
                        source_name=source.name,
                        article_url=article.url,
                        article_title=article.title,
                    )
                )
                continue
            scored.append(article)
        return scored, failures

    # ============================================
    # Helpers
    # ============================================

    async def _check_evaluation_service(self) -> None:
        if self.health_check_model is None:
            return
        if not await self.llm_client.health_check(self.health_check_model):
            raise CollectionError(
                CollectionFailure.critical(
                    f"Evaluation service unavailable ({self.health_check_model})"
                )
            )

    async def _change_phase(
        self,
        job: CollectionJob,
        machine: StateMachine[CollectionPhase],
        phase: CollectionPhase,
        source: Source,
        index: int,
        total: int,
    ) -> None:
        machine.transition(phase)
        verb = "Collecting" if phase == CollectionPhase.COLLECTING_SOURCE else "Scoring"
        await self.sink.emit(
            PhaseChangedEvent(
                keyword_id=job.keyword_id,
                phase=phase,
                source_name=source.name,
                source_index=index,
                total_sources=total,
                message=f"{verb} {source.name} ({index}/{total})",
            )
        )

    async def _record(
        self,
        job: CollectionJob,
        outcome: CollectionOutcome,
        failure: CollectionFailure,
    ) -> None:
        """Emit a non-fatal failure."""
        outcome.failures.append(failure)
        await self.sink.emit(
            JobErrorEvent(
                keyword_id=job.keyword_id,
                severity=failure.severity,
                source_name=failure.source_name,
                message=failure.message,
                article_title=failure.article_title,
                is_fatal=False,
            )
        )

    async def _fail(
        self,
        job: CollectionJob,
        machine: StateMachine[CollectionPhase],
        outcome: CollectionOutcome,
        failure: CollectionFailure,
    ) -> CollectionOutcome:
        machine.transition(CollectionPhase.FAILED)
        outcome.phase = CollectionPhase.FAILED
        outcome.fatal_error = failure.message
        outcome.failures.append(failure)
        await self.sink.emit(
            JobErrorEvent(
                keyword_id=job.keyword_id,
                severity=failure.severity,
                source_name=failure.source_name,
                message=failure.message,
                is_fatal=True,
            )
        )
        logger.error(
            "Collection failed",
            source=failure.source_name,
            error=failure.message,
        )
        return outcome

    async def _add_usage(
        self,
        job: CollectionJob,
        outcome: CollectionOutcome,
        usage: TokenUsage,
    ) -> None:
        outcome.usage.merge(usage)
        if not usage.total_tokens:
            return
        await self.sink.emit(
            TokenUsageEvent(
                keyword_id=job.keyword_id,
                input_tokens=usage.input_tokens,
                output_tokens=usage.output_tokens,
                estimated_cost_usd=estimate_cost(
                    usage.input_tokens,
                    usage.output_tokens,
                    self.input_cost_per_million,
                    self.output_cost_per_million,
                ),
            )
        )

    async def _commit(self, source: Source) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise CollectionError(
                CollectionFailure.critical(f"Saving evaluation results failed: {e}", source.name)
            ) from e

    async def _keep_partial_results(self) -> None:
        """Commit what the failed stage already wrote; persisted articles stay."""
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.warning("Could not save partial results", error=str(e))
            await self.session.rollback()


def _preview(article: Article, source: Source) -> ArticlePreview:
    return ArticlePreview(
        title=article.title,
        url=article.url,
        source_name=source.name,
        native_score=article.native_score,
        relevance_score=article.relevance_score,
        llm_score=article.llm_score,
        final_score=article.final_score,
        summary_ja=article.summary_ja,
    )


class CollectionJobRunner:
    """Runs each job in its own database session.

    Holds the session-independent components and builds a fresh
    orchestrator per job.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        registry: SourceAdapterRegistry,
        relevance_filter: RelevanceFilter,
        quality_evaluator: QualityEvaluator,
        calculator: ScoreCalculator,
        sink: ProgressSink,
        llm_client: LLMClient,
        config: PipelineConfig | None = None,
        health_check_model: str | None = None,
        input_cost_per_million: float = 0.15,
        output_cost_per_million: float = 0.60,
    ):
        self.session_factory = session_factory
        self.registry = registry
        self.relevance_filter = relevance_filter
        self.quality_evaluator = quality_evaluator
        self.calculator = calculator
        self.sink = sink
        self.llm_client = llm_client
        self.config = config
        self.health_check_model = health_check_model
        self.input_cost_per_million = input_cost_per_million
        self.output_cost_per_million = output_cost_per_million

    async def __call__(self, job: CollectionJob) -> CollectionOutcome:
        async with self.session_factory() as session:
            orchestrator = CollectionOrchestrator(
                session,
                registry=self.registry,
                relevance_filter=self.relevance_filter,
                quality_evaluator=self.quality_evaluator,
                calculator=self.calculator,
                sink=self.sink,
                llm_client=self.llm_client,
                config=self.config,
                health_check_model=self.health_check_model,
                input_cost_per_million=self.input_cost_per_million,
                output_cost_per_million=self.output_cost_per_million,
            )
            return await orchestrator.run(job)


__all__ = ["CollectionOrchestrator", "CollectionOutcome", "CollectionJobRunner"]
