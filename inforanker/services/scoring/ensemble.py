"""Stage 2 ensemble evaluation.

Every enabled judge evaluates an article concurrently (bounded by a
semaphore, each call under its own timeout). Once all judges have returned,
a consensus check decides whether the weighted mean is final or a
meta-judge consolidates the disagreeing verdicts.

Cancelling the caller cancels the task group, which aborts outstanding
judge calls; the meta-judge is then never reached.
"""

import asyncio
import json
import time
from collections.abc import Sequence
from typing import Any

from inforanker.config.ensemble import EnsembleConfig, JudgeConfig
from inforanker.core.exceptions import CollectionError, CollectionFailure, LLMError
from inforanker.core.logging import get_logger
from inforanker.infrastructure.llm import LLMClient, LLMConfig
from inforanker.models.article import Article
from inforanker.prompts.manager import PromptManager, PromptType
from inforanker.services.scoring.consensus import (
    check_consensus,
    consensus_confidence,
    detect_contradictions,
    merge_contradictions,
    weighted_mean_scores,
)
from inforanker.services.scoring.models import (
    AXES,
    AXIS_MAX,
    ContradictionDetail,
    EnsembleEvaluationResult,
    JudgeEvaluation,
    MetaJudgeResult,
    QualityAxis,
    QualityBatchResult,
    TokenUsage,
    clamp,
)
from inforanker.services.scoring.prompting import (
    keywords_label,
    parse_axis_reasons,
    parse_axis_scores,
    parse_number,
    source_name_of,
    truncate,
)

logger = get_logger(__name__)


class JudgeFailure(Exception):
    """A single judge errored, timed out or answered unusably."""

    def __init__(self, judge_id: str, reason: str):
        self.judge_id = judge_id
        self.reason = reason
        super().__init__(f"{judge_id}: {reason}")


class EnsembleEvaluator:
    """Multi-judge evaluation with consensus check and meta-judge.

    Example:
        >>> evaluator = EnsembleEvaluator(llm_client, prompt_manager, ensemble_config)
        >>> result = await evaluator.evaluate_article(article, ["quantum computing"])
        >>> result.skipped_meta_judge
        True
    """

    def __init__(
        self,
        llm_client: LLMClient,
        prompt_manager: PromptManager,
        config: EnsembleConfig,
        content_chars: int = 1500,
    ):
        """Initialize ensemble evaluator.

        Args:
            llm_client: LLM client
            prompt_manager: Prompt manager
            config: Judge lineup and consensus settings
            content_chars: Content excerpt length sent to judges
        """
        self.llm_client = llm_client
        self.prompt_manager = prompt_manager
        self.config = config
        self.content_chars = content_chars

    async def evaluate(
        self,
        articles: Sequence[Article],
        search_terms: Sequence[str],
    ) -> QualityBatchResult:
        """Evaluate articles one after another.

        Args:
            articles: Relevant articles
            search_terms: Keyword term and aliases

        Returns:
            Aggregated quality results with per-judge usage and durations

        Raises:
            CollectionError: Critical, when every judge fails on an article
        """
        result = QualityBatchResult()
        for article in articles:
            outcome = await self.evaluate_article(article, search_terms)

            result.evaluations.append(outcome.to_quality())
            result.usage.merge(outcome.usage)
            for evaluation in outcome.judge_evaluations:
                result.record_judge(
                    evaluation.judge_id,
                    TokenUsage(
                        input_tokens=evaluation.input_tokens,
                        output_tokens=evaluation.output_tokens,
                        api_calls=1,
                    ),
                    evaluation.duration_seconds,
                )
            if outcome.meta_judge_result is not None:
                result.meta_judge_calls += 1
            for judge_id in outcome.failed_judges:
                result.warnings.append(
                    CollectionFailure.warning(
                        f"Judge {judge_id} failed",
                        source_name=source_name_of(article),
                        article_url=article.url,
                        article_title=article.title,
                    )
                )
            if outcome.meta_judge_failed:
                result.warnings.append(
                    CollectionFailure.warning(
                        "Meta-judge failed, weighted mean used",
                        source_name=source_name_of(article),
                        article_url=article.url,
                        article_title=article.title,
                    )
                )

        logger.info(
            "Quality evaluation complete",
            mode="ensemble",
            total=len(articles),
            meta_judge_calls=result.meta_judge_calls,
            api_calls=result.usage.api_calls,
        )
        return result

    async def evaluate_article(
        self,
        article: Article,
        search_terms: Sequence[str],
    ) -> EnsembleEvaluationResult:
        """Run every judge on one article and consolidate.

        Args:
            article: Relevant article
            search_terms: Keyword term and aliases

        Returns:
            Ensemble outcome

        Raises:
            CollectionError: Critical, when no judge produced an evaluation
        """
        judges = self.config.active_judges
        semaphore = asyncio.Semaphore(self.config.max_parallel_judges)

        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(self._run_judge(judge, article, search_terms, semaphore))
                for judge in judges
            ]

        evaluations: list[JudgeEvaluation] = []
        failed: list[str] = []
        for task in tasks:
            outcome = task.result()
            if isinstance(outcome, JudgeFailure):
                failed.append(outcome.judge_id)
            else:
                evaluations.append(outcome)

        if not evaluations:
            raise CollectionError(
                CollectionFailure.critical(
                    f"All {len(judges)} judges failed for '{truncate(article.title, 60)}'",
                    source_name=source_name_of(article),
                )
            )

        tolerance = self.config.consensus_tolerance
        agreed = check_consensus(evaluations, tolerance)
        detected = detect_contradictions(evaluations, tolerance)
        meta_enabled = self.config.meta_judge.enabled

        if (agreed and self.config.skip_meta_judge_on_consensus) or not meta_enabled:
            logger.debug(
                "Meta-judge skipped",
                article_id=str(article.id),
                consensus=agreed,
                judges=len(evaluations),
            )
            return self._weighted_result(article, evaluations, failed, detected, skipped=True)

        try:
            meta = await self._run_meta_judge(article, search_terms, evaluations, detected)
        except LLMError as e:
            logger.warning("Meta-judge failed, using weighted mean", error=str(e))
            result = self._weighted_result(article, evaluations, failed, detected, skipped=False)
            result.meta_judge_failed = True
            return result

        return EnsembleEvaluationResult(
            article_id=article.id,
            judge_evaluations=evaluations,
            failed_judges=failed,
            meta_judge_result=meta,
            final_scores=dict(meta.scores),
            confidence=meta.confidence,
            summary_ja=meta.summary_ja or _best_summary(evaluations),
            contradictions=merge_contradictions(detected, meta.contradictions),
            skipped_meta_judge=False,
        )

    def _weighted_result(
        self,
        article: Article,
        evaluations: list[JudgeEvaluation],
        failed: list[str],
        detected: list[ContradictionDetail],
        skipped: bool,
    ) -> EnsembleEvaluationResult:
        return EnsembleEvaluationResult(
            article_id=article.id,
            judge_evaluations=evaluations,
            failed_judges=failed,
            final_scores=weighted_mean_scores(evaluations),
            confidence=consensus_confidence(evaluations),
            summary_ja=_best_summary(evaluations),
            contradictions=detected,
            skipped_meta_judge=skipped,
        )

    async def _run_judge(
        self,
        judge: JudgeConfig,
        article: Article,
        search_terms: Sequence[str],
        semaphore: asyncio.Semaphore,
    ) -> JudgeEvaluation | JudgeFailure:
        """Call one judge. Errors and timeouts become a JudgeFailure value."""
        messages = self.prompt_manager.render_messages(
            PromptType.JUDGE_EVALUATION,
            keywords=keywords_label(search_terms),
            specialty=judge.specialty,
            title=article.title,
            source_name=source_name_of(article),
            native_score=article.native_score,
            summary=truncate(article.summary, 500),
            content=truncate(article.content, self.content_chars),
        )
        timeout = self.config.judge_timeout_seconds
        llm_config = LLMConfig(
            model=judge.model,
            max_tokens=judge.max_tokens,
            temperature=judge.temperature,
            timeout=max(1, round(timeout)),
        )

        async with semaphore:
            started = time.monotonic()
            try:
                async with asyncio.timeout(timeout):
                    response = await self.llm_client.complete_json(llm_config, messages)
            except TimeoutError:
                logger.warning("Judge timed out", judge_id=judge.judge_id, timeout=timeout)
                return JudgeFailure(judge.judge_id, "timeout")
            except LLMError as e:
                logger.warning("Judge failed", judge_id=judge.judge_id, error=str(e))
                return JudgeFailure(judge.judge_id, str(e))
            duration = time.monotonic() - started

        scores = parse_axis_scores(response.data)
        if scores is None:
            logger.warning("Judge returned incomplete scores", judge_id=judge.judge_id)
            return JudgeFailure(judge.judge_id, "incomplete scores")

        return JudgeEvaluation(
            judge_id=judge.judge_id,
            display_name=judge.label,
            weight=judge.weight,
            scores=scores,
            reasons=parse_axis_reasons(response.data),
            summary_ja=str(response.data.get("summary_ja") or ""),
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            duration_seconds=duration,
        )

    async def _run_meta_judge(
        self,
        article: Article,
        search_terms: Sequence[str],
        evaluations: list[JudgeEvaluation],
        detected: list[ContradictionDetail],
    ) -> MetaJudgeResult:
        """Ask the meta-judge for final scores.

        Raises:
            LLMError: If the call fails or the answer lacks axis scores
        """
        meta_config = self.config.meta_judge
        messages = self.prompt_manager.render_messages(
            PromptType.META_JUDGE,
            keywords=keywords_label(search_terms),
            title=article.title,
            source_name=source_name_of(article),
            summary=truncate(article.summary, 500),
            evaluations_json=json.dumps(
                [_judge_payload(e) for e in evaluations], ensure_ascii=False
            ),
            disagreements_json=json.dumps(
                [c.model_dump(mode="json") for c in detected], ensure_ascii=False
            ),
            tolerance=self.config.consensus_tolerance,
        )
        llm_config = LLMConfig(
            model=meta_config.model,
            max_tokens=meta_config.max_tokens,
            temperature=meta_config.temperature,
            timeout=max(1, round(self.config.judge_timeout_seconds)),
        )

        started = time.monotonic()
        response = await self.llm_client.complete_json(llm_config, messages)
        duration = time.monotonic() - started

        scores = parse_axis_scores(response.data)
        if scores is None:
            raise LLMError("Meta-judge answer lacks axis scores", model=meta_config.model)

        confidence = parse_number(response.data.get("confidence"))
        return MetaJudgeResult(
            scores=scores,
            confidence=clamp(confidence if confidence is not None else 0.0, 0, 1),
            rationale=str(response.data.get("rationale") or ""),
            summary_ja=str(response.data.get("summary_ja") or ""),
            contradictions=_parse_contradictions(response.data.get("contradictions")),
            input_tokens=response.input_tokens,
            output_tokens=response.output_tokens,
            duration_seconds=duration,
        )


def _judge_payload(evaluation: JudgeEvaluation) -> dict[str, Any]:
    payload: dict[str, Any] = {"judge_id": evaluation.judge_id, "weight": evaluation.weight}
    for axis in AXES:
        payload[axis.value] = evaluation.scores[axis]
        payload[f"{axis.value}_reason"] = evaluation.reasons.get(axis, "")
    return payload


def _best_summary(evaluations: Sequence[JudgeEvaluation]) -> str:
    """Summary of the highest-weight judge that wrote one."""
    for evaluation in sorted(evaluations, key=lambda e: e.weight, reverse=True):
        if evaluation.summary_ja:
            return evaluation.summary_ja
    return ""


def _parse_contradictions(raw: Any) -> list[ContradictionDetail]:
    """Read the meta-judge's contradiction list, dropping malformed entries."""
    if not isinstance(raw, list):
        return []

    contradictions = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        try:
            axis = QualityAxis(str(entry.get("axis", "")).lower())
        except ValueError:
            continue
        score_a = parse_number(entry.get("score_a"))
        score_b = parse_number(entry.get("score_b"))
        if score_a is None or score_b is None:
            continue
        score_a = clamp(score_a, 0, AXIS_MAX)
        score_b = clamp(score_b, 0, AXIS_MAX)
        contradictions.append(
            ContradictionDetail(
                axis=axis,
                judge_a=str(entry.get("judge_a") or ""),
                score_a=score_a,
                judge_b=str(entry.get("judge_b") or ""),
                score_b=score_b,
                difference=abs(score_a - score_b),
                resolution=str(entry.get("resolution") or ""),
            )
        )
    return contradictions


__all__ = ["EnsembleEvaluator", "JudgeFailure"]
