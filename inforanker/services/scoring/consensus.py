"""Consensus and contradiction analysis of ensemble judge evaluations.

All functions are pure. Scores are compared per axis on the 0-20 scale;
the largest pairwise difference on an axis is the spread between its
highest and lowest judge.
"""

from collections.abc import Sequence

from inforanker.services.scoring.models import (
    AXES,
    AXIS_MAX,
    ContradictionDetail,
    JudgeEvaluation,
    QualityAxis,
)


def axis_spread(evaluations: Sequence[JudgeEvaluation], axis: QualityAxis) -> float:
    """Largest pairwise difference of the judges on one axis."""
    if len(evaluations) < 2:
        return 0.0
    values = [e.scores[axis] for e in evaluations]
    return max(values) - min(values)


def check_consensus(evaluations: Sequence[JudgeEvaluation], tolerance: float) -> bool:
    """Whether every pair of judges is within tolerance on every axis.

    Args:
        evaluations: Successful judge evaluations
        tolerance: Maximum allowed difference per axis

    Returns:
        True if the judges agree
    """
    return all(axis_spread(evaluations, axis) <= tolerance for axis in AXES)


def weighted_mean_scores(evaluations: Sequence[JudgeEvaluation]) -> dict[QualityAxis, float]:
    """Per-axis mean of judge scores weighted by judge weight.

    Raises:
        ValueError: If there is no evaluation
    """
    if not evaluations:
        raise ValueError("weighted mean needs at least one evaluation")
    total_weight = sum(e.weight for e in evaluations)
    return {
        axis: sum(e.scores[axis] * e.weight for e in evaluations) / total_weight for axis in AXES
    }


def consensus_confidence(evaluations: Sequence[JudgeEvaluation]) -> float:
    """Confidence derived from agreement: 1.0 when all judges match exactly."""
    worst = max((axis_spread(evaluations, axis) for axis in AXES), default=0.0)
    return max(0.0, 1.0 - worst / AXIS_MAX)


def detect_contradictions(
    evaluations: Sequence[JudgeEvaluation],
    tolerance: float,
) -> list[ContradictionDetail]:
    """List the axes on which two judges differ by more than tolerance.

    One entry per axis, naming the lowest and highest scoring judges.

    Args:
        evaluations: Successful judge evaluations
        tolerance: Maximum allowed difference per axis

    Returns:
        Contradictions in axis order
    """
    contradictions = []
    for axis in AXES:
        if axis_spread(evaluations, axis) <= tolerance:
            continue
        low = min(evaluations, key=lambda e: e.scores[axis])
        high = max(evaluations, key=lambda e: e.scores[axis])
        contradictions.append(
            ContradictionDetail(
                axis=axis,
                judge_a=low.judge_id,
                score_a=low.scores[axis],
                judge_b=high.judge_id,
                score_b=high.scores[axis],
                difference=high.scores[axis] - low.scores[axis],
            )
        )
    return contradictions


def merge_contradictions(
    detected: Sequence[ContradictionDetail],
    reported: Sequence[ContradictionDetail],
) -> list[ContradictionDetail]:
    """Combine meta-judge contradictions with locally detected ones.

    Reported entries come first and keep their resolutions; a detected
    contradiction is added for every axis the meta-judge did not report.
    """
    merged = list(reported)
    reported_axes = {c.axis for c in reported}
    merged.extend(c for c in detected if c.axis not in reported_axes)
    return merged


__all__ = [
    "axis_spread",
    "check_consensus",
    "weighted_mean_scores",
    "consensus_confidence",
    "detect_contradictions",
    "merge_contradictions",
]
