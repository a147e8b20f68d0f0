"""Tests for ensemble consensus analysis."""

import pytest

from inforanker.services.scoring.consensus import (
    axis_spread,
    check_consensus,
    consensus_confidence,
    detect_contradictions,
    merge_contradictions,
    weighted_mean_scores,
)
from inforanker.services.scoring.models import (
    AXES,
    ContradictionDetail,
    JudgeEvaluation,
    QualityAxis,
)


def _judge(judge_id: str, score: float = 15, weight: float = 1.0, **axes) -> JudgeEvaluation:
    scores = {axis: float(axes.get(axis.value, score)) for axis in AXES}
    return JudgeEvaluation(judge_id=judge_id, weight=weight, scores=scores)


class TestConsensus:
    """Tests for spread, consensus and confidence."""

    def test_axis_spread(self):
        """Test spread is highest minus lowest."""
        judges = [_judge("a", 10), _judge("b", 17), _judge("c", 12)]

        assert axis_spread(judges, QualityAxis.NOVELTY) == 7

    def test_single_judge_has_no_spread(self):
        """Test one judge always agrees with itself."""
        assert axis_spread([_judge("a")], QualityAxis.IMPACT) == 0.0
        assert consensus_confidence([_judge("a")]) == 1.0

    def test_tolerance_is_inclusive(self):
        """Test a difference equal to the tolerance still counts as agreement."""
        assert check_consensus([_judge("a", 10), _judge("b", 15)], tolerance=5)
        assert not check_consensus([_judge("a", 10), _judge("b", 15.5)], tolerance=5)

    def test_one_axis_breaks_consensus(self):
        """Test disagreement on a single axis is enough."""
        judges = [_judge("a", 15), _judge("b", 15, technical=4)]

        assert not check_consensus(judges, tolerance=5)

    def test_confidence_from_worst_axis(self):
        """Test confidence falls with the widest spread."""
        judges = [_judge("a", 15), _judge("b", 17, quality=11)]

        assert consensus_confidence(judges) == pytest.approx(0.8)


class TestWeightedMean:
    """Tests for weighted_mean_scores."""

    def test_weights(self):
        """Test heavier judges pull the mean."""
        means = weighted_mean_scores([_judge("a", 15, weight=1), _judge("b", 17, weight=3)])

        assert means[QualityAxis.RELEVANCE] == pytest.approx(16.5)
        assert set(means) == set(AXES)

    def test_empty(self):
        """Test no evaluation is an error."""
        with pytest.raises(ValueError):
            weighted_mean_scores([])


class TestContradictions:
    """Tests for contradiction detection and merging."""

    def test_detect_names_low_and_high_judge(self):
        """Test one entry per disagreeing axis."""
        judges = [_judge("a", 15, relevance=18), _judge("b", 15, relevance=10), _judge("c", 14)]

        contradictions = detect_contradictions(judges, tolerance=5)

        assert len(contradictions) == 1
        detail = contradictions[0]
        assert detail.axis == QualityAxis.RELEVANCE
        assert (detail.judge_a, detail.score_a) == ("b", 10)
        assert (detail.judge_b, detail.score_b) == ("a", 18)
        assert detail.difference == 8

    def test_detect_none_on_agreement(self):
        """Test agreeing judges yield nothing."""
        assert detect_contradictions([_judge("a", 12), _judge("b", 14)], tolerance=5) == []

    def test_merge_prefers_reported(self):
        """Test reported entries come first and detected ones fill the other axes."""
        judges = [_judge("a", 15, relevance=4, technical=3), _judge("b", 15)]
        detected = detect_contradictions(judges, tolerance=5)
        reported = [
            ContradictionDetail(
                axis=QualityAxis.RELEVANCE,
                judge_a="a",
                score_a=4,
                judge_b="b",
                score_b=15,
                difference=11,
                resolution="Judge a misread the topic",
            )
        ]

        merged = merge_contradictions(detected, reported)

        assert [c.axis for c in merged] == [QualityAxis.RELEVANCE, QualityAxis.TECHNICAL]
        assert merged[0].resolution == "Judge a misread the topic"
        assert merged[1].resolution == ""
