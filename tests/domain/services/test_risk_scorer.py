"""Tests for risk scoring, tiers and verdict percentages."""

import itertools

import pytest

from claimwatch.domain.models.analysis import Verdict
from claimwatch.domain.models.cluster import RiskTier
from claimwatch.domain.services.risk_scorer import (
    NOVELTY_PLACEHOLDER,
    RISK_WEIGHTS,
    risk_score,
    risk_tier,
    verdict_percentage,
)


def test_weights_sum_to_one():
    assert sum(RISK_WEIGHTS.values()) == pytest.approx(1.0)


@pytest.mark.parametrize(
    "confidence,toxicity,spread,novelty",
    list(itertools.product([0.0, 0.5, 1.0], repeat=4)),
)
def test_risk_score_stays_in_unit_interval(confidence, toxicity, spread, novelty):
    score = risk_score(confidence, toxicity, spread, novelty)
    assert 0.0 <= score <= 1.0


def test_risk_score_clamps_out_of_range_inputs():
    assert risk_score(-1.0, 2.0, 2.0, 2.0) == 1.0
    assert risk_score(2.0, -1.0, -1.0, -1.0) == 0.0


def test_risk_score_uses_novelty_placeholder_by_default():
    expected = 0.30 * 0.2 + 0.20 * 0.1 + 0.25 * 0.4 + 0.25 * NOVELTY_PLACEHOLDER
    assert risk_score(0.8, 0.1, 0.4) == pytest.approx(expected)


def test_confident_calm_claim_scores_low():
    assert risk_tier(risk_score(1.0, 0.0, 0.0)) == RiskTier.LOW


@pytest.mark.parametrize(
    "score,tier",
    [
        (0.0, RiskTier.LOW),
        (0.33, RiskTier.LOW),
        (0.331, RiskTier.MEDIUM),
        (0.66, RiskTier.MEDIUM),
        (0.661, RiskTier.HIGH),
        (1.0, RiskTier.HIGH),
    ],
)
def test_risk_tier_boundaries(score, tier):
    assert risk_tier(score) == tier


@pytest.mark.parametrize(
    "verdict,percentage",
    [
        (Verdict.TRUE, 90),
        (Verdict.FALSE, 10),
        (Verdict.MIXED, 50),
        (Verdict.MISLEADING, 25),
        (Verdict.UNVERIFIED, 50),
    ],
)
def test_verdict_percentage_table(verdict, percentage):
    assert verdict_percentage(verdict) == percentage
