"""Risk scoring and verdict percentages."""

from typing import Dict

from ..models.analysis import Verdict
from ..models.cluster import RiskTier

# Novelty is not measured yet; every claim counts as half-novel.
NOVELTY_PLACEHOLDER = 0.5

RISK_WEIGHTS: Dict[str, float] = {
    "uncertainty": 0.30,
    "toxicity": 0.20,
    "spread": 0.25,
    "novelty": 0.25,
}

VERDICT_PERCENTAGES: Dict[Verdict, int] = {
    Verdict.TRUE: 90,
    Verdict.FALSE: 10,
    Verdict.MIXED: 50,
    Verdict.MISLEADING: 25,
    Verdict.OUT_OF_CONTEXT: 30,
    Verdict.SATIRE: 40,
    Verdict.UNVERIFIED: 50,
}


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def risk_score(
    confidence: float,
    toxicity: float,
    spread_velocity: float,
    novelty: float = NOVELTY_PLACEHOLDER,
) -> float:
    """Weighted risk score of a claim.

    Args:
        confidence: Verdict confidence in [0, 1]
        toxicity: Toxicity score in [0, 1]
        spread_velocity: Spread velocity in [0, 1]
        novelty: Novelty score; a fixed 0.5 until a real signal exists

    Returns:
        Score clamped to [0, 1]
    """
    score = (
        RISK_WEIGHTS["uncertainty"] * (1 - confidence)
        + RISK_WEIGHTS["toxicity"] * toxicity
        + RISK_WEIGHTS["spread"] * spread_velocity
        + RISK_WEIGHTS["novelty"] * novelty
    )
    return _clamp(score)


def risk_tier(score: float) -> RiskTier:
    """Bucket a risk score: low up to 0.33, medium up to 0.66, high above."""
    return RiskTier.from_score(score)


def verdict_percentage(verdict: Verdict) -> int:
    """Truthfulness percentage shown next to a verdict."""
    return VERDICT_PERCENTAGES.get(verdict, 50)
