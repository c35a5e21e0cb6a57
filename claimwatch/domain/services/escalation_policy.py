"""Decides when a claim needs human review."""

RISK_ESCALATION_THRESHOLD = 0.75
LOW_CONFIDENCE_THRESHOLD = 0.6
FAST_SPREAD_THRESHOLD = 0.5


def should_escalate(risk_score: float, confidence: float, spread_velocity: float) -> bool:
    """High risk, or an uncertain verdict on a claim that spreads fast."""
    if risk_score > RISK_ESCALATION_THRESHOLD:
        return True
    return confidence < LOW_CONFIDENCE_THRESHOLD and spread_velocity > FAST_SPREAD_THRESHOLD
