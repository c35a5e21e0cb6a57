"""Tests for the escalation policy."""

import pytest

from claimwatch.domain.services.escalation_policy import should_escalate


@pytest.mark.parametrize("confidence,spread", [(0.9, 0.1), (0.5, 0.1), (0.9, 0.9)])
def test_escalation_is_monotonic_in_risk(confidence, spread):
    risks = [i / 100 for i in range(101)]
    decisions = [should_escalate(risk, confidence, spread) for risk in risks]

    # once escalation starts it never stops as risk grows
    first_true = decisions.index(True)
    assert all(decisions[first_true:])
    assert should_escalate(0.76, confidence, spread)


def test_risk_above_threshold_escalates():
    assert should_escalate(0.76, 0.95, 0.0)
    assert not should_escalate(0.75, 0.95, 0.0)


def test_uncertain_fast_spreading_claim_escalates():
    assert should_escalate(0.2, 0.5, 0.6)


@pytest.mark.parametrize("confidence,spread", [(0.6, 0.9), (0.5, 0.5), (0.9, 0.9)])
def test_low_risk_claims_stay_automatic(confidence, spread):
    assert not should_escalate(0.2, confidence, spread)
