"""Tests for the verdict fallback chain and evidence collection."""

import pytest

from claimwatch.domain.models.analysis import FactCheckHit, Reliability, Verdict
from claimwatch.domain.ports.ai_provider import ClaimAssessment, SearchHit, WebContextResult
from claimwatch.domain.services.verdict_synthesizer import (
    LLM_STAGE,
    RULE_STAGE,
    WEB_CONTEXT_STAGE,
    VerdictSynthesizer,
    default_sources,
    retrieve_candidate_evidence,
    rule_based_verdict,
    source_reliability,
)


def test_flat_earth_is_false_with_high_confidence():
    for _ in range(3):
        result = rule_based_verdict("The earth is flat and NASA is lying")
        assert result.verdict == Verdict.FALSE
        assert result.confidence >= 0.9


def test_vaccine_autism_claim_cites_retracted_study():
    result = rule_based_verdict("Vaccines cause autism in children")

    assert result.verdict == Verdict.FALSE
    assert result.confidence == 0.95
    assert "retracted" in result.rationale


@pytest.mark.parametrize(
    "text,verdict",
    [
        ("There are 60 minutes in an hour", Verdict.TRUE),
        ("There are 30 days in a month", Verdict.TRUE),
        ("There are 7 days in a week", Verdict.TRUE),
        ("There are 25 hours in a day", Verdict.FALSE),
        ("There are 10 days in a week", Verdict.FALSE),
    ],
)
def test_unit_conversion_claims(text, verdict):
    result = rule_based_verdict(text)
    assert result.verdict == verdict
    assert result.confidence == 0.9


def test_short_conspiracy_framing_is_likely_false():
    result = rule_based_verdict("They don't want you to know about this cure")
    assert result.verdict == Verdict.FALSE
    assert result.confidence == 0.6


def test_established_fact_is_true():
    assert rule_based_verdict("The earth orbits the sun").verdict == Verdict.TRUE


def test_unknown_claim_is_unverified():
    result = rule_based_verdict("The council approved a new bus timetable yesterday")
    assert result.verdict == Verdict.UNVERIFIED
    assert result.confidence == 0.5


def test_candidate_evidence_matches_keywords():
    matches = retrieve_candidate_evidence("vaccines are dangerous")
    assert matches
    assert matches[0].title == "Verified: Common vaccine claims"
    assert len(retrieve_candidate_evidence("vaccines election health research", limit=2)) == 2


def test_default_sources_are_copies():
    first = default_sources(Verdict.FALSE)
    first[0].title = "changed"
    assert default_sources(Verdict.FALSE)[0].title != "changed"
    assert default_sources(Verdict.SATIRE) == default_sources(Verdict.UNVERIFIED)


def test_source_reliability():
    assert source_reliability(default_sources(Verdict.TRUE)) == 0.85
    medium_only = [s for s in default_sources(Verdict.TRUE) if s.reliability == Reliability.MEDIUM]
    assert source_reliability(medium_only) == 0.6


@pytest.mark.asyncio
async def test_rule_stage_without_provider():
    synthesized = await VerdictSynthesizer().synthesize("The earth is flat")
    assert synthesized.stage == RULE_STAGE
    assert synthesized.result.verdict == Verdict.FALSE


@pytest.mark.asyncio
async def test_web_context_verdict_is_used_verbatim(fake_ai):
    context = WebContextResult(
        claim_analysis=ClaimAssessment(
            verdict=Verdict.MISLEADING, confidence=0.7, reasoning="Old photo", key_evidence=["Seen in 2015"]
        )
    )
    synthesized = await VerdictSynthesizer(fake_ai).synthesize("photo of the flood", context)

    assert synthesized.stage == WEB_CONTEXT_STAGE
    assert synthesized.result.verdict == Verdict.MISLEADING
    assert synthesized.result.rationale == "Old photo"
    assert synthesized.result.key_findings == ["Seen in 2015"]
    assert "generate_verdict" not in fake_ai.calls


@pytest.mark.asyncio
async def test_llm_stage_when_no_web_verdict(fake_ai):
    synthesized = await VerdictSynthesizer(fake_ai).synthesize("something", WebContextResult())
    assert synthesized.stage == LLM_STAGE
    assert synthesized.result == fake_ai.verdict


@pytest.mark.asyncio
async def test_llm_failure_falls_back_to_rules(fake_ai):
    fake_ai.failing.add("generate_verdict")
    synthesized = await VerdictSynthesizer(fake_ai).synthesize("Vaccines cause autism")
    assert synthesized.stage == RULE_STAGE
    assert synthesized.result.verdict == Verdict.FALSE


@pytest.mark.asyncio
async def test_research_failure_returns_none(fake_ai):
    assert await VerdictSynthesizer(fake_ai).research("anything") is None
    assert await VerdictSynthesizer().research("anything") is None


@pytest.mark.asyncio
async def test_evidence_prefers_web_results_and_fact_checks(fake_ai):
    context = WebContextResult(
        search_results=[SearchHit(title="Reuters", url="https://reuters.test", reliability="high", verdict="False")],
        fact_check_results=[FactCheckHit(organization="Snopes", verdict="False", summary="Debunked")],
    )
    sources = await VerdictSynthesizer(fake_ai).collect_evidence("claim", Verdict.FALSE, context)

    assert [s.title for s in sources] == ["Reuters", "Snopes: False"]
    assert sources[0].snippet == "False"
    assert sources[1].type == "fact-check"
    assert sources[1].url == "https://factcheck.org"
    assert "generate_evidence_sources" not in fake_ai.calls


@pytest.mark.asyncio
async def test_evidence_from_provider_then_defaults(fake_ai):
    synthesizer = VerdictSynthesizer(fake_ai)
    assert await synthesizer.collect_evidence("claim", Verdict.TRUE) == fake_ai.evidence

    fake_ai.failing.add("generate_evidence_sources")
    sources = await synthesizer.collect_evidence("claim", Verdict.TRUE)
    assert sources == default_sources(Verdict.TRUE)
