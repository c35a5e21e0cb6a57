"""Tests for corrective output generation."""

import pytest

from claimwatch.domain.exceptions import InvalidRequestError, NotFoundError
from claimwatch.domain.models.analysis import Analysis, Verdict
from claimwatch.domain.models.audit_log import AuditAction
from claimwatch.domain.models.claim import Claim
from claimwatch.domain.models.cluster import Cluster
from claimwatch.domain.ports.ai_provider import OutputType, VerdictResult
from claimwatch.domain.services.corrective_output_service import CorrectiveOutputService, stub_output


async def analyzed_claim(store, verdict=Verdict.FALSE):
    claim = await store.claims.add(Claim(text="5G spreads covid"))
    await store.analyses.replace_for_claim(
        Analysis(claim_id=claim.id, verdict=verdict, confidence=0.95, rationale="Viruses do not travel on radio waves.")
    )
    return claim


def test_stub_templates():
    verdict = VerdictResult(verdict=Verdict.FALSE, confidence=0.9, rationale="Not so.")
    assert stub_output(verdict, OutputType.SMS) == "FC: Claim marked false. Check sources."
    assert stub_output(verdict, OutputType.SOCIAL) == "🔍 Fact-check: false #FactCheck"
    assert stub_output(verdict, OutputType.WHATSAPP).endswith("Verify sources before sharing.")
    assert stub_output(verdict, OutputType.EXPLAINER) == "Fact Check: This claim was marked as false.\nNot so."


@pytest.mark.asyncio
async def test_generate_without_provider_uses_templates(store):
    claim = await analyzed_claim(store)
    service = CorrectiveOutputService(store.claims, store.clusters, store.analyses, store.audit_log)

    result = await service.generate(claim_id=claim.id, actor_id="editor")

    assert result["success"] is True
    assert result["verdict"] == "false"
    assert set(result["outputs"]) == {"whatsapp", "sms", "social", "explainer"}
    assert result["errors"] is None
    entry = (await store.audit_log.list_for_target(claim.id))[0]
    assert (entry.action, entry.actor_id) == (AuditAction.PUBLISH, "editor")


@pytest.mark.asyncio
async def test_one_failing_format_does_not_fail_the_rest(store, fake_ai):
    claim = await analyzed_claim(store)
    fake_ai.failing.add("output:sms")
    service = CorrectiveOutputService(store.claims, store.clusters, store.analyses, store.audit_log, fake_ai)

    result = await service.generate(claim_id=claim.id, output_types=[OutputType.SMS, OutputType.SOCIAL])

    assert result["outputs"] == {"sms": None, "social": "social: false"}
    assert result["errors"] == [{"type": "sms", "error": "output:sms unavailable"}]


@pytest.mark.asyncio
async def test_cluster_uses_its_first_claim(store):
    claim = await analyzed_claim(store)
    cluster = await store.clusters.add(Cluster(title="5G", claim_ids=[claim.id]))
    service = CorrectiveOutputService(store.claims, store.clusters, store.analyses, store.audit_log)

    result = await service.generate(cluster_id=cluster.id, output_types=[OutputType.SMS])

    assert result["claimId"] == claim.id


@pytest.mark.asyncio
async def test_missing_targets(store):
    service = CorrectiveOutputService(store.claims, store.clusters, store.analyses, store.audit_log)
    unanalyzed = await store.claims.add(Claim(text="pending"))

    with pytest.raises(InvalidRequestError):
        await service.generate()
    with pytest.raises(NotFoundError):
        await service.generate(claim_id="missing")
    with pytest.raises(NotFoundError):
        await service.generate(cluster_id="missing")
    with pytest.raises(NotFoundError):
        await service.generate(claim_id=unanalyzed.id)
