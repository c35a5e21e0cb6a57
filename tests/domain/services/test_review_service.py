"""Tests for the human review workflow."""

import pytest

from claimwatch.domain.exceptions import InvalidRequestError, InvalidStatusTransitionError, NotFoundError
from claimwatch.domain.models.analysis import Analysis, Verdict
from claimwatch.domain.models.audit_log import AuditAction
from claimwatch.domain.models.claim import Claim, ClaimStatus
from claimwatch.domain.models.cluster import Cluster
from claimwatch.domain.ports.event_publisher import REVIEW_TOPIC
from claimwatch.domain.services.review_service import ReviewService


@pytest.fixture
def review(store, event_bus) -> ReviewService:
    return ReviewService(store.claims, store.clusters, store.analyses, store.audit_log, events=event_bus)


@pytest.mark.asyncio
async def test_escalate_claim(store, event_bus, review):
    claim = await store.claims.add(Claim(text="claim", status=ClaimStatus.ANALYZED))
    queue = event_bus.subscribe(REVIEW_TOPIC)

    result = await review.escalate(claim_id=claim.id, reason="viral", actor_id="mod")

    assert result == {"message": "Claim escalated", "claimId": claim.id}
    assert (await store.claims.get(claim.id)).status == ClaimStatus.ESCALATED
    entry = (await store.audit_log.list_for_target(claim.id))[0]
    assert (entry.action, entry.actor_id, entry.metadata["reason"]) == (AuditAction.ESCALATE, "mod", "viral")
    assert queue.get_nowait()["payload"] == {"event": "reviewRequested", "type": "claim", "id": claim.id, "reason": "viral"}


@pytest.mark.asyncio
async def test_escalate_cluster_fans_out(store, review):
    claims = [await store.claims.add(Claim(text=f"c{i}", status=ClaimStatus.ANALYZED)) for i in range(3)]
    cluster = await store.clusters.add(Cluster(title="t", claim_ids=[c.id for c in claims]))

    result = await review.escalate(cluster_id=cluster.id, reason="coordinated")

    assert result == {"message": "Cluster escalated", "clusterId": cluster.id, "claimsEscalated": 3}
    for claim in claims:
        assert (await store.claims.get(claim.id)).status == ClaimStatus.ESCALATED
    audit = await store.audit_log.list_for_target(cluster.id)
    assert audit[0].metadata["claimsEscalated"] == 3


@pytest.mark.asyncio
async def test_escalate_requires_a_target(review):
    with pytest.raises(InvalidRequestError):
        await review.escalate(reason="nothing")
    with pytest.raises(NotFoundError):
        await review.escalate(claim_id="missing")
    with pytest.raises(NotFoundError):
        await review.escalate(cluster_id="missing")


@pytest.mark.asyncio
async def test_resolve_overwrites_only_the_verdict(store, review):
    claim = await store.claims.add(Claim(text="claim", status=ClaimStatus.ESCALATED))
    await store.analyses.replace_for_claim(
        Analysis(claim_id=claim.id, verdict=Verdict.UNVERIFIED, confidence=0.4, rationale="unclear")
    )

    result = await review.resolve(claim.id, Verdict.FALSE, notes="checked with source", actor_id="mod")

    assert result == {"message": "Escalation resolved", "claimId": claim.id}
    assert (await store.claims.get(claim.id)).status == ClaimStatus.ANALYZED
    analysis = await store.analyses.get_for_claim(claim.id)
    assert analysis.verdict == Verdict.FALSE
    assert analysis.confidence == 0.4
    assert analysis.rationale == "unclear"
    entry = (await store.audit_log.list_for_target(claim.id))[-1]
    assert entry.action == AuditAction.RESOLVE
    assert entry.metadata == {"verdict": "false", "notes": "checked with source"}


@pytest.mark.asyncio
async def test_resolve_new_claim_is_rejected(store, review):
    claim = await store.claims.add(Claim(text="claim"))
    with pytest.raises(InvalidStatusTransitionError):
        await review.resolve(claim.id, Verdict.TRUE)
