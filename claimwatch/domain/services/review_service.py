"""Human review workflow: manual escalation and resolution."""

import logging
from typing import Any, Dict, Optional

from ..exceptions import InvalidRequestError, NotFoundError
from ..models.analysis import Verdict
from ..models.audit_log import AuditAction, AuditLog, TargetType
from ..models.claim import ClaimStatus
from ..ports.event_publisher import REVIEW_TOPIC, EventPublisher
from ..ports.repositories import (
    AnalysisRepository,
    AuditLogRepository,
    ClaimRepository,
    ClusterRepository,
)

logger = logging.getLogger(__name__)


class ReviewService:
    """Escalates claims or whole clusters and records reviewer verdicts."""

    def __init__(
        self,
        claims: ClaimRepository,
        clusters: ClusterRepository,
        analyses: AnalysisRepository,
        audit_log: AuditLogRepository,
        events: Optional[EventPublisher] = None,
    ):
        self._claims = claims
        self._clusters = clusters
        self._analyses = analyses
        self._audit = audit_log
        self._events = events

    async def escalate(
        self,
        claim_id: Optional[str] = None,
        cluster_id: Optional[str] = None,
        reason: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Mark a claim, or every claim of a cluster, for mandatory review.

        A cluster's claims are those it lists plus any claim whose
        ``cluster_id`` points at it.

        Args:
            claim_id: Claim to escalate; takes precedence over ``cluster_id``
            cluster_id: Cluster whose claims are escalated
            reason: Why review is needed
            actor_id: Reviewer, recorded in the audit log

        Returns:
            Confirmation message with the target id

        Raises:
            InvalidRequestError: If neither id is given
            NotFoundError: If the claim or cluster does not exist
        """
        if claim_id:
            return await self._escalate_claim(claim_id, reason, actor_id)
        if cluster_id:
            return await self._escalate_cluster(cluster_id, reason, actor_id)
        raise InvalidRequestError("claimId or clusterId required")

    async def _escalate_claim(self, claim_id: str, reason: Optional[str], actor_id: Optional[str]) -> Dict[str, Any]:
        await self._claims.update_status(claim_id, ClaimStatus.ESCALATED)
        await self._record(AuditAction.ESCALATE, TargetType.CLAIM, claim_id, actor_id, {"reason": reason})
        await self._notify({"type": "claim", "id": claim_id, "reason": reason})

        logger.info(f"🚨 Claim {claim_id} escalated")
        return {"message": "Claim escalated", "claimId": claim_id}

    async def _escalate_cluster(self, cluster_id: str, reason: Optional[str], actor_id: Optional[str]) -> Dict[str, Any]:
        cluster = await self._clusters.get(cluster_id)
        if cluster is None:
            raise NotFoundError("Cluster", cluster_id)

        # members listed on the cluster plus claims pointing at it through a similarity hint
        member_ids = list(dict.fromkeys(cluster.claim_ids))
        for claim in await self._claims.list_by_cluster(cluster_id):
            if claim.id not in member_ids:
                member_ids.append(claim.id)

        escalated = 0
        for claim in await self._claims.get_many(member_ids):
            await self._claims.update_status(claim.id, ClaimStatus.ESCALATED)
            escalated += 1

        await self._record(
            AuditAction.ESCALATE,
            TargetType.CLUSTER,
            cluster_id,
            actor_id,
            {"reason": reason, "claimsEscalated": escalated},
        )
        await self._notify({"type": "cluster", "id": cluster_id, "reason": reason})

        logger.info(f"🚨 Cluster {cluster_id} escalated ({escalated} claims)")
        return {"message": "Cluster escalated", "clusterId": cluster_id, "claimsEscalated": escalated}

    async def resolve(
        self,
        claim_id: str,
        verdict: Verdict,
        notes: Optional[str] = None,
        actor_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Overwrite the stored verdict and return the claim to ``analyzed``.

        Args:
            claim_id: Claim under review
            verdict: Reviewer verdict
            notes: Reviewer notes
            actor_id: Reviewer, recorded in the audit log

        Returns:
            Confirmation message with the claim id

        Raises:
            NotFoundError: If the claim does not exist
            InvalidStatusTransitionError: If the claim was never analyzed
        """
        await self._claims.update_status(claim_id, ClaimStatus.ANALYZED)
        # Only the verdict field changes; the rest of the analysis stays as generated
        updated = await self._analyses.update_verdict(claim_id, verdict)
        if updated is None:
            logger.warning(f"⚠️ Claim {claim_id} resolved without a stored analysis")

        await self._record(
            AuditAction.RESOLVE, TargetType.CLAIM, claim_id, actor_id, {"verdict": verdict.value, "notes": notes}
        )
        logger.info(f"✅ Escalation resolved for claim {claim_id}: {verdict.value}")
        return {"message": "Escalation resolved", "claimId": claim_id}

    async def _record(
        self,
        action: AuditAction,
        target_type: TargetType,
        target_id: str,
        actor_id: Optional[str],
        metadata: Dict[str, Any],
    ) -> None:
        await self._audit.append(
            AuditLog(actor_id=actor_id, action=action, target_type=target_type, target_id=target_id, metadata=metadata)
        )

    async def _notify(self, payload: Dict[str, Any]) -> None:
        if self._events is not None:
            await self._events.publish(REVIEW_TOPIC, {"event": "reviewRequested", **payload})
