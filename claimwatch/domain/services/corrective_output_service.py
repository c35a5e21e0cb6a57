"""Corrective messages for analyzed claims."""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..exceptions import AIProviderError, InvalidRequestError, NotFoundError
from ..models.audit_log import AuditAction, AuditLog, TargetType
from ..ports.ai_provider import AIProvider, OutputType, VerdictResult
from ..ports.repositories import (
    AnalysisRepository,
    AuditLogRepository,
    ClaimRepository,
    ClusterRepository,
)

logger = logging.getLogger(__name__)

ALL_OUTPUT_TYPES: List[OutputType] = list(OutputType)


def stub_output(verdict: VerdictResult, output_type: OutputType) -> str:
    """Template message used when no AI provider is configured."""
    base = f"Fact Check: This claim was marked as {verdict.verdict.value}.\n{verdict.rationale}"
    if output_type == OutputType.WHATSAPP:
        return f"✓ {base}\n\nℹ️ Verify sources before sharing."
    if output_type == OutputType.SMS:
        return f"FC: Claim marked {verdict.verdict.value}. Check sources."
    if output_type == OutputType.SOCIAL:
        return f"🔍 Fact-check: {verdict.verdict.value} #FactCheck"
    return base


class CorrectiveOutputService:
    """Generates one message per requested format, failing per format."""

    def __init__(
        self,
        claims: ClaimRepository,
        clusters: ClusterRepository,
        analyses: AnalysisRepository,
        audit_log: AuditLogRepository,
        ai_provider: Optional[AIProvider] = None,
    ):
        self._claims = claims
        self._clusters = clusters
        self._analyses = analyses
        self._audit = audit_log
        self._ai = ai_provider

    async def generate(
        self,
        claim_id: Optional[str] = None,
        cluster_id: Optional[str] = None,
        output_types: Optional[Sequence[OutputType]] = None,
        actor_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Generate corrective messages for a claim or a cluster.

        A format that fails yields ``None`` in ``outputs`` and an entry in
        ``errors``; the other formats are unaffected.

        Args:
            claim_id: Analyzed claim
            cluster_id: Cluster whose first claim is used when no claim is given
            output_types: Formats to generate; all four by default
            actor_id: Requesting user, recorded in the audit log

        Returns:
            ``{claimId, verdict, outputs, errors}``

        Raises:
            InvalidRequestError: If neither id is given
            NotFoundError: If the claim, cluster or analysis does not exist
        """
        if not claim_id and not cluster_id:
            raise InvalidRequestError("claimId or clusterId required")

        if not claim_id:
            cluster = await self._clusters.get(cluster_id)
            if cluster is None:
                raise NotFoundError("Cluster", cluster_id)
            if not cluster.claim_ids:
                raise NotFoundError("Claim")
            claim_id = cluster.claim_ids[0]

        claim = await self._claims.get(claim_id)
        if claim is None:
            raise NotFoundError("Claim", claim_id)
        analysis = await self._analyses.get_for_claim(claim_id)
        if analysis is None:
            raise NotFoundError("Analysis", claim_id)

        verdict = VerdictResult(
            verdict=analysis.verdict,
            confidence=analysis.confidence or 0.5,
            rationale=analysis.rationale or "Unable to determine",
            key_findings=analysis.key_findings,
        )

        output_types = list(output_types or ALL_OUTPUT_TYPES)
        outputs: Dict[str, Optional[str]] = {}
        errors: List[Dict[str, str]] = []

        for output_type in output_types:
            if self._ai is None:
                outputs[output_type.value] = stub_output(verdict, output_type)
                continue
            try:
                text = await self._ai.generate_corrective_output(claim.text, verdict, output_type)
                outputs[output_type.value] = text
                logger.info(f"✅ {output_type.value} output generated for claim {claim_id} ({len(text)} chars)")
            except AIProviderError as e:
                logger.warning(f"⚠️ {output_type.value} output failed for claim {claim_id}: {e}")
                outputs[output_type.value] = None
                errors.append({"type": output_type.value, "error": str(e)})

        await self._audit.append(
            AuditLog(
                actor_id=actor_id,
                action=AuditAction.PUBLISH,
                target_type=TargetType.CLAIM,
                target_id=claim_id,
                metadata={"outputTypes": [t.value for t in output_types], "failed": len(errors)},
            )
        )

        return {
            "success": True,
            "claimId": claim_id,
            "verdict": analysis.verdict.value,
            "outputs": outputs,
            "errors": errors or None,
        }
