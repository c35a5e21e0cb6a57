"""Document store ports for claims, analyses, clusters and audit entries."""

from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from ..models.analysis import Analysis, Verdict
from ..models.audit_log import AuditLog
from ..models.claim import Claim, ClaimStatus, SourceType
from ..models.cluster import Cluster, RiskTier, Trend


class ClaimRepository(Protocol):
    """Claim collection."""

    async def add(self, claim: Claim) -> Claim:
        ...

    async def get(self, claim_id: str) -> Optional[Claim]:
        ...

    async def save(self, claim: Claim) -> Claim:
        """Persist changes to an existing claim."""
        ...

    async def update(self, claim_id: str, changes: Dict[str, Any]) -> Claim:
        """Set only the given fields on the stored claim.

        Args:
            claim_id: Claim to change
            changes: Field names mapped to their new values

        Returns:
            The claim as stored after the change

        Raises:
            NotFoundError: If the claim does not exist
        """
        ...

    async def update_status(
        self,
        claim_id: str,
        status: ClaimStatus,
        keep: Iterable[ClaimStatus] = (),
        restore: bool = False,
    ) -> Claim:
        """Change the stored claim's status in a single step.

        Args:
            claim_id: Claim to change
            status: Target status
            keep: Current statuses that are left untouched
            restore: Put back a previously captured status without checking
                the lifecycle

        Returns:
            The claim as stored after the call

        Raises:
            NotFoundError: If the claim does not exist
            InvalidStatusTransitionError: If the lifecycle forbids the move
        """
        ...

    async def list_by_cluster(self, cluster_id: str) -> List[Claim]:
        """Claims whose ``cluster_id`` points at the cluster."""
        ...

    async def list_with_embeddings(self) -> List[Claim]:
        """All claims whose embedding is non-empty."""
        ...

    async def get_many(self, claim_ids: Iterable[str]) -> List[Claim]:
        ...

    async def search(
        self,
        query: str = "",
        source_type: Optional[SourceType] = None,
        language: Optional[str] = None,
        status: Optional[ClaimStatus] = None,
        limit: int = 20,
        skip: int = 0,
    ) -> Tuple[List[Claim], int]:
        """Filter claims newest first; returns the page and the total match count."""
        ...


class AnalysisRepository(Protocol):
    """Analysis collection; at most one document per claim."""

    async def get_for_claim(self, claim_id: str) -> Optional[Analysis]:
        ...

    async def replace_for_claim(self, analysis: Analysis) -> Analysis:
        """Atomically replace whatever analysis the claim had."""
        ...

    async def update_verdict(self, claim_id: str, verdict: Verdict) -> Optional[Analysis]:
        """Overwrite only the verdict field of a claim's analysis."""
        ...

    async def count_for_claim(self, claim_id: str) -> int:
        ...


class ClusterRepository(Protocol):
    """Cluster collection."""

    async def add(self, cluster: Cluster) -> Cluster:
        ...

    async def get(self, cluster_id: str) -> Optional[Cluster]:
        ...

    async def save(self, cluster: Cluster) -> Cluster:
        ...

    async def find_by_any_member(
        self, claim_ids: Iterable[str], exclude_ids: Iterable[str] = ()
    ) -> Optional[Cluster]:
        """First cluster sharing at least one member claim id."""
        ...

    async def search(
        self,
        risk_tier: Optional[RiskTier] = None,
        trend: Optional[Trend] = None,
        limit: int = 20,
        skip: int = 0,
    ) -> Tuple[List[Cluster], int]:
        """Filter clusters, most recently updated first."""
        ...


class AuditLogRepository(Protocol):
    """Append-only audit trail."""

    async def append(self, entry: AuditLog) -> AuditLog:
        ...

    async def list_for_target(self, target_id: str) -> List[AuditLog]:
        ...
