"""In-memory document store implementing the repository ports."""

import asyncio
import logging
from typing import Any, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

from pydantic import BaseModel

from ...domain.exceptions import NotFoundError
from ...domain.models.analysis import Analysis, Verdict
from ...domain.models.audit_log import AuditLog
from ...domain.models.base import utcnow
from ...domain.models.claim import Claim, ClaimStatus, SourceType
from ...domain.models.cluster import Cluster, RiskTier, Trend

logger = logging.getLogger(__name__)

D = TypeVar("D", bound=BaseModel)


class _Collection(Generic[D]):
    """Dict-backed collection guarded by one lock.

    Documents are deep-copied in and out so callers never share mutable state
    with the store.
    """

    def __init__(self, name: str):
        self.name = name
        self._docs: Dict[str, D] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def _copy(doc: D) -> D:
        return doc.model_copy(deep=True)

    async def _insert(self, doc_id: str, doc: D) -> D:
        async with self._lock:
            self._docs[doc_id] = self._copy(doc)
        return self._copy(doc)

    async def _replace(self, doc_id: str, doc: D) -> D:
        async with self._lock:
            if doc_id not in self._docs:
                raise NotFoundError(self.name, doc_id)
            self._docs[doc_id] = self._copy(doc)
        return self._copy(doc)

    async def _get(self, doc_id: str) -> Optional[D]:
        async with self._lock:
            doc = self._docs.get(doc_id)
            return self._copy(doc) if doc is not None else None

    async def _all(self) -> List[D]:
        async with self._lock:
            return [self._copy(doc) for doc in self._docs.values()]

    async def clear(self) -> None:
        async with self._lock:
            self._docs.clear()

    def __len__(self) -> int:
        return len(self._docs)


class InMemoryClaimRepository(_Collection[Claim]):
    def __init__(self):
        super().__init__("Claim")

    async def add(self, claim: Claim) -> Claim:
        return await self._insert(claim.id, claim)

    async def get(self, claim_id: str) -> Optional[Claim]:
        return await self._get(claim_id)

    async def save(self, claim: Claim) -> Claim:
        return await self._replace(claim.id, claim)

    async def update(self, claim_id: str, changes: Dict[str, Any]) -> Claim:
        async with self._lock:
            stored = self._docs.get(claim_id)
            if stored is None:
                raise NotFoundError(self.name, claim_id)
            updated = stored.model_copy(update=changes, deep=True)
            self._docs[claim_id] = updated
            return self._copy(updated)

    async def update_status(
        self,
        claim_id: str,
        status: ClaimStatus,
        keep: Iterable[ClaimStatus] = (),
        restore: bool = False,
    ) -> Claim:
        async with self._lock:
            stored = self._docs.get(claim_id)
            if stored is None:
                raise NotFoundError(self.name, claim_id)
            if stored.status in set(keep):
                return self._copy(stored)

            updated = self._copy(stored)
            if restore:
                updated.restore_status(status)
            else:
                updated.transition_to(status)
            self._docs[claim_id] = updated
            return self._copy(updated)

    async def list_by_cluster(self, cluster_id: str) -> List[Claim]:
        return [claim for claim in await self._all() if claim.cluster_id == cluster_id]

    async def list_with_embeddings(self) -> List[Claim]:
        return [claim for claim in await self._all() if claim.has_embedding]

    async def get_many(self, claim_ids: Iterable[str]) -> List[Claim]:
        wanted = list(claim_ids)
        async with self._lock:
            return [self._copy(self._docs[cid]) for cid in wanted if cid in self._docs]

    async def search(
        self,
        query: str = "",
        source_type: Optional[SourceType] = None,
        language: Optional[str] = None,
        status: Optional[ClaimStatus] = None,
        limit: int = 20,
        skip: int = 0,
    ) -> Tuple[List[Claim], int]:
        needle = query.strip().lower()
        matches = []
        for claim in await self._all():
            if source_type is not None and claim.source_type != source_type:
                continue
            if language is not None and claim.language != language:
                continue
            if status is not None and claim.status != status:
                continue
            if needle and needle not in claim.text.lower() and needle not in (claim.canonical_claim or "").lower():
                continue
            matches.append(claim)

        matches.sort(key=lambda c: c.created_at, reverse=True)
        return matches[skip: skip + limit], len(matches)


class InMemoryAnalysisRepository(_Collection[Analysis]):
    """Analyses keyed by claim id, so each claim has at most one."""

    def __init__(self):
        super().__init__("Analysis")

    async def get_for_claim(self, claim_id: str) -> Optional[Analysis]:
        return await self._get(claim_id)

    async def replace_for_claim(self, analysis: Analysis) -> Analysis:
        # single locked write; readers see the old or the new document, never neither
        return await self._insert(analysis.claim_id, analysis)

    async def update_verdict(self, claim_id: str, verdict: Verdict) -> Optional[Analysis]:
        async with self._lock:
            current = self._docs.get(claim_id)
            if current is None:
                return None
            updated = current.model_copy(update={"verdict": verdict, "updated_at": utcnow()}, deep=True)
            self._docs[claim_id] = updated
            return self._copy(updated)

    async def count_for_claim(self, claim_id: str) -> int:
        async with self._lock:
            return 1 if claim_id in self._docs else 0


class InMemoryClusterRepository(_Collection[Cluster]):
    def __init__(self):
        super().__init__("Cluster")

    async def add(self, cluster: Cluster) -> Cluster:
        return await self._insert(cluster.id, cluster)

    async def get(self, cluster_id: str) -> Optional[Cluster]:
        return await self._get(cluster_id)

    async def save(self, cluster: Cluster) -> Cluster:
        return await self._replace(cluster.id, cluster)

    async def find_by_any_member(
        self, claim_ids: Iterable[str], exclude_ids: Iterable[str] = ()
    ) -> Optional[Cluster]:
        members = list(claim_ids)
        excluded = set(exclude_ids)
        candidates = sorted(await self._all(), key=lambda c: c.created_at)
        for cluster in candidates:
            if cluster.id not in excluded and cluster.shares_members_with(members):
                return cluster
        return None

    async def search(
        self,
        risk_tier: Optional[RiskTier] = None,
        trend: Optional[Trend] = None,
        limit: int = 20,
        skip: int = 0,
    ) -> Tuple[List[Cluster], int]:
        matches = [
            cluster
            for cluster in await self._all()
            if (risk_tier is None or cluster.risk_tier == risk_tier) and (trend is None or cluster.trend == trend)
        ]
        matches.sort(key=lambda c: c.updated_at, reverse=True)
        return matches[skip: skip + limit], len(matches)


class InMemoryAuditLogRepository(_Collection[AuditLog]):
    """Append-only; entries are never replaced."""

    def __init__(self):
        super().__init__("AuditLog")

    async def append(self, entry: AuditLog) -> AuditLog:
        return await self._insert(entry.id, entry)

    async def list_for_target(self, target_id: str) -> List[AuditLog]:
        entries = [entry for entry in await self._all() if entry.target_id == target_id]
        return sorted(entries, key=lambda e: e.created_at)


class InMemoryDocumentStore:
    """Holds the four collections the backend persists."""

    def __init__(self):
        self.claims = InMemoryClaimRepository()
        self.analyses = InMemoryAnalysisRepository()
        self.clusters = InMemoryClusterRepository()
        self.audit_log = InMemoryAuditLogRepository()

    async def reset(self) -> None:
        """Administrative bulk reset of every collection."""
        for collection in (self.claims, self.analyses, self.clusters, self.audit_log):
            await collection.clear()
        logger.warning("⚠️ Document store reset")
