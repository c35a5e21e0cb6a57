"""Batch re-clustering of claims by embedding similarity."""

import logging
import math
from collections import Counter, defaultdict
from typing import Dict, List, Optional, Tuple

import numpy as np
from sklearn.cluster import KMeans

from ..exceptions import InvalidRequestError, NotFoundError
from ..models.base import utcnow
from ..models.claim import Claim
from ..models.cluster import Cluster, RiskTier, Trend
from ..ports.event_publisher import CLUSTERING_TOPIC, EventPublisher
from ..ports.repositories import ClaimRepository, ClusterRepository

logger = logging.getLogger(__name__)

MAX_CLUSTERS = 10
TITLE_WORDS = 5


def cluster_count(n: int) -> int:
    """Number of k-means clusters for ``n`` claims."""
    k = min(math.ceil(math.sqrt(n / 2)), MAX_CLUSTERS)
    return max(1, min(k, n))


def cluster_title(claims: List[Claim]) -> str:
    if not claims:
        return "Cluster"
    words = claims[0].text.split(" ")[:TITLE_WORDS]
    return f"{' '.join(words)}..."


class ClusteringService:
    """Groups all embedded claims with k-means and upserts cluster documents."""

    def __init__(
        self,
        claims: ClaimRepository,
        clusters: ClusterRepository,
        events: Optional[EventPublisher] = None,
        random_state: Optional[int] = None,
    ):
        self._claims = claims
        self._clusters = clusters
        self._events = events
        self._random_state = random_state

    async def recluster(self) -> Dict[str, int]:
        """Recompute clusters; returns ``{clustersCreated, totalClaims, numClusters}``."""
        claims = await self._claims.list_with_embeddings()
        claims = self._comparable(claims)

        if len(claims) < 2:
            logger.info("ℹ️ Not enough claims to cluster")
            return {"clustersCreated": 0, "totalClaims": len(claims), "numClusters": 0}

        k = cluster_count(len(claims))
        logger.info(f"🔍 Clustering {len(claims)} claims into {k} groups")

        vectors = np.asarray([claim.embedding for claim in claims], dtype=float)
        kmeans = KMeans(n_clusters=k, n_init=10, random_state=self._random_state)
        labels = kmeans.fit_predict(vectors)

        groups: Dict[int, List[Claim]] = defaultdict(list)
        for claim, label in zip(claims, labels):
            groups[int(label)].append(claim)

        created = 0
        touched: List[str] = []
        for members in groups.values():
            cluster, is_new = await self._upsert(members, exclude_ids=touched)
            touched.append(cluster.id)
            if is_new:
                created += 1

            for claim in members:
                if claim.cluster_id != cluster.id:
                    await self._claims.update(claim.id, {"cluster_id": cluster.id})

        result = {"clustersCreated": created, "totalClaims": len(claims), "numClusters": k}
        logger.info(f"✅ Clustering complete: {result}")

        if self._events is not None:
            await self._events.publish(CLUSTERING_TOPIC, {"event": "clusteringUpdated", **result})
        return result

    async def _upsert(self, members: List[Claim], exclude_ids: List[str]):
        claim_ids = [claim.id for claim in members]
        title = cluster_title(members)
        summary = f"Cluster of {len(claim_ids)} related claims"

        existing = await self._clusters.find_by_any_member(claim_ids, exclude_ids=exclude_ids)
        if existing is not None:
            existing.title = title
            existing.summary = summary
            existing.claim_ids = claim_ids
            existing.total_mentions = sum(claim.mentions for claim in members)
            existing.updated_at = utcnow()
            return await self._clusters.save(existing), False

        cluster = Cluster(
            title=title,
            summary=summary,
            claim_ids=claim_ids,
            total_mentions=sum(claim.mentions for claim in members),
        )
        return await self._clusters.add(cluster), True

    @staticmethod
    def _comparable(claims: List[Claim]) -> List[Claim]:
        # k-means needs one dimension; keep the most common one
        if not claims:
            return claims
        dimension, _ = Counter(len(claim.embedding) for claim in claims).most_common(1)[0]
        skipped = [claim.id for claim in claims if len(claim.embedding) != dimension]
        if skipped:
            logger.warning(f"⚠️ Skipping {len(skipped)} claims whose embedding dimension differs from {dimension}")
        return [claim for claim in claims if len(claim.embedding) == dimension]

    async def get_cluster(self, cluster_id: str) -> Tuple[Cluster, List[Claim]]:
        """A cluster and its member claims.

        Members are the claims listed on the cluster followed by any claim whose
        ``cluster_id`` points at it.

        Raises:
            NotFoundError: If the cluster does not exist
        """
        cluster = await self._clusters.get(cluster_id)
        if cluster is None:
            raise NotFoundError("Cluster", cluster_id)

        members = await self._claims.get_many(cluster.claim_ids)
        listed = {claim.id for claim in members}
        members.extend(claim for claim in await self._claims.list_by_cluster(cluster_id) if claim.id not in listed)
        return cluster, members

    async def list_clusters(
        self,
        risk_tier: Optional[RiskTier] = None,
        trend: Optional[Trend] = None,
        limit: int = 20,
        skip: int = 0,
    ) -> Tuple[List[Cluster], int]:
        """Clusters filtered by risk tier and trend, most recently updated first."""
        if limit < 1 or skip < 0:
            raise InvalidRequestError("limit must be positive and skip non-negative", field="limit")
        return await self._clusters.search(risk_tier=risk_tier, trend=trend, limit=limit, skip=skip)
