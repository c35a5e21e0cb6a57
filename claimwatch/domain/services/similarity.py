"""Cosine-similarity search over stored claim embeddings."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from ..models.claim import Claim
from ..ports.repositories import ClaimRepository

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 10


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors.

    Returns 0.0 when either vector is empty or has zero magnitude, and when the
    lengths differ (embeddings share one system-wide dimension, so a mismatch
    means the vectors are not comparable).
    """
    if len(a) == 0 or len(b) == 0 or len(a) != len(b):
        return 0.0

    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    similarity = float(np.dot(va, vb)) / (norm_a * norm_b)
    return max(-1.0, min(1.0, similarity))


@dataclass
class SimilarClaim:
    """A stored claim and how close it is to the query vector."""

    claim: Claim
    similarity: float


class SimilarityIndex:
    """Brute-force O(N*D) similarity search over the claim collection.

    Adequate for the expected claim volume; an ANN index would be needed if the
    collection grows by orders of magnitude.
    """

    def __init__(self, claims: ClaimRepository, max_results: int = DEFAULT_MAX_RESULTS):
        self._claims = claims
        self._max_results = max_results

    async def find_similar(self, vector: Sequence[float], threshold: float = 0.7) -> List[SimilarClaim]:
        """Claims at or above ``threshold``, most similar first.

        Args:
            vector: Query embedding
            threshold: Minimum cosine similarity

        Returns:
            At most ``max_results`` matches; claims with a different dimension are skipped
        """
        if len(vector) == 0:
            return []

        candidates = await self._claims.list_with_embeddings()
        scored = []
        for claim in candidates:
            if len(claim.embedding) != len(vector):
                logger.debug(f"Skipping claim {claim.id}: embedding dimension {len(claim.embedding)} != {len(vector)}")
                continue
            similarity = cosine_similarity(vector, claim.embedding)
            if similarity >= threshold:
                scored.append(SimilarClaim(claim=claim, similarity=similarity))

        scored.sort(key=lambda item: item.similarity, reverse=True)
        return scored[: self._max_results]

    async def cluster_hint(self, claim: Claim, threshold: float) -> Optional[str]:
        """Cluster id of the closest other clustered claim above ``threshold``."""
        if not claim.has_embedding:
            return None
        for match in await self.find_similar(claim.embedding, threshold):
            if match.claim.id != claim.id and match.claim.cluster_id:
                logger.info(
                    f"🔗 Claim {claim.id} resembles {match.claim.id} "
                    f"(similarity {match.similarity:.2f}), hinting cluster {match.claim.cluster_id}"
                )
                return match.claim.cluster_id
        return None
