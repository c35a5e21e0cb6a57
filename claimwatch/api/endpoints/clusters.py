"""Cluster endpoints."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from ...domain.models.cluster import RiskTier, Trend
from ...domain.services.clustering_service import ClusteringService
from ...infrastructure.dependencies import get_clustering_service
from .claims import claim_to_api

router = APIRouter(prefix="/clusters", tags=["clusters"])


@router.get("")
async def list_clusters(
    risk_tier: Optional[RiskTier] = Query(None, alias="riskTier"),
    trend: Optional[Trend] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    skip: int = Query(0, ge=0),
    service: ClusteringService = Depends(get_clustering_service),
) -> Dict[str, Any]:
    """Clusters, most recently updated first."""
    clusters, total = await service.list_clusters(risk_tier=risk_tier, trend=trend, limit=limit, skip=skip)
    return {
        "clusters": [cluster.to_api() for cluster in clusters],
        "total": total,
        "limit": limit,
        "skip": skip,
    }


@router.post("/recompute")
async def recompute_clusters(service: ClusteringService = Depends(get_clustering_service)) -> Dict[str, Any]:
    """Re-run k-means over every embedded claim."""
    return await service.recluster()


@router.get("/{cluster_id}")
async def get_cluster(cluster_id: str, service: ClusteringService = Depends(get_clustering_service)) -> Dict[str, Any]:
    cluster, claims = await service.get_cluster(cluster_id)
    return {
        "cluster": cluster.to_api(),
        "claims": [claim_to_api(claim) for claim in claims],
    }
