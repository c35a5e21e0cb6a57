"""Analysis endpoints."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import Field

from ...domain.models.base import DocumentModel
from ...domain.services.chart_metrics import ChartMetricsService
from ...domain.services.claim_service import ClaimService
from ...infrastructure.dependencies import get_actor_id, get_chart_metrics_service, get_claim_service

router = APIRouter(prefix="/analysis", tags=["analysis"])


class MetricRecommendationRequest(DocumentModel):
    """Request model for chart metric recommendation."""

    claim_id: str = Field(..., min_length=1, description="Claim to chart")
    data_points: int = Field(default=0, ge=0, description="Points in the mention series")
    has_engagement: bool = Field(default=False, description="Series carries engagement values")
    has_sources: bool = Field(default=False, description="Series carries source counts")


@router.get("/{claim_id}")
async def get_analysis(claim_id: str, service: ClaimService = Depends(get_claim_service)) -> Dict[str, Any]:
    """Stored analysis of a claim."""
    analysis = await service.get_analysis(claim_id)
    return analysis.to_api()


@router.post("/run/{claim_id}")
async def run_analysis(
    claim_id: str,
    service: ClaimService = Depends(get_claim_service),
    actor_id: Optional[str] = Depends(get_actor_id),
) -> Dict[str, Any]:
    """Re-run the pipeline now, replacing any previous analysis."""
    analysis = await service.run_analysis(claim_id, actor_id=actor_id)
    return analysis.to_api()


@router.post("/recommend-metrics")
async def recommend_metrics(
    request: MetricRecommendationRequest,
    service: ChartMetricsService = Depends(get_chart_metrics_service),
) -> Dict[str, Any]:
    """Choose which chart metrics best explain a claim."""
    recommendation = await service.recommend(
        request.claim_id,
        data_points=request.data_points,
        has_engagement=request.has_engagement,
        has_sources=request.has_sources,
    )
    return {"recommendedMetrics": recommendation.metrics, "analysis": recommendation.reasoning}
