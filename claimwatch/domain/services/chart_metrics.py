"""Selection of dashboard chart metrics for a claim."""

import logging
from typing import List, Optional

from ..exceptions import AIProviderError, NotFoundError
from ..ports.ai_provider import AIProvider, MetricRecommendation
from ..ports.repositories import AnalysisRepository, ClaimRepository

logger = logging.getLogger(__name__)


def available_metrics(has_engagement: bool, has_sources: bool) -> List[str]:
    """``mentions`` is always charted; the others only when the data has them."""
    metrics = ["mentions"]
    if has_engagement:
        metrics.append("engagement")
    if has_sources:
        metrics.append("sources")
    return metrics


class ChartMetricsService:
    """Chooses which metrics a claim's trend chart should show."""

    def __init__(
        self,
        claims: ClaimRepository,
        analyses: AnalysisRepository,
        ai_provider: Optional[AIProvider] = None,
    ):
        self._claims = claims
        self._analyses = analyses
        self._ai = ai_provider

    async def recommend(
        self,
        claim_id: str,
        data_points: int = 0,
        has_engagement: bool = False,
        has_sources: bool = False,
    ) -> MetricRecommendation:
        """Recommend chart metrics for a claim.

        Args:
            claim_id: Claim whose chart is being built
            data_points: Number of points in the series
            has_engagement: Whether engagement data exists
            has_sources: Whether source counts exist

        Returns:
            Metrics drawn from the available set, with the reasoning behind them

        Raises:
            NotFoundError: If the claim does not exist
        """
        claim = await self._claims.get(claim_id)
        if claim is None:
            raise NotFoundError("Claim", claim_id)

        analysis = await self._analyses.get_for_claim(claim_id)
        verdict = analysis.verdict.value if analysis else "under review"
        metrics = available_metrics(has_engagement, has_sources)

        if self._ai is not None:
            try:
                recommendation = await self._ai.recommend_metrics(claim.text, verdict, metrics, data_points)
                chosen = [m for m in recommendation.metrics if m in metrics]
                return MetricRecommendation(
                    metrics=chosen or ["mentions"],
                    reasoning=recommendation.reasoning or "Metrics selected based on claim analysis",
                )
            except AIProviderError as e:
                logger.warning(f"⚠️ Metric recommendation failed, using defaults: {e}")

        return MetricRecommendation(metrics=metrics, reasoning="Default metrics - AI analysis unavailable")
