"""Tests for chart metric recommendation."""

import pytest

from claimwatch.domain.exceptions import NotFoundError
from claimwatch.domain.models.claim import Claim
from claimwatch.domain.ports.ai_provider import MetricRecommendation
from claimwatch.domain.services.chart_metrics import ChartMetricsService, available_metrics


def test_available_metrics():
    assert available_metrics(False, False) == ["mentions"]
    assert set(available_metrics(True, True)) == {"mentions", "engagement", "sources"}


@pytest.mark.asyncio
async def test_defaults_without_provider(store):
    claim = await store.claims.add(Claim(text="claim"))
    service = ChartMetricsService(store.claims, store.analyses)

    recommendation = await service.recommend(claim.id, data_points=12, has_engagement=True)

    assert recommendation.metrics == available_metrics(True, False)
    assert recommendation.reasoning == "Default metrics - AI analysis unavailable"


@pytest.mark.asyncio
async def test_provider_choice_is_limited_to_available_metrics(store, fake_ai):
    claim = await store.claims.add(Claim(text="claim"))
    fake_ai.metrics = MetricRecommendation(metrics=["sources", "virality"], reasoning="why")
    service = ChartMetricsService(store.claims, store.analyses, fake_ai)

    recommendation = await service.recommend(claim.id, has_engagement=True)

    assert recommendation.metrics == ["mentions"]
    assert recommendation.reasoning == "why"


@pytest.mark.asyncio
async def test_provider_failure_falls_back(store, fake_ai):
    claim = await store.claims.add(Claim(text="claim"))
    fake_ai.failing.add("recommend_metrics")
    service = ChartMetricsService(store.claims, store.analyses, fake_ai)

    recommendation = await service.recommend(claim.id, has_sources=True)

    assert recommendation.metrics == available_metrics(False, True)


@pytest.mark.asyncio
async def test_unknown_claim(store):
    with pytest.raises(NotFoundError):
        await ChartMetricsService(store.claims, store.analyses).recommend("missing")
