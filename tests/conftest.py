"""Test configuration and common fixtures."""

from datetime import timedelta
from typing import Dict, List, Optional

import numpy as np
import pytest
import pytest_asyncio

from claimwatch.config import Settings
from claimwatch.domain.exceptions import AIProviderError
from claimwatch.domain.models.analysis import EvidenceSource, Reliability, Sentiment, Verdict
from claimwatch.domain.models.base import utcnow
from claimwatch.domain.models.claim import MediaAnalysis
from claimwatch.domain.ports.ai_provider import (
    ManipulationResult,
    MentionTrendPoint,
    MetricRecommendation,
    OutputType,
    SentimentResult,
    SpreadVelocityResult,
    ToxicityResult,
    VerdictResult,
    WebContextResult,
)
from claimwatch.infrastructure.dependencies import ServiceContainer
from claimwatch.infrastructure.events.event_bus import InMemoryEventBus
from claimwatch.infrastructure.persistence.memory_store import InMemoryDocumentStore

DIMENSION = 8


class FakeAIProvider:
    """Scriptable provider implementation.

    Every call kind listed in ``failing`` raises ``AIProviderError``; the rest
    return the canned values set on the instance.
    """

    def __init__(self, dimension: int = DIMENSION):
        self.dimension = dimension
        self.failing: set = set()
        self.calls: List[str] = []
        self.vectors: Dict[str, List[float]] = {}
        self.web_context: Optional[WebContextResult] = None
        self.verdict = VerdictResult(
            verdict=Verdict.TRUE, confidence=0.9, rationale="Supported by sources.", key_findings=["Consistent"]
        )
        self.toxicity = 0.1
        self.spread_velocity = 0.2
        self.manipulation = 0.1
        self.sentiment = Sentiment.NEUTRAL
        self.evidence = [
            EvidenceSource(type="news", title="Wire report", url="https://news.test/a", reliability=Reliability.MEDIUM)
        ]
        self.trends: List[MentionTrendPoint] = []
        self.metrics = MetricRecommendation(metrics=["mentions", "engagement"], reasoning="Engagement matters")

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.failing:
            raise AIProviderError(f"{name} unavailable")

    async def initialize(self) -> None:
        pass

    async def shutdown(self) -> None:
        pass

    async def embed(self, text: str, language: str = "en") -> List[float]:
        self._call("embed")
        if text in self.vectors:
            return list(self.vectors[text])
        return [1.0] + [0.0] * (self.dimension - 1)

    async def research_claim(self, text: str, media: Optional[MediaAnalysis] = None) -> WebContextResult:
        self._call("research_claim")
        if self.web_context is None:
            raise AIProviderError("no web context")
        return self.web_context

    async def generate_verdict(self, text: str, evidence: List[EvidenceSource]) -> VerdictResult:
        self._call("generate_verdict")
        return self.verdict

    async def analyze_sentiment(self, text: str) -> SentimentResult:
        self._call("analyze_sentiment")
        return SentimentResult(sentiment=self.sentiment)

    async def analyze_toxicity(self, text: str) -> ToxicityResult:
        self._call("analyze_toxicity")
        return ToxicityResult(toxicity_score=self.toxicity)

    async def analyze_spread_velocity(self, text: str) -> SpreadVelocityResult:
        self._call("analyze_spread_velocity")
        return SpreadVelocityResult(spread_velocity=self.spread_velocity)

    async def analyze_manipulation(self, text: str) -> ManipulationResult:
        self._call("analyze_manipulation")
        return ManipulationResult(manipulation_score=self.manipulation)

    async def generate_evidence_sources(self, text: str, verdict: Verdict) -> List[EvidenceSource]:
        self._call("generate_evidence_sources")
        return list(self.evidence)

    async def generate_mention_trends(self, text: str, verdict: Verdict) -> List[MentionTrendPoint]:
        self._call("generate_mention_trends")
        return list(self.trends)

    async def generate_corrective_output(self, text: str, verdict: VerdictResult, output_type: OutputType) -> str:
        self._call(f"output:{output_type.value}")
        return f"{output_type.value}: {verdict.verdict.value}"

    async def recommend_metrics(
        self, text: str, verdict: str, available_metrics: List[str], data_points: int
    ) -> MetricRecommendation:
        self._call("recommend_metrics")
        return self.metrics

    @property
    def provider_name(self) -> str:
        return "Fake"

    @property
    def is_available(self) -> bool:
        return True

    @property
    def capabilities(self) -> Dict[str, bool]:
        return {"embeddings": True}


def mention_points(count: int = 3) -> List[MentionTrendPoint]:
    now = utcnow()
    return [
        MentionTrendPoint(timestamp=now - timedelta(hours=6 * i), mentions=10 * (i + 1), sources=2)
        for i in range(count)
    ]


@pytest.fixture
def fake_ai() -> FakeAIProvider:
    """Provide a scriptable AI provider."""
    return FakeAIProvider()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Provide an empty document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def settings() -> Settings:
    """Settings without an API key, so nothing reaches the network."""
    return Settings(embedding_dimension=DIMENSION, auto_analyze=False)


@pytest_asyncio.fixture
async def container(settings: Settings, store: InMemoryDocumentStore, rng) -> ServiceContainer:
    """Provide a heuristic-mode service container."""
    container = ServiceContainer(settings=settings, store=store, rng=rng)
    await container.initialize()
    yield container
    await container.shutdown()


@pytest_asyncio.fixture
async def ai_container(settings: Settings, store: InMemoryDocumentStore, fake_ai: FakeAIProvider, rng):
    """Provide a service container wired to the fake provider."""
    container = ServiceContainer(settings=settings, ai_provider=fake_ai, store=store, rng=rng)
    await container.initialize()
    yield container
    await container.shutdown()
