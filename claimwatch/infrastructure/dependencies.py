"""Dependency injection configuration for hexagonal architecture."""

import logging
from typing import Any, Dict, Optional

import numpy as np
from fastapi import Request

from ..config import Settings
from ..domain.ports.ai_provider import AIProvider
from ..domain.services.analysis_pipeline import AnalysisPipeline
from ..domain.services.chart_metrics import ChartMetricsService
from ..domain.services.claim_service import ClaimService
from ..domain.services.clustering_service import ClusteringService
from ..domain.services.corrective_output_service import CorrectiveOutputService
from ..domain.services.embedding_service import EmbeddingService
from ..domain.services.feature_extractor import FeatureExtractor
from ..domain.services.review_service import ReviewService
from ..domain.services.similarity import SimilarityIndex
from ..domain.services.task_runner import BackgroundTaskRunner
from ..domain.services.verdict_synthesizer import VerdictSynthesizer
from .ai.factory import AIProviderFactory
from .events.event_bus import InMemoryEventBus
from .persistence.memory_store import InMemoryDocumentStore

logger = logging.getLogger(__name__)


class ServiceContainer:
    """Service container for dependency injection.

    Services are wired at construction with whatever AI provider is known. When
    an API key is configured, ``initialize`` creates the OpenAI provider and
    rewires the services to use it.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        ai_provider: Optional[AIProvider] = None,
        store: Optional[InMemoryDocumentStore] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        """Initialize service container."""
        self.settings = settings or Settings()
        self.store = store or InMemoryDocumentStore()
        self.events = InMemoryEventBus()
        self.tasks = BackgroundTaskRunner()
        self._ai_provider = ai_provider
        self._ai_factory: Optional[AIProviderFactory] = None
        self._rng = rng
        self._services: Dict[str, Any] = {}
        self._setup_services()

    @property
    def ai_provider(self) -> Optional[AIProvider]:
        return self._ai_provider

    async def initialize(self) -> None:
        """Create the AI provider when one is configured; otherwise run in heuristic mode."""
        if self._ai_provider is None and self.settings.ai_enabled:
            try:
                logger.info("🤖 Setting up AI provider...")
                self._ai_factory = AIProviderFactory(self.settings)
                self._ai_provider = await self._ai_factory.create_provider("openai")
                logger.info("✅ AI provider ready")
            except ConnectionError as e:
                logger.warning(f"⚠️ Failed to setup AI provider: {e}")
                logger.info("🧮 Services will use heuristic fallbacks")
                self._ai_provider = None
            self._setup_services()

    async def shutdown(self) -> None:
        await self.tasks.shutdown()
        if self._ai_factory is not None:
            await self._ai_factory.shutdown()
        logger.info("✅ Service container shutdown completed")

    def _setup_services(self) -> None:
        """Setup all services and their dependencies."""
        logger.info("🔧 Setting up service container...")
        settings = self.settings
        store = self.store
        ai = self._ai_provider

        embeddings = EmbeddingService(ai, dimension=settings.embedding_dimension, rng=self._rng)
        similarity = SimilarityIndex(store.claims)
        verdicts = VerdictSynthesizer(ai)
        features = FeatureExtractor(ai, timeout=settings.feature_timeout)

        pipeline = AnalysisPipeline(
            claims=store.claims,
            analyses=store.analyses,
            clusters=store.clusters,
            audit_log=store.audit_log,
            embeddings=embeddings,
            similarity=similarity,
            verdicts=verdicts,
            features=features,
            events=self.events,
            ai_provider=ai,
            similarity_threshold=settings.similarity_threshold,
            rng=self._rng,
        )

        self._services = {
            "analysis_pipeline": pipeline,
            "claim_service": ClaimService(
                claims=store.claims,
                analyses=store.analyses,
                audit_log=store.audit_log,
                embeddings=embeddings,
                similarity=similarity,
                pipeline=pipeline,
                tasks=self.tasks,
                events=self.events,
                similarity_threshold=settings.similarity_threshold,
                auto_analyze=settings.auto_analyze,
            ),
            "clustering_service": ClusteringService(store.claims, store.clusters, events=self.events),
            "review_service": ReviewService(
                store.claims, store.clusters, store.analyses, store.audit_log, events=self.events
            ),
            "corrective_output_service": CorrectiveOutputService(
                store.claims, store.clusters, store.analyses, store.audit_log, ai_provider=ai
            ),
            "chart_metrics_service": ChartMetricsService(store.claims, store.analyses, ai_provider=ai),
        }
        mode = ai.provider_name if ai is not None else "heuristic"
        logger.info(f"✅ Service container setup completed (AI mode: {mode})")

    def get(self, service_name: str) -> Any:
        """Get a service by name.

        Args:
            service_name: Name of the service

        Returns:
            Service instance

        Raises:
            KeyError: If service not found
        """
        if service_name not in self._services:
            raise KeyError(f"Service '{service_name}' not found")
        return self._services[service_name]

    def get_claim_service(self) -> ClaimService:
        """Get claim service."""
        return self.get("claim_service")

    def get_clustering_service(self) -> ClusteringService:
        return self.get("clustering_service")

    def get_review_service(self) -> ReviewService:
        """Get review service."""
        return self.get("review_service")

    def get_corrective_output_service(self) -> CorrectiveOutputService:
        return self.get("corrective_output_service")

    def get_chart_metrics_service(self) -> ChartMetricsService:
        return self.get("chart_metrics_service")


# Convenience functions for FastAPI dependency injection
def get_service_container(request: Request) -> ServiceContainer:
    """FastAPI dependency for the container attached to the running app."""
    return request.app.state.container


def get_claim_service(request: Request) -> ClaimService:
    """FastAPI dependency for the claim service."""
    return get_service_container(request).get_claim_service()


def get_clustering_service(request: Request) -> ClusteringService:
    """FastAPI dependency for the clustering service."""
    return get_service_container(request).get_clustering_service()


def get_review_service(request: Request) -> ReviewService:
    """FastAPI dependency for the review service."""
    return get_service_container(request).get_review_service()


def get_corrective_output_service(request: Request) -> CorrectiveOutputService:
    """FastAPI dependency for the corrective output service."""
    return get_service_container(request).get_corrective_output_service()


def get_chart_metrics_service(request: Request) -> ChartMetricsService:
    """FastAPI dependency for the chart metrics service."""
    return get_service_container(request).get_chart_metrics_service()


def get_actor_id(request: Request) -> Optional[str]:
    """Acting user from the optional ``X-Actor-Id`` header."""
    return request.headers.get("X-Actor-Id") or None
