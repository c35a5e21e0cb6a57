"""Registry that builds and owns AI provider instances."""

import logging
from typing import Dict, Optional, Type

from ...config import Settings
from ...domain.ports.ai_provider import AIProvider
from .openai_adapter import OpenAIAdapter, OpenAIConfig

logger = logging.getLogger(__name__)


def openai_config_from_settings(settings: Settings, **overrides) -> OpenAIConfig:
    """Build adapter configuration from process settings.

    Args:
        settings: Process-wide settings
        **overrides: Config fields that replace the settings-derived values

    Returns:
        Adapter configuration
    """
    values = dict(
        api_key=settings.openai_api_key or "",
        base_url=settings.openai_base_url,
        chat_model=settings.chat_model,
        research_model=settings.research_model,
        embedding_model=settings.embedding_model,
        embedding_dimension=settings.embedding_dimension,
        feature_timeout=settings.feature_timeout,
        max_concurrent_calls=settings.max_concurrent_ai_calls,
        retries=settings.ai_retries,
        cache_ttl=settings.web_context_cache_ttl,
    )
    values.update(overrides)
    return OpenAIConfig(**values)


class AIProviderFactory:
    """Creates each registered provider at most once per process.

    The ``openai`` provider is configured from settings; any other registered
    class receives the keyword arguments given to ``create_provider``.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or Settings()
        self._registry: Dict[str, Type[AIProvider]] = {"openai": OpenAIAdapter}
        self._live: Dict[str, AIProvider] = {}

    def register_provider(self, name: str, provider_class: Type[AIProvider]) -> None:
        """Register a provider class.

        Args:
            name: Provider name
            provider_class: Class instantiated on first ``create_provider``
        """
        self._registry[name] = provider_class

    async def create_provider(self, name: str, **kwargs) -> AIProvider:
        """Return the live provider called ``name``, initializing it on first use.

        Args:
            name: Registered provider name
            **kwargs: Provider-specific configuration

        Returns:
            Initialized provider instance

        Raises:
            ValueError: If no provider is registered under ``name``
            ConnectionError: If the provider cannot be initialized
        """
        provider_class = self._registry.get(name)
        if provider_class is None:
            raise ValueError(f"Provider '{name}' not found")

        existing = self._live.get(name)
        if existing is not None:
            return existing

        if provider_class is OpenAIAdapter:
            provider = OpenAIAdapter(config=openai_config_from_settings(self._settings, **kwargs))
        else:
            provider = provider_class(**kwargs)
        await provider.initialize()
        self._live[name] = provider
        logger.info(f"✅ AI provider '{name}' ready")
        return provider

    def get_provider(self, name: str) -> Optional[AIProvider]:
        """Live instance for ``name``, or None if it was never created."""
        return self._live.get(name)

    @property
    def available_providers(self) -> Dict[str, bool]:
        """Registered provider names mapped to whether an instance is live."""
        return {name: name in self._live for name in self._registry}

    async def shutdown(self) -> None:
        """Shut down every live provider."""
        while self._live:
            name, provider = self._live.popitem()
            await provider.shutdown()
            logger.info(f"🔌 AI provider '{name}' shut down")
