"""Tests for the AI provider factory."""

import pytest

from claimwatch.config import Settings
from claimwatch.infrastructure.ai.factory import AIProviderFactory, openai_config_from_settings
from claimwatch.infrastructure.ai.openai_adapter import OpenAIAdapter

from conftest import FakeAIProvider


def test_config_from_settings():
    settings = Settings(openai_api_key="sk-test", chat_model="gpt-4o-mini", ai_retries=5, max_concurrent_ai_calls=7)

    config = openai_config_from_settings(settings, timeout=5.0)

    assert config.api_key == "sk-test"
    assert config.chat_model == "gpt-4o-mini"
    assert config.retries == 5
    assert config.max_concurrent_calls == 7
    assert config.timeout == 5.0


@pytest.mark.asyncio
async def test_create_openai_provider():
    factory = AIProviderFactory(Settings(openai_api_key="sk-test"))

    provider = await factory.create_provider("openai")

    assert isinstance(provider, OpenAIAdapter)
    assert provider.is_available
    assert factory.get_provider("openai") is provider
    assert await factory.create_provider("openai") is provider
    assert factory.available_providers == {"openai": True}

    await factory.shutdown()
    assert factory.get_provider("openai") is None
    assert not provider.is_available


@pytest.mark.asyncio
async def test_register_custom_provider():
    factory = AIProviderFactory()
    factory.register_provider("fake", FakeAIProvider)

    provider = await factory.create_provider("fake", dimension=4)

    assert provider.provider_name == "Fake"
    assert provider.dimension == 4


@pytest.mark.asyncio
async def test_unknown_provider():
    with pytest.raises(ValueError):
        await AIProviderFactory().create_provider("missing")
