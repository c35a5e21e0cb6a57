"""Tests for embedding resolution."""

import numpy as np
import pytest
from unittest.mock import AsyncMock

from claimwatch.domain.exceptions import AIProviderError
from claimwatch.domain.services.embedding_service import EmbeddingService


@pytest.mark.asyncio
async def test_placeholder_without_provider():
    service = EmbeddingService(dimension=16, rng=np.random.default_rng(1))
    vector = await service.embed("test")

    assert len(vector) == 16
    assert all(-1.0 <= value < 1.0 for value in vector)


@pytest.mark.asyncio
async def test_provider_vector_is_returned(fake_ai):
    service = EmbeddingService(fake_ai, dimension=fake_ai.dimension)
    assert await service.embed("test") == [1.0] + [0.0] * (fake_ai.dimension - 1)


@pytest.mark.asyncio
async def test_provider_failure_yields_placeholder():
    provider = AsyncMock()
    provider.embed.side_effect = AIProviderError("Embedding failed after 3 attempts: timed out")
    service = EmbeddingService(provider, dimension=1536)

    vector = await service.embed("test")

    assert len(vector) == 1536
    provider.embed.assert_awaited_once_with("test", "en")


@pytest.mark.asyncio
async def test_wrong_dimension_yields_placeholder():
    provider = AsyncMock()
    provider.embed.return_value = [0.1, 0.2]
    service = EmbeddingService(provider, dimension=4)

    assert len(await service.embed("test")) == 4
