"""Embedding resolution with a placeholder fallback."""

import logging
from typing import List, Optional

import numpy as np

from ..exceptions import AIProviderError
from ..ports.ai_provider import AIProvider

logger = logging.getLogger(__name__)


class EmbeddingService:
    """Turns claim text into a vector without ever failing the caller.

    When no provider is configured, or the provider gives up after its retries,
    a random placeholder vector of the configured dimension is returned so claim
    creation can proceed.
    """

    def __init__(
        self,
        ai_provider: Optional[AIProvider] = None,
        dimension: int = 1536,
        rng: Optional[np.random.Generator] = None,
    ):
        self._ai = ai_provider
        self._dimension = dimension
        self._rng = rng or np.random.default_rng()

    @property
    def dimension(self) -> int:
        return self._dimension

    def placeholder(self) -> List[float]:
        """Random vector in [-1, 1) with the configured dimension."""
        return self._rng.uniform(-1.0, 1.0, self._dimension).tolist()

    async def embed(self, text: str, language: str = "en") -> List[float]:
        """Embed ``text``; never raises.

        Args:
            text: Text to embed
            language: Language of the text

        Returns:
            Provider vector, or a random placeholder of the configured dimension
        """
        if self._ai is None:
            return self.placeholder()

        try:
            vector = await self._ai.embed(text, language)
        except AIProviderError as e:
            logger.warning(f"⚠️ Embedding stage failed, using placeholder vector: {e}")
            return self.placeholder()

        if len(vector) != self._dimension:
            logger.warning(
                f"⚠️ Embedding stage returned {len(vector)} dimensions (expected {self._dimension}), using placeholder vector"
            )
            return self.placeholder()
        return vector
