"""Embedding model implementations."""

import logging
from typing import Optional

from .base import BaseEmbedding

from deskrag.providers.base import ChatProvider
from deskrag.providers.ollama import OllamaProvider

logger = logging.getLogger(__name__)


class OllamaEmbedding(BaseEmbedding):
    """Embedding gateway backed by the model service.

    No retries are attempted; every failure is raised to the caller as a
    ``ModelServiceError`` subclass.
    """

    def __init__(
        self,
        model: str = "nomic-embed-text",
        provider: Optional[ChatProvider] = None,
        base_url: str = "http://localhost:11434",
    ):
        """Initialize the embedding gateway.

        Args:
            model: Embedding model name
            provider: Provider to call (created from base_url if None)
            base_url: Model service URL used when no provider is given
        """
        self.model = model
        self.provider = provider or OllamaProvider(base_url=base_url)
        self._dimension: Optional[int] = None

    @property
    def dimension(self) -> Optional[int]:
        """Vector length, known after the first successful call."""
        return self._dimension

    async def embed(self, text: str) -> list[float]:
        """Embed text through the model service."""
        vector = await self.provider.embed(text, model=self.model)
        self._dimension = len(vector)
        return vector

