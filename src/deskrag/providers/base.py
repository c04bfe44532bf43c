"""
Base model service provider interface.
"""

from abc import ABC, abstractmethod
from typing import Any, AsyncIterator


class ChatProvider(ABC):
    """
    Abstract base class for model service providers.

    A provider offers text embeddings and streaming chat generation.
    """

    @abstractmethod
    async def embed(self, text: str, *, model: str) -> list[float]:
        """
        Get an embedding vector for text.

        Args:
            text: Non-empty text to embed
            model: Embedding model identifier

        Returns:
            Embedding vector
        """
        pass

    @abstractmethod
    def stream(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str,
        **kwargs: Any
    ) -> AsyncIterator[str]:
        """
        Stream a chat completion.

        Args:
            messages: List of messages in API format
            model: Model identifier
            **kwargs: Additional provider-specific options

        Yields:
            Text fragments of the response as they arrive
        """
        pass

    async def aclose(self) -> None:
        """Release provider resources."""
