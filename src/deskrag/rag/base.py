"""Base classes and abstract interfaces for RAG components."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, AsyncContextManager, Sequence

if TYPE_CHECKING:
    from .document import ChunkRecord, SearchResult


class BaseEmbedding(ABC):
    """Abstract base class for embedding models.

    Embedding models convert text into dense vector representations.
    """

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Embed a single text.

        Args:
            text: Non-empty text to embed

        Returns:
            Embedding vector

        Raises:
            ValueError: If the text is empty or whitespace only
            ModelServiceError: If the embedding could not be obtained
        """
        pass

    async def embed_query(self, text: str) -> list[float]:
        """Embed a user query."""
        return await self.embed(text)


class BaseVectorStore(ABC):
    """Abstract base class for vector stores.

    A vector store holds one corpus snapshot. Writers must hold the
    store's exclusive section for the whole clear-and-repopulate run.
    """

    @abstractmethod
    def exclusive(self) -> AsyncContextManager["BaseVectorStore"]:
        """Acquire exclusive access for a write sequence."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove all records and reset the id counter to 1."""
        pass

    @abstractmethod
    def append(self, text: str, vector: list[float], source_name: str) -> int:
        """Store a record and return its assigned id."""
        pass

    @abstractmethod
    async def snapshot(self) -> Sequence["ChunkRecord"]:
        """Return a consistent, read-only view of all records in id order."""
        pass

    @abstractmethod
    async def search(self, query_vector: list[float], k: int = 3) -> list["SearchResult"]:
        """Rank all records against a query vector and return the top k."""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Return the number of records in the store."""
        pass


class BaseChunker(ABC):
    """Abstract base class for text chunkers.

    Chunkers split one document's raw text into ordered, non-empty
    pieces. They hold no state between calls.
    """

    @abstractmethod
    def split_text(self, text: str) -> list[str]:
        """Split text into chunks.

        Args:
            text: Raw document text

        Returns:
            List of non-empty, non-whitespace chunk strings
        """
        pass
