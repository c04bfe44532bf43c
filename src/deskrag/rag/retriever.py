"""Retriever implementations."""

import logging

from .base import BaseEmbedding, BaseVectorStore
from .document import SearchResult

logger = logging.getLogger(__name__)


class VectorRetriever:
    """Vector similarity retriever.

    Embeds the query, then ranks every stored chunk by cosine
    similarity with an exact linear scan.
    """

    def __init__(
        self,
        embedding: BaseEmbedding,
        vectorstore: BaseVectorStore,
    ):
        """Initialize the vector retriever.

        Args:
            embedding: Embedding model for queries
            vectorstore: Vector store to search
        """
        self.embedding = embedding
        self.vectorstore = vectorstore

    async def find_relevant_chunks(
        self,
        query_vector: list[float],
        top_n: int = 3,
    ) -> list[SearchResult]:
        """Return at most top_n chunks ranked by similarity to query_vector."""
        results = await self.vectorstore.search(query_vector, top_n)

        for rank, result in enumerate(results, start=1):
            logger.debug(
                f"Selected relevant chunk {rank}: ID {result.record.id}, "
                f"Source: {result.record.source_name}, Score: {result.score:.4f}"
            )

        return results

    async def retrieve(self, query: str, k: int = 3) -> list[SearchResult]:
        """Embed the query and retrieve the k most similar chunks."""
        query_vector = await self.embedding.embed_query(query)
        return await self.find_relevant_chunks(query_vector, k)
