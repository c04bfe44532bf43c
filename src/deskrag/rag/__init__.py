"""RAG (Retrieval-Augmented Generation) core for deskrag.

This module provides the retrieval core of the chat assistant:
- Document and chunk record data structures
- Chunking strategies (fixed-size, recursive)
- Embedding gateway (Ollama)
- In-memory vector store with exact cosine similarity ranking
- Ingestion pipeline and retrieval-augmentation policy

Example:
    ```python
    from deskrag.rag import (
        AugmentationPolicy,
        IngestionPipeline,
        MemoryVectorStore,
        OllamaEmbedding,
        VectorRetriever,
    )

    embedding = OllamaEmbedding()
    store = MemoryVectorStore()
    await IngestionPipeline(embedding, store).load_directory("notes/")

    results = await VectorRetriever(embedding, store).retrieve("What is due Friday?")
    prompt = AugmentationPolicy().apply("What is due Friday?", results).prompt
    ```
"""

from .augment import AugmentationPolicy, AugmentedPrompt, build_context_prompt
from .base import BaseChunker, BaseEmbedding, BaseVectorStore
from .chunking import FixedSizeChunker, RecursiveChunker, clamp_overlap, create_chunker
from .document import ChunkRecord, Document, SearchResult, SourceInfo
from .embeddings import OllamaEmbedding
from .pipeline import IngestionPipeline, LoadResult, LoadStatus, SkippedItem
from .retriever import VectorRetriever
from .vectorstore import (
    MemoryVectorStore,
    cosine_similarity,
    rank_records,
    safe_cosine_similarity,
)

__all__ = [
    # Base classes
    "BaseChunker",
    "BaseEmbedding",
    "BaseVectorStore",
    # Data structures
    "Document",
    "ChunkRecord",
    "SearchResult",
    "SourceInfo",
    # Chunking
    "FixedSizeChunker",
    "RecursiveChunker",
    "clamp_overlap",
    "create_chunker",
    # Embeddings
    "OllamaEmbedding",
    # Vector store
    "MemoryVectorStore",
    "cosine_similarity",
    "safe_cosine_similarity",
    "rank_records",
    # Retrieval
    "VectorRetriever",
    "AugmentationPolicy",
    "AugmentedPrompt",
    "build_context_prompt",
    # Ingestion
    "IngestionPipeline",
    "LoadResult",
    "LoadStatus",
    "SkippedItem",
]
