"""
deskrag - Retrieval core of a desktop chat assistant for personal documents.
"""

from deskrag.assistant import ChatAssistant
from deskrag.core.message import Message, Role
from deskrag.events import EventSink, StreamEvent
from deskrag.exceptions import (
    DeskRagError,
    DirectoryReadError,
    EmptyEmbeddingError,
    MalformedResponseError,
    ModelServiceError,
    ServiceConnectionError,
    ServiceStatusError,
    StoreLockError,
    VectorDimensionError,
)
from deskrag.providers import ChatProvider, OllamaProvider
from deskrag.rag import (
    AugmentationPolicy,
    ChunkRecord,
    Document,
    FixedSizeChunker,
    IngestionPipeline,
    LoadResult,
    LoadStatus,
    MemoryVectorStore,
    OllamaEmbedding,
    RecursiveChunker,
    SearchResult,
    SourceInfo,
    VectorRetriever,
    cosine_similarity,
)
from deskrag.utils.config import DeskRagConfig, load_config

__version__ = "0.1.0"
__all__ = [
    # Assistant
    "ChatAssistant",
    "DeskRagConfig",
    "load_config",
    "EventSink",
    "StreamEvent",
    "Message",
    "Role",
    # Providers
    "ChatProvider",
    "OllamaProvider",
    # RAG
    "AugmentationPolicy",
    "ChunkRecord",
    "Document",
    "FixedSizeChunker",
    "IngestionPipeline",
    "LoadResult",
    "LoadStatus",
    "MemoryVectorStore",
    "OllamaEmbedding",
    "RecursiveChunker",
    "SearchResult",
    "SourceInfo",
    "VectorRetriever",
    "cosine_similarity",
    # Errors
    "DeskRagError",
    "DirectoryReadError",
    "EmptyEmbeddingError",
    "MalformedResponseError",
    "ModelServiceError",
    "ServiceConnectionError",
    "ServiceStatusError",
    "StoreLockError",
    "VectorDimensionError",
]
