"""In-memory vector store and cosine similarity ranking."""

import asyncio
import logging
import math
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, Optional

from deskrag.exceptions import StoreLockError, VectorDimensionError

from .base import BaseVectorStore
from .document import ChunkRecord, SearchResult

logger = logging.getLogger(__name__)


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Calculate cosine similarity between two vectors.

    Returns 0.0 when either vector has zero magnitude.

    Raises:
        VectorDimensionError: If a vector is empty or the dimensions differ
    """
    if not a or not b:
        raise VectorDimensionError("Vectors must not be empty")
    if len(a) != len(b):
        raise VectorDimensionError(
            f"Vectors must have the same dimension (a: {len(a)}, b: {len(b)})"
        )

    dot_product = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(x * x for x in b))

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return dot_product / (norm_a * norm_b)


def safe_cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity that scores incomparable vectors as 0.0."""
    try:
        return cosine_similarity(a, b)
    except VectorDimensionError as e:
        logger.debug(f"Scoring as 0.0: {e}")
        return 0.0


def rank_records(
    query_vector: list[float],
    records: Iterable[ChunkRecord],
    top_n: int = 3,
) -> list[SearchResult]:
    """Score every record against the query and return the best top_n.

    Records without a vector are skipped. Results are ordered by score,
    descending; equal scores keep ascending id order.
    """
    if top_n <= 0:
        top_n = 3

    scored = []
    for record in records:
        if not record.vector:
            logger.debug(
                f"Skipping chunk {record.id} from {record.source_name}: empty embedding"
            )
            continue
        score = safe_cosine_similarity(query_vector, record.vector)
        scored.append(SearchResult(record=record, score=score))

    scored.sort(key=lambda result: (-result.score, result.record.id))
    return scored[:top_n]


class MemoryVectorStore(BaseVectorStore):
    """In-memory vector store with exact linear-scan search.

    The record list and the id counter are guarded by one lock. Writers
    hold it through ``exclusive()`` for an entire reload; readers take
    it only long enough to copy the record list.
    """

    def __init__(self) -> None:
        """Initialize an empty memory vector store."""
        self._records: list[ChunkRecord] = []
        self._next_id = 1
        self._lock = asyncio.Lock()
        self._writer: Optional[asyncio.Task] = None

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator["MemoryVectorStore"]:
        """Hold the store lock for a clear-and-repopulate sequence."""
        async with self._lock:
            self._writer = asyncio.current_task()
            try:
                yield self
            finally:
                self._writer = None

    def _require_lock(self) -> None:
        """Only the task inside exclusive() may write."""
        if self._writer is None or self._writer is not asyncio.current_task():
            raise StoreLockError()

    def clear(self) -> None:
        """Remove all records and reset the id counter."""
        self._require_lock()
        self._records = []
        self._next_id = 1

    def append(self, text: str, vector: list[float], source_name: str) -> int:
        """Store a record under the next sequential id."""
        self._require_lock()
        record = ChunkRecord(
            id=self._next_id,
            text=text,
            vector=list(vector),
            source_name=source_name,
        )
        self._records.append(record)
        self._next_id += 1
        return record.id

    async def snapshot(self) -> tuple[ChunkRecord, ...]:
        """Return a copy of the current records, in id order."""
        async with self._lock:
            return tuple(self._records)

    async def search(self, query_vector: list[float], k: int = 3) -> list[SearchResult]:
        """Search for the chunks most similar to query_vector."""
        records = await self.snapshot()
        if not records:
            logger.info("Document store is empty. Cannot find relevant chunks.")
            return []
        return rank_records(query_vector, records, k)

    async def count(self) -> int:
        """Return the number of records."""
        async with self._lock:
            return len(self._records)
