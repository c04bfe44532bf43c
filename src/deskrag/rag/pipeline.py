"""Document ingestion pipeline."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from deskrag.exceptions import DirectoryReadError, ModelServiceError

from .base import BaseChunker, BaseEmbedding, BaseVectorStore
from .chunking import RecursiveChunker
from .document import Document

logger = logging.getLogger(__name__)


class LoadStatus(str, Enum):
    """Outcome of a load action."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class SkippedItem:
    """A file or chunk that was left out of the corpus.

    Attributes:
        source_name: File the item came from
        reason: Why it was skipped
        chunk_index: Position of the chunk within its file, None for whole files
    """

    source_name: str
    reason: str
    chunk_index: Optional[int] = None


@dataclass
class LoadResult:
    """Summary of one load action.

    Per-file and per-chunk failures do not fail the load; they are
    collected in ``skipped``.
    """

    status: LoadStatus = LoadStatus.COMPLETED
    directory: Optional[str] = None
    files_processed: int = 0
    chunks_loaded: int = 0
    skipped: list[SkippedItem] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def cancelled(cls, reason: str = "no directory selected") -> "LoadResult":
        """Create a result for a load the user cancelled."""
        return cls(status=LoadStatus.CANCELLED, error=reason)

    @classmethod
    def failed(cls, directory: str, error: str) -> "LoadResult":
        """Create a result for a load that could not run."""
        return cls(status=LoadStatus.FAILED, directory=directory, error=error)

    @property
    def message(self) -> str:
        """Status line shown to the user."""
        if self.status == LoadStatus.CANCELLED:
            return f"Document loading cancelled by user ({self.error})."
        if self.status == LoadStatus.FAILED:
            return self.error or "Document loading failed."

        source = f" from {self.directory}" if self.directory else ""
        return (
            f"Successfully processed {self.files_processed} files, "
            f"loaded {self.chunks_loaded} chunks into document store{source}."
        )


class IngestionPipeline:
    """Turns a directory of text documents into a fresh vector store snapshot.

    The store's exclusive section is held for the whole clear-and-repopulate
    run, embedding calls included, so readers only ever see the old or the
    new corpus.

    Example:
        ```python
        pipeline = IngestionPipeline(OllamaEmbedding(), MemoryVectorStore())
        result = await pipeline.load_directory("~/notes")
        print(result.message)
        ```
    """

    def __init__(
        self,
        embedding: BaseEmbedding,
        vectorstore: BaseVectorStore,
        chunker: Optional[BaseChunker] = None,
        extensions: Iterable[str] = (".txt",),
    ):
        """Initialize the ingestion pipeline.

        Args:
            embedding: Embedding model for chunks
            vectorstore: Store to repopulate
            chunker: Text chunker (default: RecursiveChunker)
            extensions: File name suffixes to load, matched case-insensitively
        """
        self.embedding = embedding
        self.vectorstore = vectorstore
        self.chunker = chunker or RecursiveChunker()
        self.extensions = tuple(ext.lower() for ext in extensions)

    async def load_directory(self, directory: str | Path) -> LoadResult:
        """Replace the store contents with the documents in directory.

        Raises:
            DirectoryReadError: If the directory cannot be listed. The store
                is left empty.
            asyncio.CancelledError: If the load is cancelled. The store is
                left empty.
        """
        directory = Path(directory)

        async with self.vectorstore.exclusive():
            self.vectorstore.clear()
            result = LoadResult(directory=str(directory))
            try:
                await self._load_files(directory, result)
            except asyncio.CancelledError:
                self._discard_partial_load()
                raise

        logger.info(result.message)
        return result

    async def ingest_documents(self, documents: Iterable[Document]) -> LoadResult:
        """Replace the store contents with already-read documents."""
        async with self.vectorstore.exclusive():
            self.vectorstore.clear()
            result = LoadResult()
            try:
                for document in documents:
                    await self._ingest_text(document.source_name, document.content, result)
                    result.files_processed += 1
            except asyncio.CancelledError:
                self._discard_partial_load()
                raise

        logger.info(result.message)
        return result

    def _discard_partial_load(self) -> None:
        """Empty the store after an interrupted load. Must run inside exclusive()."""
        self.vectorstore.clear()
        logger.info("Document loading interrupted, document store left empty")

    async def _load_files(self, directory: Path, result: LoadResult) -> None:
        loop = asyncio.get_running_loop()

        try:
            entries = await loop.run_in_executor(
                None,
                lambda: sorted(directory.iterdir(), key=lambda p: p.name),
            )
        except OSError as e:
            raise DirectoryReadError(str(directory), str(e)) from e

        for path in entries:
            if not self._is_supported(path):
                continue

            logger.info(f"Processing file: {path}")
            try:
                content = await loop.run_in_executor(
                    None,
                    lambda: path.read_text(encoding="utf-8"),
                )
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Error reading file {path}: {e}. Skipping.")
                result.skipped.append(SkippedItem(source_name=path.name, reason=str(e)))
                continue

            await self._ingest_text(path.name, content, result)
            result.files_processed += 1

    def _is_supported(self, path: Path) -> bool:
        if not path.name.lower().endswith(self.extensions):
            return False
        try:
            return path.is_file()
        except OSError:
            return False

    async def _ingest_text(self, source_name: str, content: str, result: LoadResult) -> None:
        """Chunk, embed and store one document. Must run inside exclusive()."""
        chunks = self.chunker.split_text(content)
        logger.info(f"File {source_name} split into {len(chunks)} chunks")

        for index, text in enumerate(chunks):
            if not text.strip():
                logger.debug(f"Skipping empty chunk {index} from {source_name}")
                continue

            try:
                vector = await self.embedding.embed(text)
            except ModelServiceError as e:
                logger.warning(
                    f"Error getting embedding for chunk {index} from {source_name}: {e}. "
                    f"Skipping chunk."
                )
                result.skipped.append(
                    SkippedItem(source_name=source_name, reason=str(e), chunk_index=index)
                )
                continue

            self.vectorstore.append(text, vector, source_name)
            result.chunks_loaded += 1
