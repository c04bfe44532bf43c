"""Text chunking strategies."""

import logging
from typing import TYPE_CHECKING, Iterator, Optional, Sequence, TypeVar

from .base import BaseChunker

if TYPE_CHECKING:
    from deskrag.utils.config import DeskRagConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


def clamp_overlap(chunk_size: int, overlap: int, unit: str = "char") -> int:
    """Return an overlap that guarantees forward progress for chunk_size.

    An overlap that is not smaller than the chunk size is replaced by a
    quarter of the size (word units) or a fifth of it, at least 1
    (character units).
    """
    if chunk_size <= 0 or overlap < 0:
        return 0

    if overlap >= chunk_size:
        if unit == "word":
            overlap = chunk_size // 4
        else:
            overlap = max(1, chunk_size // 5)
        logger.debug(f"Overlap clamped to {overlap} for chunk size {chunk_size}")

    if overlap >= chunk_size:
        overlap = 0

    return overlap


class FixedSizeChunker(BaseChunker):
    """Chunk text into fixed-size windows with overlap.

    Works over Unicode characters (``unit="char"``) or whitespace
    separated words (``unit="word"``). Word chunks are re-joined with a
    single space. The last chunk may be shorter than ``chunk_size``.
    """

    DEFAULTS = {
        "char": (1000, 100),
        "word": (200, 20),
    }

    def __init__(
        self,
        chunk_size: Optional[int] = None,
        overlap: Optional[int] = None,
        unit: str = "char",
    ):
        """Initialize the fixed-size chunker.

        Args:
            chunk_size: Units per chunk (default 1000 chars or 200 words)
            overlap: Units shared by adjacent chunks (default 100 chars or 20 words)
            unit: "char" or "word"
        """
        if unit not in self.DEFAULTS:
            raise ValueError(f"Unsupported chunk unit: {unit!r}")

        default_size, default_overlap = self.DEFAULTS[unit]
        self.unit = unit
        self.chunk_size = default_size if chunk_size is None else chunk_size
        overlap = default_overlap if overlap is None else overlap

        if unit == "word" and self.chunk_size <= 0:
            logger.warning(
                f"Invalid word chunk size {self.chunk_size}, using default {default_size}"
            )
            self.chunk_size = default_size

        self.overlap = clamp_overlap(self.chunk_size, overlap, unit)

    def split_text(self, text: str) -> list[str]:
        """Split text into fixed-size chunks."""
        if not text or not text.strip():
            return []

        if self.unit == "word":
            pieces = [" ".join(window) for window in self._windows(text.split())]
        elif self.chunk_size <= 0:
            # Nothing sensible to window over, keep the text whole.
            pieces = [text]
        else:
            pieces = list(self._windows(text))

        return [piece for piece in pieces if piece.strip()]

    def _windows(self, units: Sequence[T]) -> Iterator[Sequence[T]]:
        step = self.chunk_size - self.overlap
        total = len(units)
        start = 0

        while start < total:
            end = min(start + self.chunk_size, total)
            yield units[start:end]

            if end == total:
                break
            start += step


class RecursiveChunker(BaseChunker):
    """Recursively chunk text using a cascade of separators.

    Splits on the coarsest separator first (paragraphs), recurses into
    pieces that are still too large with finer separators, then greedily
    merges adjacent small pieces back together up to ``chunk_size``.
    The empty-string separator falls through to character windows with
    overlap.
    """

    DEFAULT_SEPARATORS = ["\n\n", "\n", ". ", "! ", "? ", "; ", ", ", " ", ""]

    def __init__(
        self,
        chunk_size: int = 1000,
        overlap: int = 100,
        separators: Optional[list[str]] = None,
    ):
        """Initialize the recursive chunker.

        Args:
            chunk_size: Maximum characters per chunk
            overlap: Characters shared by adjacent chunks at character level
            separators: Separators to try, coarsest first
        """
        self.chunk_size = chunk_size
        self.overlap = clamp_overlap(chunk_size, overlap, "char")
        self.separators = list(self.DEFAULT_SEPARATORS if separators is None else separators)
        self._fallback = FixedSizeChunker(
            chunk_size=chunk_size,
            overlap=self.overlap,
            unit="char",
        )

    def split_text(self, text: str) -> list[str]:
        """Split text recursively."""
        if not text or not text.strip():
            return []

        if self.chunk_size <= 0:
            logger.warning(
                f"Chunk size {self.chunk_size} is not positive, keeping text as a single chunk"
            )
            return [text]

        return self._split(text, self.separators)

    def _split(self, text: str, separators: list[str]) -> list[str]:
        if not text:
            return []

        if len(text) <= self.chunk_size and (not separators or separators == [""]):
            return [text] if text.strip() else []

        if not separators or separators[0] == "":
            return self._fallback.split_text(text)

        separator, remaining = separators[0], separators[1:]

        pieces: list[str] = []
        for part in text.split(separator):
            if not part:
                continue
            if len(part) > self.chunk_size:
                pieces.extend(self._split(part, remaining))
            else:
                pieces.append(part)

        return [chunk for chunk in self._merge(pieces, separator) if chunk.strip()]

    def _merge(self, pieces: list[str], separator: str) -> list[str]:
        """Greedily join adjacent pieces into chunks of at most chunk_size."""
        chunks: list[str] = []
        buffer: list[str] = []
        buffer_len = 0

        for piece in pieces:
            added = len(piece) + (len(separator) if buffer else 0)

            if buffer and buffer_len + added > self.chunk_size:
                chunks.append(separator.join(buffer))
                buffer = [piece]
                buffer_len = len(piece)
            else:
                buffer.append(piece)
                buffer_len += added

        if buffer:
            chunks.append(separator.join(buffer))

        return chunks


def create_chunker(config: "DeskRagConfig") -> BaseChunker:
    """Build the chunker described by the configuration."""
    if config.chunk_strategy == "fixed":
        return FixedSizeChunker(
            chunk_size=config.chunk_size,
            overlap=config.chunk_overlap,
            unit=config.chunk_unit,
        )
    return RecursiveChunker(
        chunk_size=config.chunk_size,
        overlap=config.chunk_overlap,
    )
