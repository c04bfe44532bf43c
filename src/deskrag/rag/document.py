"""Document and chunk record data structures for RAG."""

from typing import Optional

from pydantic import BaseModel, Field


class Document(BaseModel):
    """A raw text document handed to the ingestion pipeline.

    Attributes:
        source_name: Identifier of the originating document (usually the file name)
        content: The raw text content of the document
        path: Optional full path the content was read from
    """

    source_name: str
    content: str
    path: Optional[str] = None

    def __repr__(self) -> str:
        content_preview = self.content[:50] + "..." if len(self.content) > 50 else self.content
        return f"Document(source_name={self.source_name!r}, content={content_preview!r})"


class ChunkRecord(BaseModel):
    """A stored chunk, the unit of retrieval.

    Attributes:
        id: Sequential id, starting at 1 for every loaded corpus
        text: The chunk's literal content
        vector: Embedding vector of the text
        source_name: Originating document, used for provenance only
    """

    id: int
    text: str
    vector: list[float] = Field(default_factory=list)
    source_name: str

    def __repr__(self) -> str:
        content_preview = self.text[:30] + "..." if len(self.text) > 30 else self.text
        return f"ChunkRecord(id={self.id}, source={self.source_name!r}, text={content_preview!r})"


class SourceInfo(BaseModel):
    """Provenance of a retrieved chunk, as shown to the user."""

    file_name: str
    chunk_id: int
    score: float


class SearchResult(BaseModel):
    """A chunk record annotated with its similarity to a query.

    Attributes:
        record: The matching chunk record
        score: Cosine similarity (higher is better)
    """

    record: ChunkRecord
    score: float

    def to_source(self) -> SourceInfo:
        return SourceInfo(
            file_name=self.record.source_name,
            chunk_id=self.record.id,
            score=self.score,
        )

    def __repr__(self) -> str:
        return f"SearchResult(chunk_id={self.record.id}, score={self.score:.4f})"
