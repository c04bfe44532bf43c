"""
Test configuration and fixtures.
"""

import asyncio
from typing import Any, AsyncIterator

import pytest

from deskrag.events import EventSink, StreamEvent
from deskrag.exceptions import ServiceConnectionError
from deskrag.providers.base import ChatProvider
from deskrag.rag import BaseEmbedding, SourceInfo


class KeywordEmbedding(BaseEmbedding):
    """Embeds text as keyword counts, one dimension per keyword."""

    def __init__(self, keywords: list[str], fail_on: tuple[str, ...] = (), delay: float = 0.0):
        self.keywords = keywords
        self.fail_on = fail_on
        self.delay = delay
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")
        self.calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        if any(marker in text for marker in self.fail_on):
            raise ServiceConnectionError("http://localhost:11434/api/embeddings", "refused")
        lowered = text.lower()
        return [float(lowered.count(keyword)) for keyword in self.keywords]


class ScriptedProvider(ChatProvider):
    """Chat provider that replays fixed fragments and records requests."""

    def __init__(
        self,
        fragments: list[str] | None = None,
        error: Exception | None = None,
        hang: bool = False,
    ):
        self.fragments = fragments if fragments is not None else ["Hello", ", ", "world"]
        self.error = error
        self.hang = hang
        self.requests: list[list[dict[str, Any]]] = []
        self.closed = False

    async def embed(self, text: str, *, model: str = "test") -> list[float]:
        raise NotImplementedError

    async def stream(
        self,
        messages: list[dict[str, Any]],
        *,
        model: str = "test",
        **kwargs: Any
    ) -> AsyncIterator[str]:
        self.requests.append(messages)
        for fragment in self.fragments:
            yield fragment
        if self.hang:
            await asyncio.Event().wait()
        if self.error is not None:
            raise self.error

    async def aclose(self) -> None:
        self.closed = True


class RecordingEventSink(EventSink):
    """Collects every event the assistant emits."""

    def __init__(self):
        self.stream_events: list[StreamEvent] = []
        self.source_events: list[list[SourceInfo]] = []

    async def on_stream_event(self, event: StreamEvent) -> None:
        self.stream_events.append(event)

    async def on_sources(self, sources: list[SourceInfo]) -> None:
        self.source_events.append(sources)

    @property
    def final_event(self) -> StreamEvent:
        return self.stream_events[-1]


@pytest.fixture
def keyword_embedding():
    """Keyword embedding over a small weather/geography vocabulary."""
    return KeywordEmbedding(["sky", "blue", "paris", "france", "capital"])


@pytest.fixture
def event_sink():
    """A recording event sink."""
    return RecordingEventSink()


@pytest.fixture
def docs_dir(tmp_path):
    """A directory with two text files, a PDF and a subdirectory."""
    (tmp_path / "sky.txt").write_text("The sky is blue.", encoding="utf-8")
    (tmp_path / "PARIS.TXT").write_text("Paris is the capital of France.", encoding="utf-8")
    (tmp_path / "report.pdf").write_bytes(b"%PDF-1.4 sky sky sky")
    nested = tmp_path / "nested.txt"
    nested.mkdir()
    (nested / "inner.txt").write_text("The sky is blue inside.", encoding="utf-8")
    return tmp_path
