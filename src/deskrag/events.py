"""
Events delivered to the presentation layer.
"""

from pydantic import BaseModel

from deskrag.rag.document import SourceInfo


class StreamEvent(BaseModel):
    """One item of the answer stream.

    Intermediate events carry a text fragment. The final event has
    ``done=True`` and carries timing, plus the error text when the turn
    failed.
    """
    content: str = ""
    done: bool = False
    error: str | None = None
    duration_ms: int | None = None
    chars_per_second: float | None = None


class EventSink:
    """
    Receiver for assistant events.

    Subclass and override the hooks you need; the defaults do nothing.
    """

    async def on_stream_event(self, event: StreamEvent) -> None:
        """Called for every answer fragment and once at the end of a turn."""

    async def on_sources(self, sources: list[SourceInfo]) -> None:
        """Called once per turn, before generation starts, possibly with no sources."""
