"""
Chat assistant backend.
Ties document ingestion, retrieval and streaming generation together.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Any, Awaitable, Optional, TypeVar

from deskrag.core.message import Message
from deskrag.events import EventSink, StreamEvent
from deskrag.exceptions import DirectoryReadError, ModelServiceError
from deskrag.providers.base import ChatProvider
from deskrag.providers.ollama import OllamaProvider
from deskrag.rag import (
    AugmentationPolicy,
    AugmentedPrompt,
    BaseChunker,
    BaseEmbedding,
    BaseVectorStore,
    IngestionPipeline,
    LoadResult,
    MemoryVectorStore,
    OllamaEmbedding,
    VectorRetriever,
    create_chunker,
)
from deskrag.utils.config import DeskRagConfig
from deskrag.utils.logging import get_logger, set_log_level

logger = get_logger(__name__)

T = TypeVar("T")


class ChatAssistant:
    """
    Backend of the desktop chat assistant.

    This class manages:
    - Loading a directory of personal documents into the vector store
    - Retrieval and relevance gating for each chat turn
    - Streaming the model's answer to an event sink
    """

    def __init__(
        self,
        config: Optional[DeskRagConfig] = None,
        provider: Optional[ChatProvider] = None,
        embedding: Optional[BaseEmbedding] = None,
        vectorstore: Optional[BaseVectorStore] = None,
        chunker: Optional[BaseChunker] = None,
        events: Optional[EventSink] = None,
    ):
        self.config = config or DeskRagConfig()
        set_log_level(self.config.log_level)
        self.provider = provider or OllamaProvider(
            base_url=self.config.ollama_base_url,
            timeout=self.config.request_timeout,
        )
        self.embedding = embedding or OllamaEmbedding(
            model=self.config.embedding_model,
            provider=self.provider,
        )
        self.vectorstore = vectorstore or MemoryVectorStore()
        self.pipeline = IngestionPipeline(
            embedding=self.embedding,
            vectorstore=self.vectorstore,
            chunker=chunker or create_chunker(self.config),
            extensions=self.config.supported_extensions,
        )
        self.retriever = VectorRetriever(self.embedding, self.vectorstore)
        self.policy = AugmentationPolicy.from_config(self.config)
        self.events = events or EventSink()

        self._tasks: set[asyncio.Task[Any]] = set()
        self._closed = False

    async def __aenter__(self) -> "ChatAssistant":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.shutdown()

    async def load_personal_data(self, directory: str | Path | None) -> LoadResult:
        """
        Replace the loaded corpus with the documents in a directory.

        Args:
            directory: Directory chosen by the user, None or empty if the
                picker was dismissed. Dismissal leaves the corpus untouched.

        Returns:
            LoadResult summarizing the load

        Raises:
            asyncio.CancelledError: If shutdown() interrupts the load. The
                store is left empty.
        """
        self._ensure_open()

        if not directory:
            result = LoadResult.cancelled()
            logger.info(result.message)
            return result

        logger.info(f"Starting to load personal data from {directory}")
        try:
            return await self._run_tracked(self.pipeline.load_directory(directory))
        except DirectoryReadError as e:
            logger.error(e.message)
            return LoadResult.failed(str(directory), e.message)

    async def prepare_prompt(self, user_input: str) -> AugmentedPrompt:
        """
        Embed the query, rank the corpus and apply the relevance policy.

        Raises:
            ModelServiceError: If the query cannot be embedded
        """
        query_vector = await self.embedding.embed_query(user_input)
        results = await self.retriever.find_relevant_chunks(query_vector, self.config.top_n)
        return self.policy.apply(user_input, results)

    async def handle_message(self, user_input: str) -> asyncio.Task[str]:
        """
        Answer one chat turn.

        Sources are sent to the event sink before generation starts. The
        answer is streamed by a background task, which is returned without
        being awaited; its result is the full answer text.

        Raises:
            ModelServiceError: If the query cannot be embedded. A final
                error event is emitted first.
            ValueError: If user_input is blank.
            asyncio.CancelledError: If shutdown() interrupts the query embedding.
        """
        self._ensure_open()
        logger.info(f"Handling message: {user_input[:100]}")

        try:
            augmented = await self._run_tracked(self.prepare_prompt(user_input))
        except (ModelServiceError, ValueError) as e:
            error = f"Error getting embedding for your message: {e}"
            logger.error(error)
            await self.events.on_stream_event(StreamEvent(done=True, error=error))
            raise

        logger.info(f"Emitting {len(augmented.sources)} sources")
        await self.events.on_sources(augmented.sources)

        messages = [Message.user(augmented.prompt).to_api_format()]
        return self._track(asyncio.create_task(self._stream_response(messages)))

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("ChatAssistant has been shut down")

    def _track(self, task: asyncio.Task[T]) -> asyncio.Task[T]:
        """Register a task so shutdown() can cancel it."""
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run_tracked(self, work: Awaitable[T]) -> T:
        """Run model-service work as a task that shutdown() can cancel."""
        return await self._track(asyncio.ensure_future(work))

    async def _stream_response(self, messages: list[dict[str, Any]]) -> str:
        """Stream the answer to the event sink and finish with a done event."""
        start = time.perf_counter()
        fragments: list[str] = []
        total_chars = 0
        error: str | None = None

        try:
            async for fragment in self.provider.stream(messages, model=self.config.chat_model):
                fragments.append(fragment)
                total_chars += len(fragment)
                await self.events.on_stream_event(StreamEvent(content=fragment))
        except asyncio.CancelledError:
            logger.info("Chat stream cancelled")
            raise
        except ModelServiceError as e:
            error = e.message
            logger.error(f"Chat stream failed: {error}")
        except Exception as e:
            error = f"Unexpected error while streaming response: {str(e) or type(e).__name__}"
            logger.exception(error)
        finally:
            elapsed = time.perf_counter() - start
            chars_per_second = total_chars / elapsed if elapsed > 0 and total_chars > 0 else 0.0
            logger.info(
                f"Chat stream finished. Chars: {total_chars}, "
                f"Duration: {elapsed * 1000:.2f} ms, Chars/s: {chars_per_second:.2f}"
            )
            await self.events.on_stream_event(StreamEvent(
                done=True,
                error=error,
                duration_ms=int(elapsed * 1000),
                chars_per_second=chars_per_second,
            ))

        return "".join(fragments)

    async def shutdown(self) -> None:
        """Cancel in-flight loads and answers, then release the model service client."""
        self._closed = True

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        await self.provider.aclose()
        logger.info("Assistant shut down")
