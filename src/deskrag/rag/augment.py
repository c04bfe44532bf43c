"""Relevance gating and retrieval-augmented prompt assembly."""

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from .document import SearchResult, SourceInfo

if TYPE_CHECKING:
    from deskrag.utils.config import DeskRagConfig

logger = logging.getLogger(__name__)

CONTEXT_PREAMBLE = "Use the following context to answer the user's question:\n\n"
CHUNK_DELIMITER = "\n\n---\n\n"


def build_context_prompt(user_input: str, results: list[SearchResult]) -> str:
    """Prefix the user's question with the text of the retrieved chunks."""
    parts = [CONTEXT_PREAMBLE]

    for i, result in enumerate(results):
        record = result.record
        parts.append(
            f"Context from document '{record.source_name}' "
            f"(Chunk {record.id}, Relevance: {result.score:.2f}):\n"
        )
        parts.append(record.text)
        parts.append(CHUNK_DELIMITER if i < len(results) - 1 else "\n\n")

    parts.append(f"User's question: {user_input}")
    return "".join(parts)


@dataclass
class AugmentedPrompt:
    """The message to send for one turn and the sources behind it.

    Attributes:
        prompt: Text of the single user message
        used_context: Whether retrieved chunks were included
        sources: Sources to show the user, in rank order
        top_score: Best similarity found, None when nothing was retrieved
    """

    prompt: str
    used_context: bool = False
    sources: list[SourceInfo] = field(default_factory=list)
    top_score: Optional[float] = None


class AugmentationPolicy:
    """Decides whether retrieved chunks are relevant enough to use.

    With the relevance gate on, context is used only when the best score
    reaches ``relevance_threshold``. With ``filter_low_relevance_chunks``
    on, chunks under the threshold are also dropped from accepted context.
    """

    def __init__(
        self,
        relevance_threshold: float = 0.5,
        use_relevance_gate: bool = True,
        filter_low_relevance_chunks: bool = False,
        report_low_relevance_sources: bool = True,
    ):
        self.relevance_threshold = relevance_threshold
        self.use_relevance_gate = use_relevance_gate
        self.filter_low_relevance_chunks = filter_low_relevance_chunks
        self.report_low_relevance_sources = report_low_relevance_sources

    @classmethod
    def from_config(cls, config: "DeskRagConfig") -> "AugmentationPolicy":
        return cls(
            relevance_threshold=config.relevance_threshold,
            use_relevance_gate=config.use_relevance_gate,
            filter_low_relevance_chunks=config.filter_low_relevance_chunks,
            report_low_relevance_sources=config.report_low_relevance_sources,
        )

    def apply(self, user_input: str, results: list[SearchResult]) -> AugmentedPrompt:
        """Build the prompt for user_input from ranked results."""
        if not results:
            logger.info("No relevant chunks found. Using original user input.")
            return AugmentedPrompt(prompt=user_input)

        top_score = results[0].score

        if self.use_relevance_gate and top_score < self.relevance_threshold:
            logger.info(
                f"Top score {top_score:.4f} < {self.relevance_threshold:.2f}. "
                f"Skipping context, using original user input."
            )
            return self._without_context(user_input, results)

        selected = results
        if self.filter_low_relevance_chunks:
            selected = [r for r in results if r.score >= self.relevance_threshold]
            if not selected:
                return self._without_context(user_input, results)

        prompt = build_context_prompt(user_input, selected)
        logger.info(
            f"Constructed context prompt ({len(prompt)} chars) from {len(selected)} chunks, "
            f"top score {top_score:.4f}"
        )
        return AugmentedPrompt(
            prompt=prompt,
            used_context=True,
            sources=[result.to_source() for result in selected],
            top_score=top_score,
        )

    def _without_context(self, user_input: str, results: list[SearchResult]) -> AugmentedPrompt:
        sources = (
            [result.to_source() for result in results]
            if self.report_low_relevance_sources
            else []
        )
        return AugmentedPrompt(prompt=user_input, sources=sources, top_score=results[0].score)
