"""Retrieval orchestrator: question → embedding → top-K → ladder → context → answer.

``RagOrchestrator.answer`` never raises. Every failure becomes a
ChatOutcome carrying a fixed, user-safe message; the details go to the log.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

import structlog

from ragdesk.errors import (
    EmbeddingProviderError,
    GenerationProviderError,
    InvalidQuestion,
    VectorIndexError,
)
from ragdesk.rag.gateways import EmbeddingGateway, Generator, VectorIndex
from ragdesk.rag.retriever import (
    GroundingRung,
    assemble_context,
    extract_sources,
    select_grounding,
)

logger = structlog.get_logger(__name__)

MSG_INVALID_QUESTION = "Please enter a valid question (at least 3 characters, including letters)."
MSG_EMBEDDING_FAILED = "I couldn't process your question. Please try again."
MSG_SEARCH_FAILED = "I couldn't search the documents right now. Please try again."
MSG_GENERATION_FAILED = "I couldn't generate an answer. Please try again."
MSG_INTERNAL = "An internal error occurred. Please try again later."

_LETTER = re.compile(r"[a-zA-ZÀ-ÖØ-öø-ÿ]")
_MIN_QUESTION_LENGTH = 3
_PREVIEW_CHARS = 100

DEFAULT_SUGGESTIONS = [
    "How many vacation days do I have?",
    "How do I request a leave of absence?",
    "What benefits are available to me?",
    "What is the remote work policy?",
    "Can I use personal devices for work?",
    "What are the security policies?",
    "What do I need to do on my first day?",
    "How does the performance review process work?",
]


@dataclass
class OrchestratorConfig:
    top_k: int = 5
    similarity_threshold: float = 0.6
    context_budget: int = 4000
    fallback_contact: str = "Human Resources"
    suggestions: list[str] = field(default_factory=lambda: list(DEFAULT_SUGGESTIONS))


@dataclass
class ChatOutcome:
    success: bool
    text: str = ""
    sources: list[str] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def ok(cls, text: str, sources: list[str] | None = None) -> ChatOutcome:
        return cls(success=True, text=text, sources=list(sources or []))

    @classmethod
    def failure(cls, error: str) -> ChatOutcome:
        return cls(success=False, error=error)


@dataclass
class RagStats:
    total_vectors: int
    healthy: bool

    @property
    def status(self) -> str:
        return "ready" if self.healthy else "error"


def validate_question(question: str | None) -> str:
    """Return the trimmed question.

    Raises:
        InvalidQuestion: If the question is blank, shorter than 3 characters,
            or contains no letter.
    """
    trimmed = (question or "").strip()
    if len(trimmed) < _MIN_QUESTION_LENGTH or not _LETTER.search(trimmed):
        raise InvalidQuestion(MSG_INVALID_QUESTION)
    return trimmed


class RagOrchestrator:
    """Answer questions grounded on the vector index.

    Args:
        embedder: Embedding gateway (must match the model used at ingest).
        index: Vector index to search.
        generator: Generative provider.
        config: Retrieval parameters.
    """

    def __init__(
        self,
        embedder: EmbeddingGateway,
        index: VectorIndex,
        generator: Generator,
        config: OrchestratorConfig | None = None,
    ) -> None:
        self._embedder = embedder
        self._index = index
        self._generator = generator
        self._config = config or OrchestratorConfig()

    def answer(self, question: str) -> ChatOutcome:
        try:
            return self._answer(question)
        except Exception:
            logger.exception("answer_crashed")
            return ChatOutcome.failure(MSG_INTERNAL)

    def _answer(self, question: str) -> ChatOutcome:
        try:
            question = validate_question(question)
        except InvalidQuestion as exc:
            return ChatOutcome.failure(str(exc))

        try:
            vector = self._embedder.embed(question)
            if not vector:
                raise EmbeddingProviderError("Empty embedding vector")
        except EmbeddingProviderError as exc:
            logger.error("question_embedding_failed", error=str(exc))
            return ChatOutcome.failure(MSG_EMBEDDING_FAILED)

        try:
            matches = self._index.query(vector, self._config.top_k)
        except VectorIndexError as exc:
            logger.error("vector_search_failed", error=str(exc))
            return ChatOutcome.failure(MSG_SEARCH_FAILED)
        self._log_matches(question, matches)

        grounding = select_grounding(matches, self._config.similarity_threshold)
        logger.info("grounding_selected", rung=grounding.rung.value, matches=len(grounding.matches))
        if grounding.rung is GroundingRung.NO_MATCHES:
            return ChatOutcome.ok(self.fallback_answer(question))

        context = assemble_context(grounding.matches, self._config.context_budget)
        sources = extract_sources(context.included)
        logger.debug(
            "context_assembled",
            chars=len(context.text),
            blocks=len(context.included),
            sources=len(sources),
        )

        try:
            text = self._generator.generate(question, context.text)
        except GenerationProviderError as exc:
            logger.error("generation_failed", error=str(exc))
            return ChatOutcome.failure(MSG_GENERATION_FAILED)
        if not text or not text.strip():
            logger.error("generation_empty")
            return ChatOutcome.failure(MSG_GENERATION_FAILED)

        logger.info("answer_generated", sources=len(sources))
        return ChatOutcome.ok(text, sources)

    def fallback_answer(self, question: str) -> str:
        """Templated reply used when the index returned no matches at all."""
        return (
            f'I couldn\'t find specific information about your question: "{question}".\n\n'
            "I suggest:\n"
            "• Rephrasing your question with different terms\n"
            f"• Contacting {self._config.fallback_contact} directly\n"
            "• Checking the employee handbook if one is available\n\n"
            "Is there anything more specific I can help you with?"
        )

    def suggested_questions(self) -> list[str]:
        return list(self._config.suggestions)

    def stats(self) -> RagStats:
        healthy = self._index.is_healthy()
        total = self._index.count() if healthy else 0
        return RagStats(total_vectors=total, healthy=healthy)

    def _log_matches(self, question: str, matches) -> None:
        logger.debug("search_results", question=question, count=len(matches))
        for rank, match in enumerate(matches, start=1):
            preview = match.text
            if len(preview) > _PREVIEW_CHARS:
                preview = preview[:_PREVIEW_CHARS] + "..."
            logger.debug(
                "search_result",
                rank=rank,
                id=match.id,
                similarity=round(match.similarity, 3),
                preview=preview,
            )
