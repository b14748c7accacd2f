"""Capability interfaces for the remote collaborators, plus LiteLLM implementations.

The orchestration code depends only on the abstract classes, so tests can
swap in deterministic stand-ins (fixed vectors, canned matches).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import structlog

from ragdesk.db.models import SearchResult
from ragdesk.errors import EmbeddingProviderError, GenerationProviderError
from ragdesk.rag import llm_client
from ragdesk.rag.prompts import PromptConfig, build_messages

logger = structlog.get_logger(__name__)


class EmbeddingGateway(ABC):
    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Return the embedding vector for *text*.

        Raises:
            EmbeddingProviderError: On provider failure or an empty vector.
        """


class Generator(ABC):
    @abstractmethod
    def generate(self, question: str, context: str) -> str:
        """Return the generated answer to *question* grounded on *context*.

        *context* may be empty; implementations must then omit it from the prompt.

        Raises:
            GenerationProviderError: On provider failure.
        """


class VectorIndex(ABC):
    """Stores ``(id, vector, metadata)`` triples and answers top-K queries."""

    @abstractmethod
    def upsert(self, record_id: str, vector: list[float], metadata: dict[str, str]) -> None:
        """Insert or replace a record. Raises VectorIndexError on failure."""

    @abstractmethod
    def query(self, vector: list[float], top_k: int) -> list[SearchResult]:
        """Return up to *top_k* matches, best (highest similarity) first."""

    @abstractmethod
    def delete_by_document(self, document_id: str) -> int:
        """Delete every record owned by *document_id*. Returns the number removed."""

    @abstractmethod
    def count(self) -> int:
        """Total number of stored records."""

    def is_healthy(self) -> bool:
        try:
            self.count()
        except Exception:
            return False
        return True


# ------------------------------------------------------------------
# LiteLLM-backed implementations
# ------------------------------------------------------------------


@dataclass
class EmbedderConfig:
    model: str = "gemini/text-embedding-004"
    timeout: float = 30.0
    num_retries: int = 3


class LiteLLMEmbedder(EmbeddingGateway):
    """Embedding gateway routed through ``llm_client.embed``."""

    def __init__(self, config: EmbedderConfig | None = None) -> None:
        self._config = config or EmbedderConfig()

    @property
    def model(self) -> str:
        return self._config.model

    def embed(self, text: str) -> list[float]:
        try:
            vector = llm_client.embed(
                self._config.model,
                text,
                num_retries=self._config.num_retries,
                timeout=self._config.timeout,
            )
        except Exception as exc:
            logger.warning("embedding_request_failed", model=self._config.model, error=str(exc))
            raise EmbeddingProviderError("Embedding provider request failed") from exc
        if not vector:
            raise EmbeddingProviderError("Embedding provider returned an empty vector")
        return list(vector)


class LiteLLMGenerator(Generator):
    """Generative provider routed through ``llm_client.complete``."""

    def __init__(self, config: PromptConfig | None = None, num_retries: int = 3) -> None:
        self._config = config or PromptConfig()
        self._num_retries = num_retries

    def generate(self, question: str, context: str) -> str:
        messages = build_messages(question, context, self._config)
        try:
            return llm_client.complete(
                model=self._config.model,
                messages=messages,
                max_tokens=self._config.max_tokens,
                temperature=self._config.temperature,
                num_retries=self._num_retries,
                timeout=self._config.timeout,
            )
        except Exception as exc:
            logger.warning("generation_request_failed", model=self._config.model, error=str(exc))
            raise GenerationProviderError("Generation provider request failed") from exc
