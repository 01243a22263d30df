"""Batched embedding client."""

from __future__ import annotations

import logging
import math
import time
from typing import TYPE_CHECKING

from langchain_openai import OpenAIEmbeddings

from policy_rag.exceptions import EmbeddingError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from policy_rag.config import Settings

logger = logging.getLogger(__name__)


class BatchEmbedder:
    """Embed texts in fixed-size batches with an explicit retry policy.

    Parameters
    ----------
    embeddings:
        Any LangChain ``Embeddings`` implementation.  Production uses
        ``OpenAIEmbeddings``; tests inject fakes.
    batch_size:
        Maximum number of texts sent per request.
    max_retries:
        Extra attempts per failed batch.  ``0`` means the first failure
        raises.
    backoff:
        Base of the exponential wait between attempts, in seconds.
    """

    def __init__(
        self,
        embeddings: Embeddings,
        *,
        batch_size: int = 100,
        max_retries: int = 0,
        backoff: float = 2.0,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        self._embeddings = embeddings
        self.batch_size = batch_size
        self.max_retries = max_retries
        self.backoff = backoff

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Return one vector per text, in input order.

        Raises
        ------
        EmbeddingError
            When a batch still fails after ``max_retries`` retries.
        """
        vectors: list[list[float]] = []
        total_batches = math.ceil(len(texts) / self.batch_size)
        for number, start in enumerate(range(0, len(texts), self.batch_size), 1):
            batch = texts[start : start + self.batch_size]
            vectors.extend(self._embed_batch(batch, number, total_batches))
            logger.info("  embedded %d / %d", len(vectors), len(texts))
        return vectors

    def embed_query(self, text: str) -> list[float]:
        """Embed a single search query."""
        try:
            return self._embeddings.embed_query(text)
        except Exception as exc:
            raise EmbeddingError(f"Failed to embed query: {exc}") from exc

    def _embed_batch(self, batch: list[str], number: int, total: int) -> list[list[float]]:
        attempts = self.max_retries + 1
        last_exc: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                vectors = self._embeddings.embed_documents(batch)
                if len(vectors) != len(batch):
                    raise EmbeddingError(
                        f"Embedding service returned {len(vectors)} vectors for {len(batch)} texts"
                    )
                return vectors
            except Exception as exc:
                last_exc = exc
                if attempt < attempts:
                    wait = self.backoff ** attempt
                    logger.warning(
                        "Retry %d/%d for embedding batch %d/%d (wait %.1fs): %s",
                        attempt, self.max_retries, number, total, wait, exc,
                    )
                    time.sleep(wait)
        raise EmbeddingError(
            f"Failed to generate embeddings for batch {number}/{total} "
            f"after {attempts} attempt(s): {last_exc}"
        ) from last_exc


def build_embedder(settings: Settings) -> BatchEmbedder:
    """Return the production embedder configured from *settings*."""
    kwargs: dict = {
        "model": settings.embedding_model,
        "api_key": settings.openai_api_key,
        # BatchEmbedder applies the retry policy.
        "max_retries": 0,
    }
    if settings.openai_base_url:
        kwargs["base_url"] = settings.openai_base_url
    if settings.embedding_dimensions:
        kwargs["dimensions"] = settings.embedding_dimensions

    return BatchEmbedder(
        OpenAIEmbeddings(**kwargs),
        batch_size=settings.embedding_batch_size,
        max_retries=settings.embedding_max_retries,
        backoff=settings.embedding_retry_backoff,
    )
