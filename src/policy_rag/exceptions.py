"""Exception hierarchy shared by ingestion, retrieval and serving."""

from __future__ import annotations


class PolicyRAGError(Exception):
    """Base class for every error raised by this package."""


class ConfigurationError(PolicyRAGError):
    """Required configuration is missing or inconsistent."""


class VectorStoreConnectionError(PolicyRAGError):
    """The vector database could not be reached or the collection opened."""


class DocumentExtractionError(PolicyRAGError):
    """A single document could not be parsed.  Callers skip the file."""


class EmbeddingError(PolicyRAGError):
    """The embedding service failed for a batch after all retries."""


class IngestionError(PolicyRAGError):
    """An ingestion precondition was violated."""
