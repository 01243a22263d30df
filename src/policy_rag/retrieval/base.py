"""Abstract base class for vector-store backends.

Adding a new backend only requires subclassing :class:`VectorStoreBase`
and implementing the abstract methods.  Ingestion and chat are
backend-agnostic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from policy_rag.exceptions import IngestionError
from policy_rag.retrieval.models import RetrievedChunk


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    def upsert(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, Any]],
    ) -> None:
        """Insert or overwrite records keyed by *ids*.

        All four lists must have the same length.

        Raises
        ------
        IngestionError
            On a length mismatch; nothing is written.
        """
        lengths = {
            "ids": len(ids),
            "embeddings": len(embeddings),
            "documents": len(documents),
            "metadatas": len(metadatas),
        }
        if len(set(lengths.values())) != 1:
            raise IngestionError(f"Upsert arrays differ in length: {lengths}")
        if not ids:
            return
        self._upsert(ids, embeddings, documents, metadatas)

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def _upsert(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, Any]],
    ) -> None:
        """Write a validated, non-empty batch to the backend."""
        ...

    @abstractmethod
    def similarity_search(self, query_embedding: list[float], *, k: int = 5) -> list[RetrievedChunk]:
        """Return the top-*k* stored chunks closest to *query_embedding*."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...
