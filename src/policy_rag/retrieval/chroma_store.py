"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

import chromadb

from policy_rag.exceptions import VectorStoreConnectionError
from policy_rag.retrieval.base import VectorStoreBase
from policy_rag.retrieval.models import RetrievedChunk

logger = logging.getLogger(__name__)


def parse_chroma_url(url: str) -> tuple[str, int, bool]:
    """Split a Chroma server URL into ``(host, port, ssl)``.

    A bare ``host[:port]`` is treated as plain HTTP.  The port defaults
    to 443 for https and 8000 otherwise.
    """
    if "://" not in url:
        url = f"http://{url}"
    parsed = urlparse(url)
    if not parsed.hostname:
        raise VectorStoreConnectionError(f"Invalid Chroma URL: {url!r}")
    ssl = parsed.scheme == "https"
    try:
        port = parsed.port or (443 if ssl else 8000)
    except ValueError as exc:
        raise VectorStoreConnectionError(f"Invalid Chroma URL: {url!r}") from exc
    return parsed.hostname, port, ssl


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    The constructor connects and gets-or-creates the collection, so a
    successfully built instance is ready for upserts.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    url:
        Chroma server URL, e.g. ``http://localhost:8000``.
    """

    def __init__(self, collection_name: str, *, url: str = "http://localhost:8000") -> None:
        super().__init__(collection_name)
        self.url = url
        host, port, ssl = parse_chroma_url(url)
        logger.info("Attempting to connect to Chroma at: %s", url)
        try:
            self._client = chromadb.HttpClient(host=host, port=port, ssl=ssl)
            self._collection = self._client.get_or_create_collection(name=collection_name)
        except Exception as exc:
            logger.error("Error connecting to Chroma at %s: %s", url, exc)
            raise VectorStoreConnectionError(
                f"Failed to connect to Chroma. Ensure the service is running at {url}"
            ) from exc
        logger.info("Connected to Chroma; using collection %r", collection_name)

    # -- VectorStoreBase overrides --------------------------------------------

    def _upsert(
        self,
        ids: list[str],
        embeddings: list[list[float]],
        documents: list[str],
        metadatas: list[dict[str, Any]],
    ) -> None:
        self._collection.upsert(
            ids=ids,
            embeddings=embeddings,
            documents=documents,
            metadatas=metadatas,
        )

    def similarity_search(self, query_embedding: list[float], *, k: int = 5) -> list[RetrievedChunk]:
        results = self._collection.query(
            query_embeddings=[query_embedding],
            n_results=k,
            include=["documents", "metadatas", "distances"],
        )

        ids = (results.get("ids") or [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        hits: list[RetrievedChunk] = []
        for doc_id, content, meta, dist in zip(ids, docs, metas, distances):
            meta = meta or {}
            hits.append(
                RetrievedChunk(
                    id=doc_id,
                    content=content or "",
                    source=meta.get("source", "unknown"),
                    chunk_index=meta.get("chunk_index"),
                    # Chroma returns distances; map to a 0-1 similarity score.
                    score=1.0 / (1.0 + dist),
                )
            )
        return hits

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
