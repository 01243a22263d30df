"""
Retrieval — vector-store access for ingestion upserts and chat search.

Public surface
--------------
- :class:`VectorStoreBase` — abstract backend.
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`RetrievedChunk` — a search hit with its provenance.
"""

from policy_rag.retrieval.base import VectorStoreBase
from policy_rag.retrieval.models import RetrievedChunk

__all__ = [
    "ChromaVectorStore",
    "RetrievedChunk",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from policy_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
