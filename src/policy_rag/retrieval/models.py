"""Domain models for retrieval results."""

from __future__ import annotations

from pydantic import BaseModel


class RetrievedChunk(BaseModel):
    """A stored chunk returned by similarity search.

    Attributes
    ----------
    id:
        Vector-store record id (``"{source}-{chunk_index}"``).
    content:
        The chunk text.
    source:
        Filename of the originating PDF.
    chunk_index:
        Ordinal position of the chunk within its source.
    score:
        Similarity score in ``(0, 1]``, higher is closer.
    """

    id: str
    content: str
    source: str = "unknown"
    chunk_index: int | None = None
    score: float | None = None

    def short_ref(self) -> str:
        """Return a compact ``[source§chunk]`` reference string."""
        chunk = self.chunk_index if self.chunk_index is not None else "?"
        return f"[{self.source}§{chunk}]"
