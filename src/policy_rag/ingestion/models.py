"""Data models passed between ingestion steps."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Chunk(BaseModel):
    """A bounded slice of a document's extracted text.

    Identity is ``(source, chunk_index)``; :attr:`record_id` is the stable
    vector-store key derived from it, so re-ingesting an unchanged file
    overwrites the same records.
    """

    text: str
    source: str
    chunk_index: int = Field(ge=0)

    @property
    def record_id(self) -> str:
        return f"{self.source}-{self.chunk_index}"

    @property
    def metadata(self) -> dict[str, Any]:
        return {"source": self.source, "chunk_index": self.chunk_index}


class IngestionResult(BaseModel):
    """Outcome of one ingestion run.

    Attributes
    ----------
    success:
        ``False`` when the run aborted; ``error`` then says why.
    count:
        Total chunks upserted across all files (0 on failure).
    files_processed:
        Files whose chunks were upserted.
    files_skipped:
        Files skipped for empty text, zero chunks or parse errors.
    """

    success: bool
    count: int = 0
    error: str | None = None
    files_processed: list[str] = Field(default_factory=list)
    files_skipped: list[str] = Field(default_factory=list)

    @classmethod
    def failure(cls, error: str) -> IngestionResult:
        return cls(success=False, count=0, error=error)
