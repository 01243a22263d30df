"""Shared pytest configuration and fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from langchain_core.embeddings import Embeddings

from policy_rag.config import Settings, get_settings
from policy_rag.retrieval.base import VectorStoreBase
from policy_rag.retrieval.models import RetrievedChunk


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ───────────────────────────────────────────────────────────────


class FakeVectorStore(VectorStoreBase):
    """In-memory store keyed by record id, with canned search hits."""

    def __init__(self, hits: list[RetrievedChunk] | None = None) -> None:
        super().__init__("test-collection")
        self.records: dict[str, dict[str, Any]] = {}
        self.upsert_calls: list[list[str]] = []
        self.hits = hits or []
        self.last_query: list[float] | None = None

    def _upsert(self, ids, embeddings, documents, metadatas) -> None:  # noqa: ANN001
        self.upsert_calls.append(list(ids))
        for rid, emb, doc, meta in zip(ids, embeddings, documents, metadatas):
            self.records[rid] = {"embedding": emb, "document": doc, "metadata": meta}

    def similarity_search(self, query_embedding: list[float], *, k: int = 5) -> list[RetrievedChunk]:
        self.last_query = query_embedding
        return self.hits[:k]

    def health_check(self) -> bool:
        return True


class CountingEmbeddings(Embeddings):
    """Deterministic embeddings that record every request."""

    def __init__(self, dim: int = 4) -> None:
        self.dim = dim
        self.calls: list[list[str]] = []

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [[float(len(t))] * self.dim for t in texts]

    def embed_query(self, text: str) -> list[float]:
        return [1.0] * self.dim


# ── PDF writer ──────────────────────────────────────────────────────────


def write_text_pdf(path: Path, pages: list[str]) -> Path:
    """Write a minimal PDF with one Helvetica text line per page."""
    page_ids = [4 + 2 * i for i in range(len(pages))]
    kids = " ".join(f"{pid} 0 R" for pid in page_ids)
    objects: dict[int, bytes] = {
        1: b"<< /Type /Catalog /Pages 2 0 R >>",
        2: f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode(),
        3: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    }
    for pid, text in zip(page_ids, pages):
        content = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode("latin-1")
        objects[pid] = (
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {pid + 1} 0 R >>"
        ).encode()
        objects[pid + 1] = f"<< /Length {len(content)} >>\nstream\n".encode() + content + b"\nendstream"

    out = bytearray(b"%PDF-1.4\n")
    offsets: dict[int, int] = {}
    for num in sorted(objects):
        offsets[num] = len(out)
        out += f"{num} 0 obj\n".encode() + objects[num] + b"\nendobj\n"

    xref_at = len(out)
    size = max(objects) + 1
    out += f"xref\n0 {size}\n".encode()
    out += b"0000000000 65535 f \n"
    for num in range(1, size):
        out += f"{offsets[num]:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {size} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode()

    path.write_bytes(bytes(out))
    return path


# ── Fixtures ────────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def settings(tmp_path) -> Settings:  # noqa: ANN001
    return Settings(
        _env_file=None,
        openai_api_key="test-key",
        documents_dir=tmp_path / "documents",
    )


@pytest.fixture()
def fake_store() -> FakeVectorStore:
    return FakeVectorStore()


@pytest.fixture()
def fake_embeddings() -> CountingEmbeddings:
    return CountingEmbeddings()


@pytest.fixture()
def make_text_pdf():
    return write_text_pdf
