"""Ingestion driver — PDF directory → chunks → embeddings → vector store.

Files are processed one at a time.  Per-file content problems (parse
errors, empty text, no chunks) skip that file; every other error aborts
the run and is reported through :class:`IngestionResult` instead of
being raised.

Re-ingesting a file upserts the same ``"{filename}-{index}"`` ids, so an
unchanged file overwrites its previous records.  When a file shrinks to
fewer chunks, the surplus old records are left in the collection.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from policy_rag.exceptions import DocumentExtractionError, IngestionError, VectorStoreConnectionError
from policy_rag.ingestion.chunker import build_chunks
from policy_rag.ingestion.embedder import BatchEmbedder, build_embedder
from policy_rag.ingestion.loader import extract_pdf_text, list_pdf_files
from policy_rag.ingestion.models import IngestionResult
from policy_rag.retrieval.base import VectorStoreBase

if TYPE_CHECKING:
    from policy_rag.config import Settings

logger = logging.getLogger(__name__)


class DocumentIngestor:
    """Runs the ingestion loop against injected collaborators.

    Parameters
    ----------
    store:
        Destination vector store.
    embedder:
        Batched embedding client.
    chunk_size / chunk_overlap:
        Chunking parameters, in characters.
    extract_text:
        Callable returning the plain text of one PDF path.  Defaults to
        :func:`extract_pdf_text`.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: BatchEmbedder,
        *,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        extract_text: Callable[[Path], str] | None = None,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._extract_text = extract_text or extract_pdf_text

    def ingest_directory(self, directory: str | Path) -> IngestionResult:
        """Ingest every PDF directly under *directory*."""
        directory = Path(directory)
        try:
            files = list_pdf_files(directory)
            if not files:
                return IngestionResult.failure(f"No PDF files found in the directory: {directory}")

            result = IngestionResult(success=True)
            for path in files:
                added = self.ingest_file(path)
                if added is None:
                    result.files_skipped.append(path.name)
                    continue
                result.count += added
                result.files_processed.append(path.name)
                logger.info(
                    "File %s successfully ingested. Total chunks added/updated: %d",
                    path.name, result.count,
                )
        except Exception as exc:
            logger.error("INGESTION FAILED: %s", exc, exc_info=not isinstance(exc, IngestionError))
            return IngestionResult.failure(str(exc))

        logger.info(
            "Ingestion complete: %d chunks from %d file(s), %d skipped",
            result.count, len(result.files_processed), len(result.files_skipped),
        )
        return result

    def ingest_file(self, path: Path) -> int | None:
        """Ingest one PDF and return its chunk count, or ``None`` if skipped.

        Raises
        ------
        IngestionError
            If the chunk, vector, id and metadata counts disagree.
        EmbeddingError
            If an embedding batch fails.
        """
        logger.info("--- Processing file: %s ---", path.name)
        try:
            text = self._extract_text(path)
        except DocumentExtractionError as exc:
            logger.warning("Skipping %s: %s", path.name, exc)
            return None

        if not text.strip():
            logger.warning("Skipping %s: no extractable text (scanned or image-only PDF?)", path.name)
            return None

        chunks = build_chunks(path.name, text, chunk_size=self.chunk_size, chunk_overlap=self.chunk_overlap)
        if not chunks:
            logger.warning("Skipping %s: chunker produced no chunks", path.name)
            return None

        documents = [c.text for c in chunks]
        logger.info("Generating embeddings for %d chunks...", len(documents))
        embeddings = self.embedder.embed_texts(documents)
        ids = [c.record_id for c in chunks]
        metadatas = [c.metadata for c in chunks]

        if not len(chunks) == len(embeddings) == len(ids) == len(metadatas):
            raise IngestionError(
                f"{path.name}: {len(chunks)} chunks, {len(embeddings)} embeddings, "
                f"{len(ids)} ids, {len(metadatas)} metadatas"
            )

        self.store.upsert(ids=ids, embeddings=embeddings, documents=documents, metadatas=metadatas)
        return len(chunks)


def ingest_documents(
    settings: Settings | None = None,
    *,
    store: VectorStoreBase | None = None,
    embedder: BatchEmbedder | None = None,
    documents_dir: str | Path | None = None,
) -> IngestionResult:
    """Build collaborators from *settings* where not given and run ingestion.

    A vector store that cannot be reached yields a failure result.
    """
    if settings is None:
        from policy_rag.config import get_settings

        settings = get_settings()

    if store is None:
        from policy_rag.retrieval.chroma_store import ChromaVectorStore

        try:
            store = ChromaVectorStore(settings.chroma_collection, url=settings.chroma_host)
        except VectorStoreConnectionError as exc:
            logger.error("INGESTION FAILED: %s", exc)
            return IngestionResult.failure(str(exc))

    ingestor = DocumentIngestor(
        store,
        embedder or build_embedder(settings),
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
    )
    return ingestor.ingest_directory(documents_dir or settings.documents_path)
