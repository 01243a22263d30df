"""Text chunking."""

from __future__ import annotations

import logging

from langchain_text_splitters import RecursiveCharacterTextSplitter

from policy_rag.ingestion.models import Chunk

logger = logging.getLogger(__name__)

SEPARATORS = ["\n\n", "\n", " ", ""]


def split_text(text: str, chunk_size: int = 1000, chunk_overlap: int = 200) -> list[str]:
    """Split *text* into overlapping windows of at most *chunk_size* characters.

    Parameters
    ----------
    text:
        Full extracted text of one document.
    chunk_size:
        Maximum number of characters per chunk.
    chunk_overlap:
        Number of overlapping characters between consecutive chunks.

    Returns
    -------
    list[str]
        Chunks in document order; empty for whitespace-only input.
    """
    if chunk_overlap >= chunk_size:
        raise ValueError(f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})")
    if not text.strip():
        return []

    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        length_function=len,
        separators=SEPARATORS,
    )
    return splitter.split_text(text)


def build_chunks(
    source: str,
    text: str,
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
) -> list[Chunk]:
    """Split *text* and tag each piece with *source* and its index."""
    pieces = split_text(text, chunk_size=chunk_size, chunk_overlap=chunk_overlap)
    logger.info("Split %s into %d chunks", source, len(pieces))
    return [Chunk(text=piece, source=source, chunk_index=i) for i, piece in enumerate(pieces)]
