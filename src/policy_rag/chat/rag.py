"""Retrieval + generation routine behind the chat endpoint."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from policy_rag.chat.prompts import build_chat_prompt

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

    from policy_rag.config import Settings
    from policy_rag.ingestion.embedder import BatchEmbedder
    from policy_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


class PolicyChat:
    """Answer questions from the policy collection.

    Parameters
    ----------
    store:
        Vector store holding the ingested chunks.
    embedder:
        Embeds the incoming question with the ingestion model.
    llm:
        A LangChain chat model supporting ``.stream()``.
    k:
        Number of chunks placed in the prompt.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: BatchEmbedder,
        llm: BaseChatModel,
        *,
        k: int = 5,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.llm = llm
        self.k = k

    @classmethod
    def from_settings(cls, settings: Settings) -> PolicyChat:
        """Build the production chat routine (connects to Chroma)."""
        from policy_rag.chat.llm import get_llm
        from policy_rag.ingestion.embedder import build_embedder
        from policy_rag.retrieval.chroma_store import ChromaVectorStore

        store = ChromaVectorStore(settings.chroma_collection, url=settings.chroma_host)
        return cls(store, build_embedder(settings), get_llm(settings), k=settings.retrieval_k)

    def stream(self, query: str) -> Iterator[str]:
        """Yield the answer to *query* as text deltas.

        Retrieval happens on the first ``next()``; errors surface there.
        """
        embedding = self.embedder.embed_query(query)
        chunks = self.store.similarity_search(embedding, k=self.k)
        logger.info(
            "Retrieved %d chunk(s) for query: %s",
            len(chunks), " ".join(c.short_ref() for c in chunks) or "-",
        )

        for message in self.llm.stream(build_chat_prompt(query, chunks)):
            text = _content_text(message.content)
            if text:
                yield text


def _content_text(content: Any) -> str:
    """Flatten a message chunk's content to plain text."""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


def run_rag_chat(query: str, settings: Settings | None = None) -> Iterator[str]:
    """Convenience entry point: build collaborators and stream an answer."""
    if settings is None:
        from policy_rag.config import get_settings

        settings = get_settings()
    return PolicyChat.from_settings(settings).stream(query)
