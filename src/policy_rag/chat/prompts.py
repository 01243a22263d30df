"""Prompt templates for policy question answering."""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage

    from policy_rag.retrieval.models import RetrievedChunk

SYSTEM_PROMPT = """\
You are an assistant that answers questions about the organisation's policy documents.

Rules:
- Answer ONLY from the numbered context passages.
- Cite passages inline as [1], [2], … matching their numbers.
- If the context does not contain the answer, say so plainly and do not guess.
- Keep answers concise; quote policy wording when precision matters.
"""

NO_CONTEXT = "(no matching policy passages were found)"


def build_chat_prompt(query: str, chunks: list[RetrievedChunk]) -> list[BaseMessage]:
    """Assemble the messages for one retrieval-augmented answer.

    Parameters
    ----------
    query:
        The user question.
    chunks:
        Retrieved context, best match first.

    Returns
    -------
    list[BaseMessage]
        A list of LangChain message objects ready for ``.stream()``.
    """
    context = _format_chunks_numbered(chunks) if chunks else NO_CONTEXT
    user_msg = (
        f"Context passages:\n{context}\n\n"
        f"Question: {query}\n\n"
        "Answer using the context above."
    )
    return [
        SystemMessage(content=SYSTEM_PROMPT),
        HumanMessage(content=user_msg),
    ]


def _format_chunks_numbered(chunks: list[RetrievedChunk]) -> str:
    """Numbered listing suitable for citation references [1], [2], …"""
    parts: list[str] = []
    for i, chunk in enumerate(chunks, 1):
        index = chunk.chunk_index if chunk.chunk_index is not None else "?"
        score_str = f", score={chunk.score:.3f}" if chunk.score is not None else ""
        parts.append(f"[{i}] source={chunk.source} §{index}{score_str}\n{chunk.content}")
    return "\n\n".join(parts)
