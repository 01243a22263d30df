"""
Chat — retrieval-augmented answers over the ingested policies.

:class:`PolicyChat` embeds the question, pulls the closest chunks from
the vector store and streams the model's answer token by token.
"""

from policy_rag.chat.rag import PolicyChat, run_rag_chat

__all__ = ["PolicyChat", "run_rag_chat"]
