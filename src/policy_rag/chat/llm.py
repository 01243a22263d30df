"""LLM initialisation — single place to swap providers.

Set ``OPENAI_BASE_URL`` to point at any OpenAI-compatible server
instead of the OpenAI cloud API.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from langchain_openai import ChatOpenAI

if TYPE_CHECKING:
    from policy_rag.config import Settings

logger = logging.getLogger(__name__)


def get_llm(settings: Settings) -> ChatOpenAI:
    """Return the configured streaming chat model."""
    kwargs: dict = {
        "model": settings.llm_model_name,
        "temperature": settings.llm_temperature,
        "api_key": settings.openai_api_key,
        "streaming": True,
    }
    if settings.openai_base_url:
        logger.info("Using OpenAI-compatible endpoint: %s", settings.openai_base_url)
        kwargs["base_url"] = settings.openai_base_url

    return ChatOpenAI(**kwargs)
