"""Shared configuration loaded from environment / ``.env``."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from policy_rag.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Embedding + chat completion API
    openai_api_key: str = Field(min_length=1, description="API key for embeddings and chat completions")
    openai_base_url: str | None = Field(
        default=None,
        description="OpenAI-compatible endpoint. Leave unset to use the OpenAI cloud API.",
    )
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int | None = Field(default=None, ge=1)
    embedding_batch_size: int = Field(default=100, ge=1)
    embedding_max_retries: int = Field(
        default=0,
        ge=0,
        description="Retries per failed embedding batch. 0 aborts the run on the first failure.",
    )
    embedding_retry_backoff: float = Field(default=2.0, ge=0.0)

    llm_model_name: str = "gpt-4o-mini"
    llm_temperature: float = 0.0

    # Vector store
    chroma_host: str = Field(default="http://localhost:8000", description="Chroma server URL")
    chroma_collection: str = "kummatty_policies"

    # Ingestion
    documents_dir: Path = Path("documents")
    chunk_size: int = Field(default=1000, ge=1)
    chunk_overlap: int = Field(default=200, ge=0)

    # Chat
    retrieval_k: int = Field(default=5, ge=1)

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @model_validator(mode="after")
    def _check_chunking(self) -> Settings:
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than chunk_size ({self.chunk_size})"
            )
        return self

    @property
    def documents_path(self) -> Path:
        """``documents_dir`` resolved against the current working directory."""
        return (Path.cwd() / self.documents_dir).resolve()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Build the settings once per process.

    Raises
    ------
    ConfigurationError
        When ``OPENAI_API_KEY`` is unset or any value fails validation.
    """
    try:
        return Settings()
    except ValidationError as exc:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "settings" for err in exc.errors())
        raise ConfigurationError(f"Invalid configuration ({fields}): {exc}") from exc
