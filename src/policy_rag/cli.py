"""
Policy RAG CLI.

Commands:
- ingest: Load every PDF in the documents directory into Chroma
- serve: Run the HTTP API
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from policy_rag.config import get_settings
from policy_rag.exceptions import ConfigurationError
from policy_rag.logging_config import setup_logging

app = typer.Typer(
    name="policy-rag",
    help="Ingest PDF policies into Chroma and serve retrieval-augmented chat.",
    add_completion=False,
)

logger = logging.getLogger(__name__)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Policy RAG CLI."""
    level = "DEBUG" if debug else ("INFO" if verbose else "WARNING")
    setup_logging(level)


def _load_settings():
    try:
        return get_settings()
    except ConfigurationError as exc:
        typer.secho(f"Configuration error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2) from exc


@app.command()
def ingest(
    documents_dir: Optional[Path] = typer.Option(
        None, "--documents-dir", "-d", help="Directory of PDFs (default: $DOCUMENTS_DIR or ./documents)"
    ),
):
    """Chunk, embed and upsert every PDF in the documents directory."""
    from policy_rag.ingestion.pipeline import ingest_documents

    settings = _load_settings()
    result = ingest_documents(settings, documents_dir=documents_dir)

    if not result.success:
        typer.secho(f"Ingestion failed: {result.error}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.secho(f"Ingested {result.count} chunks from {len(result.files_processed)} file(s).", fg=typer.colors.GREEN)
    for name in result.files_skipped:
        typer.secho(f"  skipped: {name}", fg=typer.colors.YELLOW)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(3000, help="Bind port"),
):
    """Run the chat API with uvicorn."""
    import uvicorn

    from policy_rag.serving.app import create_app

    settings = _load_settings()
    uvicorn.run(create_app(settings=settings), host=host, port=port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    app()
