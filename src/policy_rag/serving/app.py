"""FastAPI application exposing the policy chat as a REST API.

Run with::

    uvicorn policy_rag.serving.app:create_app --factory
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.concurrency import run_in_threadpool

from policy_rag import __version__
from policy_rag.config import get_settings
from policy_rag.ingestion.models import IngestionResult
from policy_rag.logging_config import setup_logging

if TYPE_CHECKING:
    from policy_rag.chat.rag import PolicyChat
    from policy_rag.config import Settings

logger = logging.getLogger(__name__)

MISSING_QUERY = "Missing query parameter in request body."
RAG_FAILURE = "An error occurred during RAG processing."


def create_app(
    chat: PolicyChat | None = None,
    ingest: Callable[[], IngestionResult] | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Build the API.

    Collaborators that are not injected are created from *settings*
    (``get_settings()`` by default), which raises ``ConfigurationError``
    immediately when the API key is missing.  The production chat
    routine connects to Chroma on the first chat request.
    """
    if chat is None or ingest is None:
        settings = settings or get_settings()
        setup_logging(settings.log_level)

    app = FastAPI(
        title="Policy RAG API",
        version=__version__,
        description="Chat over ingested PDF policy documents.",
    )
    app.state.chat = LazyChat(lambda: _build_chat(settings), instance=chat)
    get_chat = app.state.chat.get

    if ingest is None:
        from policy_rag.ingestion.pipeline import ingest_documents

        def run_ingest() -> IngestionResult:
            return ingest_documents(settings)

        ingest = run_ingest

    # ── Routes ────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/ready")
    async def ready() -> JSONResponse:
        """Readiness probe: the chat routine is built and its vector store answers."""
        try:
            chat_routine = await run_in_threadpool(get_chat)
            healthy = await run_in_threadpool(chat_routine.store.health_check)
        except Exception as exc:
            logger.warning("Readiness check failed: %s", exc)
            healthy = False
        if healthy:
            return JSONResponse({"status": "ready"})
        return JSONResponse({"status": "unavailable"}, status_code=503)

    @app.post("/api/chat")
    async def chat_endpoint(request: Request) -> Any:
        """Stream an answer to ``{"query": "..."}`` as chunked plain text."""
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse({"error": "Request body must be valid JSON."}, status_code=400)

        query = body.get("query") if isinstance(body, dict) else None
        if not isinstance(query, str) or not query.strip():
            return JSONResponse({"error": MISSING_QUERY}, status_code=400)

        logger.info("Received chat query: %s", query)
        try:
            stream = (await run_in_threadpool(get_chat)).stream(query)
            # Pull the first delta so retrieval errors still map to a 500.
            first = await run_in_threadpool(next, stream, None)
        except Exception as exc:
            logger.error("Chat API error: %s", exc, exc_info=True)
            return JSONResponse({"error": RAG_FAILURE, "details": str(exc)}, status_code=500)

        return StreamingResponse(
            _resume(first, stream),
            media_type="text/plain; charset=utf-8",
            headers={"Cache-Control": "no-cache"},
        )

    @app.post("/api/ingest", response_model=IngestionResult)
    async def ingest_endpoint() -> JSONResponse:
        """Run a full ingestion of the documents directory."""
        result = await run_in_threadpool(ingest)
        return JSONResponse(result.model_dump(), status_code=200 if result.success else 500)

    return app


def _resume(first: str | None, rest: Iterator[str]) -> Iterator[str]:
    if first is None:
        return
    yield first
    try:
        yield from rest
    except Exception:
        logger.exception("Chat stream failed after the response started")
        raise


class LazyChat:
    """Builds the chat routine on first use, once, across worker threads."""

    def __init__(self, factory: Callable[[], PolicyChat], instance: PolicyChat | None = None) -> None:
        self._factory = factory
        self._instance = instance
        self._lock = threading.Lock()

    def get(self) -> PolicyChat:
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    self._instance = self._factory()
        return self._instance


def _build_chat(settings: Settings) -> PolicyChat:
    from policy_rag.chat.rag import PolicyChat

    return PolicyChat.from_settings(settings)
