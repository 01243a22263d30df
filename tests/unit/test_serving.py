"""Unit tests for the serving layer."""

from __future__ import annotations

import threading
import time
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from policy_rag.exceptions import ConfigurationError, EmbeddingError
from policy_rag.ingestion.models import IngestionResult
from policy_rag.serving.app import MISSING_QUERY, RAG_FAILURE, LazyChat, create_app


def _chat_streaming(*deltas: str) -> MagicMock:
    chat = MagicMock()
    chat.stream.side_effect = lambda query: iter(deltas)
    return chat


@pytest.fixture()
def ingest_result() -> IngestionResult:
    return IngestionResult(success=True, count=5, files_processed=["policy.pdf"])


@pytest.fixture()
def client(ingest_result) -> TestClient:
    app = create_app(chat=_chat_streaming("Annual leave ", "is 20 days."), ingest=lambda: ingest_result)
    return TestClient(app)


def test_health_endpoint(client) -> None:
    """GET /health should return 200 with status ok."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


class TestChatEndpoint:
    def test_streams_plain_text(self, client) -> None:
        response = client.post("/api/chat", json={"query": "How much leave do I get?"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "content-length" not in response.headers
        assert response.text == "Annual leave is 20 days."

    def test_passes_query_through(self) -> None:
        chat = _chat_streaming("ok")
        TestClient(create_app(chat=chat, ingest=MagicMock())).post("/api/chat", json={"query": "sick days?"})
        chat.stream.assert_called_once_with("sick days?")

    @pytest.mark.parametrize("body", [{}, {"query": ""}, {"query": "   "}, {"query": 42}, {"question": "hi"}, ["q"]])
    def test_missing_query_is_400(self, client, body) -> None:
        response = client.post("/api/chat", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": MISSING_QUERY}

    def test_malformed_json_is_400(self, client) -> None:
        response = client.post("/api/chat", content=b"{not json", headers={"content-type": "application/json"})
        assert response.status_code == 400
        assert "error" in response.json()

    def test_retrieval_failure_is_500(self) -> None:
        chat = MagicMock()

        def failing(query):
            raise EmbeddingError("Failed to embed query: timeout")
            yield  # pragma: no cover

        chat.stream.side_effect = failing
        client = TestClient(create_app(chat=chat, ingest=MagicMock()))

        response = client.post("/api/chat", json={"query": "hi"})

        assert response.status_code == 500
        assert response.json() == {"error": RAG_FAILURE, "details": "Failed to embed query: timeout"}

    def test_empty_answer_is_empty_body(self) -> None:
        client = TestClient(create_app(chat=_chat_streaming(), ingest=MagicMock()))
        response = client.post("/api/chat", json={"query": "hi"})
        assert response.status_code == 200
        assert response.text == ""

    def test_chat_built_lazily_from_settings(self, settings) -> None:
        with patch("policy_rag.chat.rag.PolicyChat.from_settings", return_value=_chat_streaming("hi")) as build:
            client = TestClient(create_app(ingest=MagicMock(), settings=settings))
            build.assert_not_called()
            client.post("/api/chat", json={"query": "a"})
            client.post("/api/chat", json={"query": "b"})

        build.assert_called_once_with(settings)

    def test_unreachable_store_is_500(self, settings) -> None:
        with patch("policy_rag.chat.rag.PolicyChat.from_settings", side_effect=RuntimeError("chroma down")):
            client = TestClient(create_app(ingest=MagicMock(), settings=settings))
            response = client.post("/api/chat", json={"query": "a"})

        assert response.status_code == 500
        assert response.json()["details"] == "chroma down"


class TestIngestEndpoint:
    def test_success(self, client) -> None:
        response = client.post("/api/ingest")
        assert response.status_code == 200
        assert response.json()["count"] == 5
        assert response.json()["success"] is True

    def test_failure_result_is_500(self) -> None:
        failed = IngestionResult.failure("No PDF files found in the directory: /srv/documents")
        client = TestClient(create_app(chat=MagicMock(), ingest=lambda: failed))

        response = client.post("/api/ingest")

        assert response.status_code == 500
        assert response.json()["error"].startswith("No PDF files found")
        assert response.json()["count"] == 0


def test_missing_api_key_fails_at_startup(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(ConfigurationError, match="openai_api_key"):
        create_app()


class TestReadiness:
    def test_ready_when_store_is_healthy(self, client) -> None:
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready"}

    def test_unhealthy_store_is_503(self) -> None:
        chat = MagicMock()
        chat.store.health_check.return_value = False
        client = TestClient(create_app(chat=chat, ingest=MagicMock()))

        response = client.get("/ready")

        assert response.status_code == 503
        assert response.json() == {"status": "unavailable"}

    def test_unbuildable_chat_is_503(self, settings) -> None:
        with patch("policy_rag.chat.rag.PolicyChat.from_settings", side_effect=RuntimeError("chroma down")):
            client = TestClient(create_app(ingest=MagicMock(), settings=settings))
            response = client.get("/ready")

        assert response.status_code == 503


class TestLazyChat:
    def test_concurrent_first_calls_build_once(self) -> None:
        built = []

        def factory():
            time.sleep(0.05)
            built.append(object())
            return built[-1]

        lazy = LazyChat(factory)
        results = []
        threads = [threading.Thread(target=lambda: results.append(lazy.get())) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(built) == 1
        assert all(r is built[0] for r in results)

    def test_failed_build_is_retried(self) -> None:
        factory = MagicMock(side_effect=[RuntimeError("down"), "chat"])
        lazy = LazyChat(factory)

        with pytest.raises(RuntimeError):
            lazy.get()
        assert lazy.get() == "chat"

    def test_injected_instance_skips_factory(self) -> None:
        factory = MagicMock()
        assert LazyChat(factory, instance="chat").get() == "chat"
        factory.assert_not_called()
