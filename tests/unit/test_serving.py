"""Unit tests for the HTTP layer.

The real pipeline, retriever and answer graph are wired to in-memory
fakes through ``app.dependency_overrides``.
"""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from docqa.answering.prompts import NO_INFORMATION_ANSWER
from docqa.answering.service import QAService
from docqa.config import settings
from docqa.ingestion.pipeline import IngestionPipeline
from docqa.retrieval.retriever import SemanticRetriever
from docqa.serving.app import app
from docqa.serving.dependencies import ServiceCache, get_service_cache

from tests.conftest import FailingChatModel, InMemoryVectorStore, KeywordEmbeddings, RecordingChatModel


@pytest.fixture()
def upload_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_dir", str(path))
    return path


@pytest.fixture()
def wire(store: InMemoryVectorStore, embeddings: KeywordEmbeddings, upload_dir: Path):
    """Return a function that installs dependency overrides for a given model."""

    def _wire(llm, pipeline: IngestionPipeline | None = None) -> None:
        services = SimpleNamespace(
            ingestion_pipeline=pipeline or IngestionPipeline(store, embeddings, chunk_size=500, chunk_overlap=100),
            qa_service=QAService(SemanticRetriever(store, embeddings, default_k=3), llm),
        )
        app.dependency_overrides[get_service_cache] = lambda: services

    yield _wire
    app.dependency_overrides.clear()


@pytest.fixture()
def client(wire, llm: RecordingChatModel) -> TestClient:
    wire(llm)
    return TestClient(app)


def _upload(client: TestClient, name: str, content: bytes):
    return client.post("/upload", files={"file": (name, content, "application/octet-stream")})


# ── Health ─────────────────────────────────────────────────────────────


def test_health_endpoint(client: TestClient, upload_dir: Path) -> None:
    """GET / should return 200 with status and version."""
    response = client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "Server is running"
    assert body["version"] == settings.app_version
    assert body["uploadsDirectory"] == str(upload_dir.resolve())


# ── Upload ─────────────────────────────────────────────────────────────


class TestUpload:
    def test_text_upload_returns_document_id(
        self, client: TestClient, store: InMemoryVectorStore, upload_dir: Path
    ) -> None:
        response = _upload(client, "notes.txt", b"word " * 200)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "File processed successfully"
        assert body["chunksProcessed"] == 3
        assert body["pageCount"] == 1
        assert len(store.records_for(body["documentId"])) == 3
        assert list(upload_dir.iterdir()) == []

    def test_missing_file_is_400(self, client: TestClient) -> None:
        response = client.post("/upload")
        assert response.status_code == 400
        assert response.json() == {"error": "No file uploaded"}

    def test_unsupported_type_is_400_and_writes_nothing(
        self, client: TestClient, store: InMemoryVectorStore, upload_dir: Path
    ) -> None:
        response = _upload(client, "data.csv", b"a,b\n1,2\n")

        assert response.status_code == 400
        assert response.json() == {"error": "Unsupported file type: .csv"}
        assert store.records == {}
        assert not upload_dir.exists() or list(upload_dir.iterdir()) == []

    def test_processing_failure_is_500_with_details(
        self, wire, llm: RecordingChatModel, upload_dir: Path
    ) -> None:
        failing = IngestionPipeline(InMemoryVectorStore(fail_on_upsert=1), KeywordEmbeddings())
        wire(llm, failing)

        response = _upload(TestClient(app), "notes.txt", b"refund policy")

        assert response.status_code == 500
        assert response.json() == {
            "error": "Error processing file",
            "details": "vector index unavailable",
        }
        assert list(upload_dir.iterdir()) == []


# ── Chat ───────────────────────────────────────────────────────────────


class TestChat:
    def test_upload_then_chat(self, client: TestClient) -> None:
        doc_id = _upload(client, "policy.txt", b"Refund policy: refunds within 30 days.").json()["documentId"]

        response = client.post("/chat", json={"question": "What is the refund policy?", "documentId": doc_id})

        assert response.status_code == 200
        body = response.json()
        assert body["answer"] == "Refunds are accepted within 30 days."
        assert body["sourcesUsed"] >= 1

    def test_unknown_document_gets_canned_answer(self, client: TestClient, llm: RecordingChatModel) -> None:
        response = client.post("/chat", json={"question": "refund?", "documentId": "nope"})

        assert response.status_code == 200
        assert response.json() == {"answer": NO_INFORMATION_ANSWER, "sourcesUsed": 0}
        assert llm.prompts == []

    def test_never_surfaces_other_documents(self, client: TestClient, llm: RecordingChatModel) -> None:
        doc_a = _upload(client, "a.txt", b"The warranty covers the battery for two years.").json()["documentId"]
        _upload(client, "b.txt", b"Refund policy: refund within 30 days. Refund refund refund.")

        response = client.post("/chat", json={"question": "refund policy", "documentId": doc_a})

        assert response.status_code == 200
        assert response.json()["sourcesUsed"] == 1
        context = llm.prompts[-1][-1].content
        assert "warranty" in context
        assert "30 days" not in context

    @pytest.mark.parametrize(
        ("payload", "error"),
        [
            ({"documentId": "abc"}, "Question is required"),
            ({"question": "", "documentId": "abc"}, "Question is required"),
            ({"question": "refund?"}, "documentId is required"),
        ],
    )
    def test_missing_fields_are_400_without_external_calls(
        self,
        client: TestClient,
        embeddings: KeywordEmbeddings,
        store: InMemoryVectorStore,
        llm: RecordingChatModel,
        payload: dict,
        error: str,
    ) -> None:
        response = client.post("/chat", json=payload)

        assert response.status_code == 400
        assert response.json() == {"error": error}
        assert embeddings.query_calls == []
        assert store.search_calls == 0
        assert llm.prompts == []

    def test_malformed_body_is_400(self, client: TestClient) -> None:
        response = client.post("/chat", content=b"not json", headers={"content-type": "application/json"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"

    def test_model_failure_is_500_with_details(self, wire, store: InMemoryVectorStore) -> None:
        wire(FailingChatModel())
        client = TestClient(app)
        doc_id = _upload(client, "policy.txt", b"Refund policy: 30 days.").json()["documentId"]

        response = client.post("/chat", json={"question": "refund policy?", "documentId": doc_id})

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Error processing query"
        assert "503" in body["details"]


# ── Unreachable collaborators ──────────────────────────────────────────


class TestVectorStoreUnreachable:
    """Real :class:`ServiceCache` with a Chroma client that cannot connect."""

    @pytest.fixture()
    def offline_client(self, upload_dir: Path):
        pytest.importorskip("chromadb")
        services = ServiceCache()
        app.dependency_overrides[get_service_cache] = lambda: services
        with patch("chromadb.HttpClient", side_effect=ConnectionError("chroma unreachable")) as http_client:
            yield TestClient(app), http_client
        app.dependency_overrides.clear()

    def test_missing_chat_fields_are_400_without_connecting(self, offline_client) -> None:
        client, http_client = offline_client

        response = client.post("/chat", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Question is required"}
        http_client.assert_not_called()

    def test_unsupported_upload_is_400_without_connecting(self, offline_client, upload_dir: Path) -> None:
        client, http_client = offline_client

        response = _upload(client, "data.csv", b"a,b\n1,2\n")

        assert response.status_code == 400
        assert response.json() == {"error": "Unsupported file type: .csv"}
        http_client.assert_not_called()
        assert not upload_dir.exists() or list(upload_dir.iterdir()) == []

    def test_valid_chat_is_500_with_details(self, offline_client) -> None:
        client, _ = offline_client

        response = client.post("/chat", json={"question": "refund?", "documentId": "abc"})

        assert response.status_code == 500
        assert response.json() == {"error": "Error processing query", "details": "chroma unreachable"}

    def test_valid_upload_is_500_with_details_and_no_file_left(self, offline_client, upload_dir: Path) -> None:
        client, _ = offline_client

        response = _upload(client, "notes.txt", b"refund policy")

        assert response.status_code == 500
        assert response.json() == {"error": "Error processing file", "details": "chroma unreachable"}
        assert not upload_dir.exists() or list(upload_dir.iterdir()) == []
