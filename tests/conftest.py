"""Shared pytest configuration and fixtures.

All fakes here are deterministic and in-process so the suite runs
without Chroma, a sentence-transformer model, or a chat-model API.
"""

from __future__ import annotations

import math
import re
from typing import Any

import pytest
from langchain_core.embeddings import Embeddings
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from pydantic import Field

from docqa.retrieval.base import VectorStoreBase
from docqa.retrieval.models import MetadataFilter, VectorRecord


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Embeddings ─────────────────────────────────────────────────────────

VOCABULARY = (
    "refund", "policy", "days", "shipping", "warranty", "battery",
    "kubeflow", "pipeline", "chroma", "vector", "python", "invoice",
)


class KeywordEmbeddings(Embeddings):
    """Bag-of-words embedding over a fixed vocabulary.

    Texts sharing vocabulary words end up close in cosine space, which is
    enough to make similarity ordering predictable in tests.
    """

    def __init__(self) -> None:
        self.document_calls: list[list[str]] = []
        self.query_calls: list[str] = []

    def _embed(self, text: str) -> list[float]:
        words = re.findall(r"[a-z]+", text.lower())
        # trailing constant keeps every vector non-zero
        return [float(words.count(term)) for term in VOCABULARY] + [0.01]

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls.append(list(texts))
        return [self._embed(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        self.query_calls.append(text)
        return self._embed(text)


# ── Vector store ───────────────────────────────────────────────────────


def _matches(meta: dict[str, Any], f: MetadataFilter) -> bool:
    return meta.get(f.field) == f.value


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class InMemoryVectorStore(VectorStoreBase):
    """Dict-backed store with cosine similarity and metadata filtering.

    Parameters
    ----------
    fail_on_upsert:
        1-based index of the upsert call that should raise, or ``None``.
    apply_filters:
        When ``False`` filters are ignored, simulating a backend that
        leaks records of other documents.
    """

    def __init__(self, *, fail_on_upsert: int | None = None, apply_filters: bool = True) -> None:
        super().__init__("test-collection")
        self.records: dict[str, VectorRecord] = {}
        self.upsert_calls = 0
        self.search_calls = 0
        self.last_filters: list[MetadataFilter] | None = None
        self._fail_on_upsert = fail_on_upsert
        self._apply_filters = apply_filters

    def upsert(self, records: list[VectorRecord]) -> None:
        self.upsert_calls += 1
        if self._fail_on_upsert == self.upsert_calls:
            raise ConnectionError("vector index unavailable")
        for record in records:
            self.records[record.id] = record

    def similarity_search(
        self,
        query_embedding: list[float],
        *,
        k: int = 3,
        filters: list[MetadataFilter] | None = None,
    ) -> list[dict[str, Any]]:
        self.search_calls += 1
        self.last_filters = filters
        candidates = list(self.records.values())
        if filters and self._apply_filters:
            candidates = [r for r in candidates if all(_matches(r.metadata(), f) for f in filters)]
        hits = [
            {
                "id": r.id,
                "content": r.text,
                "score": _cosine(query_embedding, r.embedding),
                "metadata": r.metadata(),
            }
            for r in candidates
        ]
        hits.sort(key=lambda h: h["score"], reverse=True)
        return hits[:k]

    def records_for(self, document_id: str) -> list[VectorRecord]:
        return [r for r in self.records.values() if r.document_id == document_id]


# ── Chat models ────────────────────────────────────────────────────────


class RecordingChatModel(FakeListChatModel):
    """``FakeListChatModel`` that keeps every prompt it was called with."""

    prompts: list = Field(default_factory=list)

    def _call(self, messages, stop=None, run_manager=None, **kwargs):  # noqa: ANN001
        self.prompts.append(messages)
        return super()._call(messages, stop, run_manager, **kwargs)


class FailingChatModel(FakeListChatModel):
    """Chat model whose every call raises."""

    responses: list = Field(default_factory=lambda: [""])

    def _call(self, messages, stop=None, run_manager=None, **kwargs):  # noqa: ANN001
        raise RuntimeError("model endpoint returned 503")


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture()
def embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()


@pytest.fixture()
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture()
def llm() -> RecordingChatModel:
    return RecordingChatModel(responses=["Refunds are accepted within 30 days."])
