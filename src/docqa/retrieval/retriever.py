"""Semantic retriever — document-scoped search with citation tracking.

Every query is restricted to the chunks of one uploaded document; the
vector index is shared, so isolation between documents relies on the
``document_id`` filter applied here.

Usage::

    from docqa.retrieval.retriever import SemanticRetriever

    retriever = SemanticRetriever(store, embeddings)
    results   = retriever.search("What is the refund policy?", document_id=doc_id)
    for r in results:
        print(r.citation.source, r.citation.score, r.content[:80])
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from docqa.config import settings
from docqa.retrieval.base import VectorStoreBase
from docqa.retrieval.models import Citation, MetadataFilter, RetrievalResult

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


class SemanticRetriever:
    """High-level retriever that wraps any :class:`VectorStoreBase`.

    Parameters
    ----------
    store:
        A concrete vector-store backend.
    embeddings:
        Embedding function used for the question.
    default_k:
        Default number of results returned by :meth:`search`.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embeddings: Embeddings,
        *,
        default_k: int | None = None,
    ) -> None:
        self._store = store
        self._embeddings = embeddings
        self.default_k = default_k if default_k is not None else settings.top_k

    # -- public API -----------------------------------------------------------

    def search(
        self,
        question: str,
        *,
        document_id: str,
        k: int | None = None,
    ) -> list[RetrievalResult]:
        """Embed *question* and return the closest chunks of *document_id*.

        Results are ordered by descending score; ties keep the order the
        store returned them in.
        """
        embedding = self._embeddings.embed_query(question)
        return self.search_by_embedding(embedding, document_id=document_id, k=k)

    def search_by_embedding(
        self,
        embedding: list[float],
        *,
        document_id: str,
        k: int | None = None,
    ) -> list[RetrievalResult]:
        """Same as :meth:`search` but accepts a pre-computed embedding."""
        k = k if k is not None else self.default_k
        raw_hits = self._store.similarity_search(
            embedding, k=k, filters=[MetadataFilter.for_document(document_id)]
        )
        results = self._to_results(raw_hits, document_id)
        logger.info(
            "Retrieved %d/%d chunks for document %s", len(results), k, document_id
        )
        return results

    # -- internals ------------------------------------------------------------

    def _to_results(
        self, raw_hits: list[dict[str, Any]], document_id: str
    ) -> list[RetrievalResult]:
        results: list[RetrievalResult] = []
        for hit in raw_hits:
            meta = hit.get("metadata") or {}
            if meta.get("document_id") != document_id:
                logger.warning(
                    "Dropping hit %s from document %s (expected %s)",
                    hit.get("id"),
                    meta.get("document_id"),
                    document_id,
                )
                continue

            citation = Citation(
                record_id=hit.get("id"),
                document_id=document_id,
                source=meta.get("source", "unknown"),
                chunk_index=meta.get("chunk_index"),
                page=meta.get("page"),
                score=hit.get("score"),
            )
            results.append(RetrievalResult(content=hit.get("content", ""), citation=citation))

        # sorted() is stable, so equal scores keep the store's order
        return sorted(
            results,
            key=lambda r: r.citation.score if r.citation.score is not None else float("-inf"),
            reverse=True,
        )
