"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from typing import Any

import chromadb

from docqa.config import settings
from docqa.retrieval.base import VectorStoreBase
from docqa.retrieval.models import MetadataFilter, VectorRecord

logger = logging.getLogger(__name__)


def _build_chroma_where(filters: list[MetadataFilter]) -> dict[str, Any] | None:
    """Convert a list of equality :class:`MetadataFilter` to Chroma ``where`` syntax."""
    if not filters:
        return None

    clauses: list[dict[str, Any]] = [{f.field: {"$eq": f.value}} for f in filters]
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


def _distance_to_score(distance: float, space: str) -> float:
    """Map a Chroma distance to a similarity score where higher is closer."""
    if space in ("cosine", "ip"):
        return 1.0 - distance
    # L2: squash into (0, 1]
    return 1.0 / (1.0 + distance)


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    distance:
        HNSW distance function used when the collection is created.
    client:
        Pre-built Chroma client (e.g. ``chromadb.EphemeralClient()``);
        when omitted an ``HttpClient`` for *host*/*port* is created.
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        distance: str = settings.chroma_distance,
        client: Any = None,
    ) -> None:
        super().__init__(collection_name)
        self._distance = distance
        self._client = client if client is not None else chromadb.HttpClient(host=host, port=port)
        self._collection = self._client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": distance},
        )

    # -- VectorStoreBase overrides --------------------------------------------

    def upsert(self, records: list[VectorRecord]) -> None:
        if not records:
            return
        self._collection.upsert(
            ids=[r.id for r in records],
            embeddings=[r.embedding for r in records],
            documents=[r.text for r in records],
            metadatas=[r.metadata() for r in records],
        )
        logger.debug("Upserted %d records into %r", len(records), self.collection_name)

    def similarity_search(
        self,
        query_embedding: list[float],
        *,
        k: int = 3,
        filters: list[MetadataFilter] | None = None,
    ) -> list[dict[str, Any]]:
        where = _build_chroma_where(filters) if filters else None

        results = self._collection.query(
            query_embeddings=[query_embedding],
            n_results=k,
            where=where,
            include=["documents", "metadatas", "distances"],
        )

        hits: list[dict[str, Any]] = []
        ids = (results.get("ids") or [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        for record_id, content, meta, dist in zip(ids, docs, metas, distances):
            hits.append(
                {
                    "id": record_id,
                    "content": content or "",
                    "score": _distance_to_score(dist, self._distance),
                    "metadata": meta or {},
                }
            )
        return hits

