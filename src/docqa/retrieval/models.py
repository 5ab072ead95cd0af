"""Domain models for stored vectors, retrieval results and citations."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class MetadataFilter(BaseModel):
    """Equality filter on one metadata key, applied server-side by the store."""

    field: str
    value: Any = None

    @classmethod
    def for_document(cls, document_id: str) -> MetadataFilter:
        """Restrict a query to the chunks of a single uploaded document."""
        return cls(field="document_id", value=document_id)


class VectorRecord(BaseModel):
    """One embedded chunk as written to the vector index.

    The ``id`` is the composite key ``"{document_id}-{chunk_index}"``;
    writing a record with an existing id overwrites it.
    """

    id: str
    embedding: list[float]
    text: str
    document_id: str
    chunk_index: int
    source: str = "unknown"
    page: int = 1

    @staticmethod
    def make_id(document_id: str, chunk_index: int) -> str:
        return f"{document_id}-{chunk_index}"

    def metadata(self) -> dict[str, Any]:
        """Flat metadata dict (vector stores only accept scalar values)."""
        return {
            "document_id": self.document_id,
            "chunk_index": self.chunk_index,
            "source": self.source,
            "page": self.page,
        }


class Citation(BaseModel):
    """Provenance of a retrieved chunk.

    Attributes
    ----------
    record_id:
        The vector-store key of the chunk.
    document_id:
        The uploaded document the chunk belongs to.
    source:
        Original filename of the upload.
    chunk_index:
        Ordinal position of the chunk within the document.
    page:
        1-based page number (1 for formats without pages).
    score:
        Similarity score returned by the vector store (higher = closer).
    """

    record_id: str | None = None
    document_id: str | None = None
    source: str = "unknown"
    chunk_index: int | None = None
    page: int | None = None
    score: float | None = None


class RetrievalResult(BaseModel):
    """A single retrieved passage together with its citation."""

    content: str
    citation: Citation
