"""
Retrieval — vector storage and document-scoped similarity search.

This module wraps the vector store behind a clean interface so that the
ingestion and answering layers never need to know which DB is backing
them.

Public surface
--------------
- :class:`SemanticRetriever` — document-scoped search with citations.
- :class:`VectorStoreBase` — abstract backend (subclass for Pinecone, etc.).
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`VectorRecord`, :class:`Citation`, :class:`RetrievalResult`,
  :class:`MetadataFilter` — data models.
"""

from docqa.retrieval.base import VectorStoreBase
from docqa.retrieval.models import Citation, MetadataFilter, RetrievalResult, VectorRecord
from docqa.retrieval.retriever import SemanticRetriever

__all__ = [
    "Citation",
    "ChromaVectorStore",
    "MetadataFilter",
    "RetrievalResult",
    "SemanticRetriever",
    "VectorRecord",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from docqa.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
