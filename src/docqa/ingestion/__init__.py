"""
Ingestion — document loading, chunking, and embedding into the vector store.

This module turns a single uploaded file (PDF, DOCX, plain text) into
embedded chunks stored in the vector index under a freshly generated
document identifier.
"""

from docqa.ingestion.pipeline import IngestionPipeline, IngestionResult

__all__ = ["IngestionPipeline", "IngestionResult"]
