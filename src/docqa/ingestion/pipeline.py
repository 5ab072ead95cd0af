"""Upload ingestion: load → split → embed → upsert.

Batches are processed strictly in sequence.  Ingestion is not
transactional: when a batch fails, the batches before it stay in the
index under a document id that is never returned to the caller.  The
failure is logged with that id so its ``<document_id>-<n>`` records can be
removed by hand.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING
from uuid import uuid4

from docqa.config import settings
from docqa.exceptions import ClientError, IngestionError
from docqa.ingestion.chunker import chunk_documents
from docqa.ingestion.loader import load_document, resolve_extension
from docqa.retrieval.models import VectorRecord

if TYPE_CHECKING:
    from langchain_core.documents import Document
    from langchain_core.embeddings import Embeddings

    from docqa.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestionResult:
    """Outcome of a successful ingestion."""

    document_id: str
    chunks_processed: int
    page_count: int


class IngestionPipeline:
    """Turn one uploaded file into vector records tagged with a new document id.

    Parameters
    ----------
    store:
        Destination vector store.
    embeddings:
        Embedding function; ``embed_documents`` is called once per batch.
    chunk_size / chunk_overlap:
        Splitter parameters (default to the settings values).
    batch_size:
        Number of chunks embedded and upserted per round trip.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embeddings: Embeddings,
        *,
        chunk_size: int | None = None,
        chunk_overlap: int | None = None,
        batch_size: int | None = None,
    ) -> None:
        self._store = store
        self._embeddings = embeddings
        self.chunk_size = chunk_size if chunk_size is not None else settings.chunk_size
        self.chunk_overlap = chunk_overlap if chunk_overlap is not None else settings.chunk_overlap
        self.batch_size = batch_size if batch_size is not None else settings.embed_batch_size

    def ingest(self, path: str | Path, filename: str | None = None) -> IngestionResult:
        """Ingest the file at *path* and delete it afterwards.

        The file is removed whether ingestion succeeds or fails.

        Parameters
        ----------
        path:
            Transient location of the upload.
        filename:
            The client's original filename; decides the file type and
            becomes the ``source`` metadata of every chunk.

        Raises
        ------
        ClientError
            Missing file or unsupported extension; nothing is written.
        IngestionError
            Extraction, embedding or upsert failed.
        """
        path = Path(path)
        source = filename or path.name
        try:
            return self._run(path, source)
        finally:
            _remove_upload(path)

    # -- internals ------------------------------------------------------------

    def _run(self, path: Path, source: str) -> IngestionResult:
        resolve_extension(source)
        logger.info("Processing file: %s (%s)", path, source)

        document_id: str | None = None
        written = 0
        try:
            pages = load_document(path, source)
            logger.info("Loaded %d page(s) from %s", len(pages), source)

            chunks = chunk_documents(pages, self.chunk_size, self.chunk_overlap)
            logger.info("Created %d chunks", len(chunks))

            document_id = uuid4().hex
            t0 = time.monotonic()
            for start in range(0, len(chunks), self.batch_size):
                batch = chunks[start : start + self.batch_size]
                vectors = self._embeddings.embed_documents([c.page_content for c in batch])
                records = [
                    _to_record(chunk, vector, document_id, start + offset, source)
                    for offset, (chunk, vector) in enumerate(zip(batch, vectors))
                ]
                self._store.upsert(records)
                written += len(records)
                logger.info("  processed chunk %d/%d", written, len(chunks))
        except ClientError:
            raise
        except Exception as exc:
            logger.exception(
                "File processing error for %s (document %s, %d chunks already written)",
                source,
                document_id,
                written,
            )
            raise IngestionError(str(exc), document_id=document_id) from exc

        logger.info(
            "Ingested %s as document %s: %d chunks in %.1fs",
            source,
            document_id,
            written,
            time.monotonic() - t0,
        )
        return IngestionResult(
            document_id=document_id,
            chunks_processed=len(chunks),
            page_count=len(pages),
        )


def _to_record(
    chunk: Document,
    vector: list[float],
    document_id: str,
    chunk_index: int,
    source: str,
) -> VectorRecord:
    # PyPDFLoader pages are 0-based; other formats have no page at all.
    page = chunk.metadata.get("page")
    return VectorRecord(
        id=VectorRecord.make_id(document_id, chunk_index),
        embedding=list(vector),
        text=chunk.page_content,
        document_id=document_id,
        chunk_index=chunk_index,
        source=source,
        page=int(page) + 1 if isinstance(page, int) else 1,
    )


def _remove_upload(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
        logger.debug("Cleaned up uploaded file %s", path)
    except OSError:
        logger.warning("Error deleting uploaded file %s", path, exc_info=True)
