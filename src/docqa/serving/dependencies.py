"""FastAPI dependency providers.

Routes receive a :class:`ServiceCache` (cheap to hand out) and read the
collaborator they need only after the request has been validated, so a
rejected request never opens a Chroma connection or loads a model.
Each collaborator is built on first access and kept for the life of the
process.  Tests replace the cache through ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from docqa.config import settings
from docqa.exceptions import IngestionError, RetrievalError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from docqa.answering.service import QAService
    from docqa.ingestion.pipeline import IngestionPipeline
    from docqa.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


class ServiceCache:
    """Lazily built, process-wide collaborators.

    A failed build is not cached; the next access tries again.
    """

    def __init__(self) -> None:
        self._vector_store: VectorStoreBase | None = None
        self._embeddings: Embeddings | None = None
        self._ingestion_pipeline: IngestionPipeline | None = None
        self._qa_service: QAService | None = None

    @property
    def vector_store(self) -> VectorStoreBase:
        if self._vector_store is None:
            from docqa.retrieval.chroma_store import ChromaVectorStore

            self._vector_store = ChromaVectorStore()
        return self._vector_store

    @property
    def embeddings(self) -> Embeddings:
        if self._embeddings is None:
            from docqa.ingestion.embedder import get_embedding_function

            self._embeddings = get_embedding_function()
        return self._embeddings

    @property
    def ingestion_pipeline(self) -> IngestionPipeline:
        """Pipeline for uploads; build failures surface as :class:`IngestionError`."""
        if self._ingestion_pipeline is None:
            from docqa.ingestion.pipeline import IngestionPipeline

            try:
                self._ingestion_pipeline = IngestionPipeline(self.vector_store, self.embeddings)
            except Exception as exc:
                logger.exception("Could not initialise the ingestion pipeline")
                raise IngestionError(str(exc)) from exc
        return self._ingestion_pipeline

    @property
    def qa_service(self) -> QAService:
        """Answer service; build failures surface as :class:`RetrievalError`."""
        if self._qa_service is None:
            from docqa.answering.llm import get_llm
            from docqa.answering.service import QAService
            from docqa.retrieval.retriever import SemanticRetriever

            try:
                retriever = SemanticRetriever(
                    self.vector_store, self.embeddings, default_k=settings.top_k
                )
                self._qa_service = QAService(retriever, get_llm())
            except Exception as exc:
                logger.exception("Could not initialise the answer service")
                raise RetrievalError(str(exc)) from exc
        return self._qa_service


@lru_cache(maxsize=1)
def get_service_cache() -> ServiceCache:
    return ServiceCache()
