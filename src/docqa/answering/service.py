"""Question answering entry point used by the HTTP layer."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from docqa.answering.graph import build_graph
from docqa.exceptions import MissingFieldError

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

    from docqa.retrieval.retriever import SemanticRetriever

logger = logging.getLogger(__name__)


def validate_question(question: str | None, document_id: str | None) -> tuple[str, str]:
    """Return the stripped inputs or raise :class:`MissingFieldError`.

    Runs before any collaborator is touched, so a rejected request costs
    no embedding, query or model call.
    """
    question = (question or "").strip()
    document_id = (document_id or "").strip()
    if not question:
        raise MissingFieldError("Question is required")
    if not document_id:
        raise MissingFieldError("documentId is required")
    return question, document_id


@dataclass(frozen=True)
class Answer:
    """Answer text plus the number of chunks it was grounded on."""

    answer: str
    sources_used: int


class QAService:
    """Answer one question about one uploaded document.

    The graph is compiled once; each :meth:`ask` call is independent.
    """

    def __init__(self, retriever: SemanticRetriever, llm: BaseChatModel) -> None:
        self._graph = build_graph(retriever, llm)

    def ask(self, question: str | None, document_id: str | None) -> Answer:
        """Validate the inputs, then retrieve and generate.

        Raises
        ------
        MissingFieldError
            *question* or *document_id* is missing or blank; raised before
            any embedding, query or model call.
        RetrievalError, AnswerGenerationError
            An external call failed.
        """
        question, document_id = validate_question(question, document_id)

        logger.info("Received question for document %s: %s", document_id, question)
        state = self._graph.invoke({"question": question, "document_id": document_id})
        return Answer(answer=state["answer"], sources_used=state["sources_used"])
