"""LangGraph definition of the question-answering workflow.

Graph topology::

      ┌──────────┐
      │ retrieve │   ← embed question, top-K chunks of one document
      └────┬─────┘
           │ has_context?
     ┌─────┴──────┐
     ▼            ▼
 ┌──────────┐ ┌────────────┐
 │ generate │ │ no_context │
 └────┬─────┘ └─────┬──────┘
      ▼             ▼
           [ END ]

Every invocation is stateless: no history is carried between questions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypedDict

from langchain_core.output_parsers import StrOutputParser
from langgraph.graph import END, StateGraph

from docqa.answering.prompts import (
    EMPTY_RESPONSE_ANSWER,
    NO_INFORMATION_ANSWER,
    build_answer_prompt,
)
from docqa.exceptions import AnswerGenerationError, RetrievalError
from docqa.retrieval.models import RetrievalResult

if TYPE_CHECKING:
    from langchain_core.language_models import BaseChatModel

    from docqa.retrieval.retriever import SemanticRetriever

logger = logging.getLogger(__name__)


class QAState(TypedDict, total=False):
    """State flowing through the answer graph.

    Attributes
    ----------
    question:
        The user's question (already stripped and non-empty).
    document_id:
        Document whose chunks may be used as context.
    results:
        Retrieved chunks, best match first.
    answer:
        Final answer text.
    sources_used:
        Number of chunks retrieved for this call.
    """

    question: str
    document_id: str
    results: list[RetrievalResult]
    answer: str
    sources_used: int


def has_context(state: QAState) -> str:
    """Conditional edge after ``retrieve``."""
    return "generate" if state.get("results") else "no_context"


def build_graph(retriever: SemanticRetriever, llm: BaseChatModel) -> Any:
    """Construct and return the compiled answer workflow.

    Parameters
    ----------
    retriever:
        Document-scoped retriever used by the ``retrieve`` node.
    llm:
        Chat model called once by the ``generate`` node.

    Returns
    -------
    CompiledGraph
        A compiled LangGraph workflow ready for ``.invoke()``.
    """
    chain = llm | StrOutputParser()

    def retrieve(state: QAState) -> dict[str, Any]:
        try:
            results = retriever.search(state["question"], document_id=state["document_id"])
        except Exception as exc:
            logger.exception("Retrieval failed for document %s", state["document_id"])
            raise RetrievalError(str(exc)) from exc
        return {"results": results, "sources_used": len(results)}

    def no_context(state: QAState) -> dict[str, Any]:
        logger.info("No matching chunks for document %s", state["document_id"])
        return {"answer": NO_INFORMATION_ANSWER, "sources_used": 0}

    def generate(state: QAState) -> dict[str, Any]:
        prompt = build_answer_prompt(state["question"], state["results"])
        try:
            answer = chain.invoke(prompt)
        except Exception as exc:
            logger.exception("Chat model invocation failed")
            raise AnswerGenerationError(str(exc)) from exc
        logger.debug("Model answer: %s", answer)
        return {"answer": answer.strip() or EMPTY_RESPONSE_ANSWER}

    workflow = StateGraph(QAState)

    # -- Nodes ---------------------------------------------------------------
    workflow.add_node("retrieve", retrieve)
    workflow.add_node("generate", generate)
    workflow.add_node("no_context", no_context)

    # -- Edges ---------------------------------------------------------------
    workflow.set_entry_point("retrieve")
    workflow.add_conditional_edges(
        "retrieve",
        has_context,
        {
            "generate": "generate",
            "no_context": "no_context",
        },
    )
    workflow.add_edge("generate", END)
    workflow.add_edge("no_context", END)

    return workflow.compile()
