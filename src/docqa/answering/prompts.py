"""Prompt template and canned replies for document question answering."""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage

    from docqa.retrieval.models import RetrievalResult

NO_INFORMATION_ANSWER = "I couldn't find any relevant information."
EMPTY_RESPONSE_ANSWER = "Sorry, I couldn't generate a response."
REFUSAL_PHRASE = "I don't know based on the provided document."

ANSWER_SYSTEM = f"""\
You are a helpful assistant answering questions about a document the user
uploaded.

Rules:
1. Answer **only** from the provided context. Do not use outside knowledge.
2. If the context does not contain the answer, reply with exactly:
   "{REFUSAL_PHRASE}"
3. Give a short, well-structured answer.
"""


def build_context(results: list[RetrievalResult]) -> str:
    """Join the retrieved chunk texts, in order, into one context block."""
    return "\n\n".join(r.content for r in results)


def build_answer_prompt(question: str, results: list[RetrievalResult]) -> list[BaseMessage]:
    """Assemble the prompt messages for one stateless answer call.

    Parameters
    ----------
    question:
        The user question.
    results:
        Retrieved chunks, best match first.

    Returns
    -------
    list[BaseMessage]
        A list of LangChain message objects ready for ``.invoke()``.
    """
    user_msg = (
        f"Context:\n{build_context(results)}\n\n"
        f"Question: {question}\n\n"
        "Answer:"
    )
    return [
        SystemMessage(content=ANSWER_SYSTEM),
        HumanMessage(content=user_msg),
    ]
