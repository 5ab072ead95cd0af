"""
Answering — retrieval-augmented question answering over one document.

A small LangGraph workflow (retrieve → generate / no_context) drives a
single stateless chat-model call per question.

Public API
----------
- :class:`QAService` — validate, retrieve, generate.
- :func:`build_graph` — compile the answer workflow.
"""

from docqa.answering.graph import QAState, build_graph
from docqa.answering.service import Answer, QAService

__all__ = ["Answer", "QAService", "QAState", "build_graph"]
