"""Text chunking strategies."""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_text_splitters import RecursiveCharacterTextSplitter

from docqa.config import settings

if TYPE_CHECKING:
    from langchain_core.documents import Document


def chunk_documents(
    documents: list[Document],
    chunk_size: int | None = None,
    chunk_overlap: int | None = None,
) -> list[Document]:
    """Split *documents* into smaller chunks for embedding.

    Parameters
    ----------
    documents:
        Page-scoped segments produced by a loader.
    chunk_size:
        Maximum number of characters per chunk (defaults to
        ``settings.chunk_size``).
    chunk_overlap:
        Number of overlapping characters between consecutive chunks
        (defaults to ``settings.chunk_overlap``).

    Returns
    -------
    list[Document]
        Chunked documents ready for embedding.  Each chunk keeps the
        metadata of the segment it came from.
    """
    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size if chunk_size is not None else settings.chunk_size,
        chunk_overlap=chunk_overlap if chunk_overlap is not None else settings.chunk_overlap,
        length_function=len,
        separators=["\n\n", "\n", ". ", " ", ""],
    )
    return splitter.split_documents(documents)
