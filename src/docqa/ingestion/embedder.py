"""Embedding function factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from docqa.config import settings

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings


def get_embedding_function(model_name: str | None = None) -> Embeddings:
    """Return the configured sentence-transformer embedding function.

    Vectors are L2-normalised so that cosine and inner-product indexes
    rank identically.
    """
    from langchain_huggingface import HuggingFaceEmbeddings

    return HuggingFaceEmbeddings(
        model_name=model_name or settings.embedding_model,
        encode_kwargs={"normalize_embeddings": True},
    )
