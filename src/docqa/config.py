"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # LLM
    openai_api_key: str = Field(default="", description="API key for the chat model provider")
    llm_model_name: str = Field(default="gpt-4o-mini", description="Chat model identifier")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible chat API. Leave empty to use "
            "OpenAI cloud, e.g. 'https://api.groq.com/openai/v1' for Groq."
        ),
    )
    llm_temperature: float = 0.7

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    chroma_collection: str = "docqa"
    chroma_distance: str = Field(default="cosine", description="cosine | l2 | ip")

    # Embedding
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    embed_batch_size: int = Field(default=48, description="Chunks embedded and upserted per call")

    # Chunking
    chunk_size: int = 200
    chunk_overlap: int = 20

    # Retrieval
    top_k: int = Field(default=3, description="Number of chunks forwarded to the model")

    # Serving
    upload_dir: str = "uploads"
    host: str = "0.0.0.0"
    port: int = 8080
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton — import `settings` wherever needed.
settings = Settings()
