"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file.

    Construct once in the driver and hand the values to each component;
    nothing in the package reads a global instance.
    """

    # Extraction cache
    cache_path: str = Field(default="./cache.json", description="JSON file holding extracted text")
    cache_max_age_hours: float = Field(default=24.0, description="Records older than this are re-extracted")
    failure_policy: Literal["abort", "isolate"] = Field(
        default="abort",
        description="'abort' fails the whole ingestion batch on one bad file, 'isolate' reports it per file",
    )

    # Vector store
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    collection_name: str = "summaries"
    vector_size: int = Field(default=384, description="Must match the embedding model output size")

    # Embedding
    embedding_model: str = "sentence-transformers/all-MiniLM-L6-v2"

    # LLM
    openai_api_key: str = Field(default="", description="OpenAI API key (or dummy value for a local server)")
    llm_model_name: str = Field(default="gpt-4o-mini", description="LLM model identifier")
    llm_base_url: str = Field(
        default="",
        description=(
            "Base URL for an OpenAI-compatible API. Leave empty to use OpenAI cloud. "
            "Set to e.g. 'http://localhost:11434/v1' for a local Ollama server."
        ),
    )

    # Sources
    max_batch_size: int = Field(default=5, description="Maximum sources processed per run")
    request_timeout: float = 30.0
    max_retries: int = 3

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def public_settings(settings: Settings) -> dict[str, Any]:
    """Return *settings* without secrets for safe logging."""
    return settings.model_dump(exclude={"openai_api_key"})
