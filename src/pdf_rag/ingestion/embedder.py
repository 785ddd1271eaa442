"""Embedding model construction."""

from __future__ import annotations

from langchain_huggingface import HuggingFaceEmbeddings


def get_embedding_function(model_name: str) -> HuggingFaceEmbeddings:
    """Return a sentence-transformer embedding function for *model_name*."""
    return HuggingFaceEmbeddings(model_name=model_name)
