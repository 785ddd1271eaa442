"""
Retrieval — vector storage and similarity search.

Public surface
--------------
- :class:`VectorStoreBase` — abstract backend (subclass for Qdrant, etc.).
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`MetadataFilter`, :class:`SearchHit`, :class:`VectorPoint` — data models.
"""

from pdf_rag.retrieval.base import VectorItem, VectorStoreBase
from pdf_rag.retrieval.models import MetadataFilter, SearchHit, VectorPoint

__all__ = [
    "ChromaVectorStore",
    "MetadataFilter",
    "SearchHit",
    "VectorItem",
    "VectorPoint",
    "VectorStoreBase",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from pdf_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
