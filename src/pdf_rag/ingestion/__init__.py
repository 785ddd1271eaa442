"""
Ingestion — PDF text extraction backed by the extraction cache.

Public surface
--------------
- :class:`IngestionPipeline` — batch extraction with cache reuse.
- :class:`FailurePolicy`, :class:`IngestionOutcome` — batch error handling.
- :class:`PdfExtractor`, :func:`fetch_pdf`, :func:`cache_key` — source access.
"""

from pdf_rag.ingestion.loader import PdfExtractor, cache_key, fetch_pdf, is_url
from pdf_rag.ingestion.pipeline import FailurePolicy, IngestionOutcome, IngestionPipeline, lookup_fresh

__all__ = [
    "FailurePolicy",
    "IngestionOutcome",
    "IngestionPipeline",
    "PdfExtractor",
    "cache_key",
    "fetch_pdf",
    "is_url",
    "lookup_fresh",
]
