"""
Cache — durable record of extracted text, keyed by source file.

Public surface
--------------
- :class:`CacheStore` — load / save / ensure the JSON cache file.
- :func:`is_stale` — advisory age check for a record timestamp.
- :class:`CacheRecord`, :func:`validate_record` — record schema and validator.
- :class:`LocalFileSystem`, :class:`InMemoryFileSystem` — storage backends.
"""

from pdf_rag.cache.filesystem import FileSystem, InMemoryFileSystem, LocalFileSystem
from pdf_rag.cache.models import Cache, CacheRecord, Invalid, Valid, now_ms, validate_record
from pdf_rag.cache.store import DEFAULT_MAX_AGE, CacheStore, is_stale

__all__ = [
    "DEFAULT_MAX_AGE",
    "Cache",
    "CacheRecord",
    "CacheStore",
    "FileSystem",
    "InMemoryFileSystem",
    "Invalid",
    "LocalFileSystem",
    "Valid",
    "is_stale",
    "now_ms",
    "validate_record",
]
