"""JSON-file cache of extracted document text.

File format::

    {"<cache key>": {"content": "<text>", "timestamp": <epoch ms>}, ...}

Loading is corruption tolerant: undecodable or non-object files load as
an empty cache, and individual bad entries are dropped while the rest
survive.  Saving rewrites the whole file and lets I/O errors propagate.

The store assumes a single writer per cache file; concurrent runs
against the same path can lose updates.
"""

from __future__ import annotations

import json
import logging
from datetime import timedelta

from pdf_rag.cache.filesystem import FileSystem, LocalFileSystem
from pdf_rag.cache.models import Cache, Valid, now_ms, validate_record

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE = timedelta(hours=24)

_EMPTY = b"{}"


def is_stale(timestamp: int, max_age: timedelta = DEFAULT_MAX_AGE, *, now: int | None = None) -> bool:
    """Return ``True`` when a record written at *timestamp* is older than *max_age*.

    Timestamps in the future are never stale; clock skew is not rejected.
    """
    current = now_ms() if now is None else now
    age_ms = current - timestamp
    return age_ms > max_age.total_seconds() * 1000


class CacheStore:
    """Read and write the cache file through a :class:`FileSystem`.

    Parameters
    ----------
    fs:
        Storage backend.  Defaults to :class:`LocalFileSystem`.
    """

    def __init__(self, fs: FileSystem | None = None) -> None:
        self._fs = fs or LocalFileSystem()

    def ensure_exists(self, path: str) -> None:
        """Create an empty cache at *path* unless a file is already there."""
        if self._fs.ensure_exists(path, _EMPTY):
            logger.info("Created empty cache file %s", path)

    def load(self, path: str) -> Cache:
        """Return every valid record stored at *path*.

        A missing file yields an empty cache.  Other read errors
        (permissions, a directory in the way) propagate.
        """
        try:
            raw = self._fs.read_all(path)
        except FileNotFoundError:
            logger.info("No cache found at %s", path)
            return {}

        try:
            parsed = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Cache file %s is corrupt, ignoring it: %s", path, exc)
            return {}

        if not isinstance(parsed, dict):
            logger.warning("Cache file %s does not hold an object (%s), ignoring it", path, type(parsed).__name__)
            return {}

        cache: Cache = {}
        dropped = 0
        for key, value in parsed.items():
            result = validate_record(value)
            if isinstance(result, Valid):
                cache[key] = result.record
            else:
                dropped += 1
                logger.debug("Dropping cache entry %r: %s", key, result.reason)

        if dropped:
            logger.warning("Dropped %d invalid entr%s from %s", dropped, "y" if dropped == 1 else "ies", path)
        return cache

    def save(self, path: str, cache: Cache) -> None:
        """Overwrite *path* with the full contents of *cache*."""
        payload = {key: record.model_dump() for key, record in cache.items()}
        # ASCII-escaped so lone surrogates from broken PDF text maps still encode.
        data = json.dumps(payload, indent=2).encode("utf-8")
        self._fs.write_all(path, data)
        logger.debug("Saved %d cache records to %s", len(cache), path)
