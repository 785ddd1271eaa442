"""Cache-aware ingestion of a batch of PDF files.

For every file, in input order:

1. derive the cache key from the file name;
2. reuse a fresh cached record when there is one;
3. otherwise extract the text and (re)write the record.

The cache is saved once at the end of the batch.  What happens when a
file cannot be extracted is governed by :class:`FailurePolicy`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from pathlib import Path
from typing import Protocol, Sequence

from pdf_rag.cache import DEFAULT_MAX_AGE, Cache, CacheRecord, CacheStore, is_stale, now_ms
from pdf_rag.errors import PdfRagError, SourceNotFoundError
from pdf_rag.ingestion.loader import PdfExtractor, cache_key

logger = logging.getLogger(__name__)


class Extractor(Protocol):
    def extract(self, path: str | Path) -> str | None:
        ...


class FailurePolicy(str, Enum):
    """How a batch reacts to one file failing.

    ``ABORT`` raises on the first failure and leaves the cache file
    untouched.  ``ISOLATE`` records the failure on that file's outcome and
    carries on with the rest.
    """

    ABORT = "abort"
    ISOLATE = "isolate"


@dataclass
class IngestionOutcome:
    source: str
    text: str = ""
    cached: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def lookup_fresh(cache: Cache, key: str, max_age: timedelta) -> CacheRecord | None:
    """Return the record for *key* unless it is missing or stale."""
    record = cache.get(key)
    if record is None or is_stale(record.timestamp, max_age):
        return None
    return record


class IngestionPipeline:
    """Extract text from PDFs, reusing the on-disk cache where possible.

    Parameters
    ----------
    cache_path:
        Location of the JSON cache file.
    store:
        Cache persistence.  Defaults to a disk-backed :class:`CacheStore`.
    extractor:
        Anything with an ``extract(path) -> str | None`` method.
    max_age:
        Records older than this are re-extracted.
    policy:
        Behaviour when one file fails; see :class:`FailurePolicy`.
    """

    def __init__(
        self,
        cache_path: str,
        *,
        store: CacheStore | None = None,
        extractor: Extractor | None = None,
        max_age: timedelta = DEFAULT_MAX_AGE,
        policy: FailurePolicy = FailurePolicy.ABORT,
    ) -> None:
        self.cache_path = cache_path
        self.store = store or CacheStore()
        self.extractor = extractor or PdfExtractor()
        self.max_age = max_age
        self.policy = policy

    def run(self, file_paths: Sequence[str | Path]) -> list[str]:
        """Return the text of each file, index-aligned with *file_paths*.

        Under ``ISOLATE`` a failed file contributes an empty string.
        """
        return [outcome.text for outcome in self.ingest(file_paths)]

    def ingest(self, file_paths: Sequence[str | Path]) -> list[IngestionOutcome]:
        """Like :meth:`run` but reports per-file cache use and errors."""
        self.store.ensure_exists(self.cache_path)
        cache = self.store.load(self.cache_path)

        outcomes: list[IngestionOutcome] = []
        for path in file_paths:
            source = str(path)
            try:
                outcomes.append(self._ingest_one(source, cache))
            except PdfRagError as exc:
                if self.policy is FailurePolicy.ABORT:
                    logger.error("Aborting ingestion batch on %s: %s", source, exc)
                    raise
                logger.error("Ingestion failed for %s: %s", source, exc)
                outcomes.append(IngestionOutcome(source=source, error=str(exc)))

        self.store.save(self.cache_path, cache)

        hits = sum(1 for o in outcomes if o.cached)
        failed = sum(1 for o in outcomes if not o.ok)
        logger.info(
            "Ingested %d files (%d cached, %d extracted, %d failed)",
            len(outcomes),
            hits,
            len(outcomes) - hits - failed,
            failed,
        )
        return outcomes

    def _ingest_one(self, source: str, cache: Cache) -> IngestionOutcome:
        key = cache_key(source)
        record = lookup_fresh(cache, key, self.max_age)
        if record is not None:
            logger.debug("Cache hit for %s (key %r)", source, key)
            return IngestionOutcome(source=source, text=record.content, cached=True)

        text = self.extractor.extract(source)
        if text is None:
            raise SourceNotFoundError(source)

        cache[key] = CacheRecord(content=text, timestamp=now_ms())
        return IngestionOutcome(source=source, text=text)
