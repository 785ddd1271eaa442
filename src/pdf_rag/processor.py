"""Concurrent extract → summarize → embed → store over several sources.

Each source (a local PDF path or an ``http(s)`` URL) runs as its own
task.  A failure is captured on that source's :class:`ProcessResult` and
never affects the others.  All tasks share one in-memory cache, guarded
by an :class:`asyncio.Lock`; the cache is loaded once before the tasks
start and saved once after they all finish.

Usage::

    processor = DocumentProcessor(
        vector_store=store, embeddings=embeddings, llm=llm, cache_path="cache.json"
    )
    results = asyncio.run(processor.process(["a.pdf", "https://host/b.pdf"]))
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING, Sequence

from pdf_rag.cache import DEFAULT_MAX_AGE, Cache, CacheRecord, CacheStore, now_ms
from pdf_rag.errors import SourceNotFoundError
from pdf_rag.ingestion.loader import PdfExtractor, cache_key, fetch_pdf, is_url
from pdf_rag.ingestion.pipeline import lookup_fresh
from pdf_rag.summarization import summarize

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings
    from langchain_core.language_models import BaseChatModel

    from pdf_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH_SIZE = 5


@dataclass
class ProcessResult:
    source: str
    summary: str | None = None
    point_id: str | None = None
    cached: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class DocumentProcessor:
    """Summarise and index a batch of PDFs concurrently.

    Parameters
    ----------
    vector_store:
        Destination for one summary vector per source.
    embeddings:
        Any LangChain :class:`Embeddings`; ``embed_query`` is used.
    llm:
        Chat model used by :func:`~pdf_rag.summarization.summarize`.
    cache_path:
        Location of the extraction cache file.
    max_batch_size:
        Sources beyond this count are dropped with a warning.
    """

    def __init__(
        self,
        *,
        vector_store: VectorStoreBase,
        embeddings: Embeddings,
        llm: BaseChatModel,
        cache_path: str,
        store: CacheStore | None = None,
        extractor: PdfExtractor | None = None,
        max_age: timedelta = DEFAULT_MAX_AGE,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
        request_timeout: float = 30.0,
        max_retries: int = 3,
    ) -> None:
        self.vector_store = vector_store
        self.embeddings = embeddings
        self.llm = llm
        self.cache_path = cache_path
        self.store = store or CacheStore()
        self.extractor = extractor or PdfExtractor()
        self.max_age = max_age
        self.max_batch_size = max_batch_size
        self.request_timeout = request_timeout
        self.max_retries = max_retries

    async def process(self, sources: Sequence[str]) -> list[ProcessResult]:
        """Process *sources* concurrently; results follow input order."""
        if len(sources) > self.max_batch_size:
            logger.warning(
                "Got %d sources, processing only the first %d", len(sources), self.max_batch_size
            )
            sources = list(sources)[: self.max_batch_size]
        if not sources:
            return []

        self.store.ensure_exists(self.cache_path)
        cache = self.store.load(self.cache_path)
        await asyncio.to_thread(self.vector_store.init_collection)

        lock = asyncio.Lock()
        results = await asyncio.gather(*(self._process_one(source, cache, lock) for source in sources))

        self.store.save(self.cache_path, cache)
        failed = sum(1 for r in results if not r.ok)
        logger.info("Processed %d sources (%d failed)", len(results), failed)
        return list(results)

    async def _process_one(self, source: str, cache: Cache, lock: asyncio.Lock) -> ProcessResult:
        try:
            text, cached = await self._load_text(source, cache, lock)
            summary = await asyncio.to_thread(summarize, self.llm, text)
            vector = await asyncio.to_thread(self.embeddings.embed_query, summary)
            payload = {"source": source, "file_name": cache_key(source), "summary": summary}
            point_id = await asyncio.to_thread(self.vector_store.store, vector, payload)
        except Exception as exc:
            logger.error("Processing failed for %s: %s", source, exc)
            return ProcessResult(source=source, error=str(exc))

        logger.info("Stored summary of %s as %s", source, point_id)
        return ProcessResult(source=source, summary=summary, point_id=point_id, cached=cached)

    async def _load_text(self, source: str, cache: Cache, lock: asyncio.Lock) -> tuple[str, bool]:
        key = cache_key(source)
        async with lock:
            record = lookup_fresh(cache, key, self.max_age)
        if record is not None:
            logger.debug("Cache hit for %s (key %r)", source, key)
            return record.content, True

        text = await asyncio.to_thread(self._extract, source)
        async with lock:
            cache[key] = CacheRecord(content=text, timestamp=now_ms())
        return text, False

    def _extract(self, source: str) -> str:
        if is_url(source):
            data = fetch_pdf(source, timeout=self.request_timeout, max_retries=self.max_retries)
            return self.extractor.extract_bytes(data, source)
        text = self.extractor.extract(source)
        if text is None:
            raise SourceNotFoundError(source)
        return text
