"""Unit tests for the concurrent multi-source processor."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import patch

import pytest
from conftest import FakeEmbeddings, FakeExtractor, FakeLLM, FakeVectorStore

from pdf_rag.cache import CacheRecord, CacheStore, InMemoryFileSystem, now_ms
from pdf_rag.processor import DocumentProcessor, ProcessResult

CACHE = "cache.json"

TEXTS = {
    "a.pdf": "Alpha document about transformers.",
    "b.pdf": "Beta document about retrieval.",
}


def _processor(
    fs: InMemoryFileSystem,
    store: FakeVectorStore,
    extractor: FakeExtractor,
    llm: FakeLLM | None = None,
    **kwargs,
) -> DocumentProcessor:
    return DocumentProcessor(
        vector_store=store,
        embeddings=FakeEmbeddings(),
        llm=llm or FakeLLM(),
        cache_path=CACHE,
        store=CacheStore(fs),
        extractor=extractor,
        **kwargs,
    )


def _run(processor: DocumentProcessor, sources: list[str]) -> list[ProcessResult]:
    return asyncio.run(processor.process(sources))


class TestDocumentProcessor:
    def test_processes_all_sources(self, memory_fs: InMemoryFileSystem, fake_store: FakeVectorStore) -> None:
        results = _run(_processor(memory_fs, fake_store, FakeExtractor(TEXTS)), ["a.pdf", "b.pdf"])

        assert [r.source for r in results] == ["a.pdf", "b.pdf"]
        assert all(r.ok for r in results)
        assert results[0].summary == "Summary: Alpha document about transformers."
        assert set(fake_store.points) == {r.point_id for r in results}
        assert fake_store.initialised == 1

    def test_payload_fields(self, memory_fs: InMemoryFileSystem, fake_store: FakeVectorStore) -> None:
        [result] = _run(_processor(memory_fs, fake_store, FakeExtractor(TEXTS)), ["a.pdf"])
        payload = fake_store.points[result.point_id].payload
        assert payload == {"source": "a.pdf", "file_name": "a", "summary": result.summary}

    def test_cache_saved_once_with_new_records(self, memory_fs: InMemoryFileSystem, fake_store: FakeVectorStore) -> None:
        _run(_processor(memory_fs, fake_store, FakeExtractor(TEXTS)), ["a.pdf", "b.pdf"])
        assert memory_fs.writes == 1
        assert set(json.loads(memory_fs.files[CACHE])) == {"a", "b"}

    def test_cache_hit_skips_extraction(self, memory_fs: InMemoryFileSystem, fake_store: FakeVectorStore) -> None:
        CacheStore(memory_fs).save(CACHE, {"a": CacheRecord(content="Cached alpha.", timestamp=now_ms())})
        extractor = FakeExtractor(TEXTS)

        [result] = _run(_processor(memory_fs, fake_store, extractor), ["a.pdf"])

        assert result.cached is True
        assert result.summary == "Summary: Cached alpha."
        assert extractor.calls == []

    def test_missing_file_is_isolated(self, memory_fs: InMemoryFileSystem, fake_store: FakeVectorStore) -> None:
        results = _run(_processor(memory_fs, fake_store, FakeExtractor(TEXTS)), ["a.pdf", "missing.pdf"])

        assert results[0].ok
        assert not results[1].ok
        assert "missing.pdf" in results[1].error
        assert len(fake_store.points) == 1
        assert set(json.loads(memory_fs.files[CACHE])) == {"a"}

    def test_llm_failure_keeps_extracted_text_cached(
        self, memory_fs: InMemoryFileSystem, fake_store: FakeVectorStore
    ) -> None:
        llm = FakeLLM(fail_on="Beta")
        results = _run(_processor(memory_fs, fake_store, FakeExtractor(TEXTS), llm), ["a.pdf", "b.pdf"])

        assert [r.ok for r in results] == [True, False]
        assert "model unavailable" in results[1].error
        assert set(json.loads(memory_fs.files[CACHE])) == {"a", "b"}

    def test_vector_store_failure_is_isolated(self, memory_fs: InMemoryFileSystem) -> None:
        store = FakeVectorStore(vector_size=3)  # embeddings are 8-dimensional
        results = _run(_processor(memory_fs, store, FakeExtractor(TEXTS)), ["a.pdf", "b.pdf"])
        assert not any(r.ok for r in results)
        assert all("size" in r.error for r in results)

    def test_batch_is_capped(self, memory_fs: InMemoryFileSystem, fake_store: FakeVectorStore) -> None:
        texts = {f"doc{i}.pdf": f"Document number {i}." for i in range(4)}
        results = _run(_processor(memory_fs, fake_store, FakeExtractor(texts), max_batch_size=2), list(texts))
        assert [r.source for r in results] == ["doc0.pdf", "doc1.pdf"]

    def test_empty_input(self, memory_fs: InMemoryFileSystem, fake_store: FakeVectorStore) -> None:
        assert _run(_processor(memory_fs, fake_store, FakeExtractor()), []) == []
        assert memory_fs.writes == 0

    def test_same_key_from_two_sources(self, memory_fs: InMemoryFileSystem, fake_store: FakeVectorStore) -> None:
        texts = {"x/report.pdf": "Report one.", "y/report.pdf": "Report two."}
        results = _run(_processor(memory_fs, fake_store, FakeExtractor(texts)), list(texts))

        assert all(r.ok for r in results)
        persisted = json.loads(memory_fs.files[CACHE])
        assert list(persisted) == ["report"]
        assert persisted["report"]["content"] in texts.values()

    def test_url_source_is_downloaded(self, memory_fs: InMemoryFileSystem, fake_store: FakeVectorStore) -> None:
        extractor = FakeExtractor()
        with patch("pdf_rag.processor.fetch_pdf", return_value=b"Remote paper text.") as fetch:
            [result] = _run(
                _processor(memory_fs, fake_store, extractor, request_timeout=7, max_retries=1),
                ["https://arxiv.org/pdf/2410.16928.pdf"],
            )

        fetch.assert_called_once_with("https://arxiv.org/pdf/2410.16928.pdf", timeout=7, max_retries=1)
        assert result.ok
        assert result.summary == "Summary: Remote paper text."
        assert "2410.16928" in json.loads(memory_fs.files[CACHE])

    def test_cache_write_failure_is_fatal(self, memory_fs: InMemoryFileSystem, fake_store: FakeVectorStore) -> None:
        memory_fs.files[CACHE] = b"{}"
        memory_fs.fail_writes = True
        with pytest.raises(PermissionError):
            _run(_processor(memory_fs, fake_store, FakeExtractor(TEXTS)), ["a.pdf"])
