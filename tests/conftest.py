"""Shared pytest configuration, fakes and fixtures."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any

import pytest
from langchain_core.messages import AIMessage

from pdf_rag.cache import InMemoryFileSystem
from pdf_rag.retrieval.base import VectorStoreBase
from pdf_rag.retrieval.models import MetadataFilter, SearchHit, VectorPoint

VECTOR_SIZE = 8


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── PDF fixture builder ────────────────────────────────────────────────


def build_pdf(pages: list[str]) -> bytes:
    """Assemble a minimal PDF with one line of Helvetica text per page."""
    page_ids = [4 + 2 * i for i in range(len(pages))]
    objects: dict[int, bytes] = {
        1: b"<< /Type /Catalog /Pages 2 0 R >>",
        2: (
            f"<< /Type /Pages /Kids [{' '.join(f'{p} 0 R' for p in page_ids)}] "
            f"/Count {len(pages)} >>"
        ).encode(),
        3: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    }
    for page_id, text in zip(page_ids, pages):
        stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode()
        objects[page_id] = (
            "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 3 0 R >> >> /Contents {page_id + 1} 0 R >>"
        ).encode()
        objects[page_id + 1] = b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"

    out = bytearray(b"%PDF-1.4\n")
    offsets: dict[int, int] = {}
    for obj_id in sorted(objects):
        offsets[obj_id] = len(out)
        out += f"{obj_id} 0 obj\n".encode() + objects[obj_id] + b"\nendobj\n"

    xref_at = len(out)
    size = max(objects) + 1
    out += f"xref\n0 {size}\n".encode()
    out += b"0000000000 65535 f \n"
    for obj_id in range(1, size):
        out += f"{offsets[obj_id]:010d} 00000 n \n".encode()
    out += f"trailer\n<< /Size {size} /Root 1 0 R >>\nstartxref\n{xref_at}\n%%EOF\n".encode()
    return bytes(out)


# ── Fakes ──────────────────────────────────────────────────────────────


class FakeExtractor:
    """Returns canned text per source and records every call."""

    def __init__(self, texts: dict[str, str] | None = None, broken: set[str] | None = None) -> None:
        self.texts = dict(texts or {})
        self.broken = set(broken or ())
        self.calls: list[str] = []

    def extract(self, path: str | Path) -> str | None:
        from pdf_rag.errors import ExtractionError

        source = str(path)
        self.calls.append(source)
        if source in self.broken:
            raise ExtractionError(source, "unreadable")
        return self.texts.get(source)

    def extract_bytes(self, data: bytes, source: str = "<bytes>") -> str:
        self.calls.append(source)
        return data.decode()


class FakeVectorStore(VectorStoreBase):
    """In-memory store computing real cosine similarity."""

    def __init__(self, vector_size: int = VECTOR_SIZE) -> None:
        super().__init__("test-collection", vector_size)
        self.points: dict[str, VectorPoint] = {}
        self.initialised = 0
        self.upsert_calls = 0
        self.last_filters: list[MetadataFilter] | None = None

    def init_collection(self) -> None:
        self.initialised += 1

    def _upsert(self, points: list[VectorPoint]) -> None:
        self.upsert_calls += 1
        for point in points:
            self.points[point.id] = point

    def _query(
        self,
        vector: list[float],
        limit: int,
        filters: list[MetadataFilter] | None,
    ) -> list[SearchHit]:
        self.last_filters = filters
        hits = []
        for point in self.points.values():
            if filters and not all(point.payload.get(f.field) == f.value for f in filters):
                continue
            hits.append(SearchHit(id=point.id, score=_cosine(vector, point.vector), metadata=point.payload))
        hits.sort(key=lambda h: h.score, reverse=True)
        return hits[:limit]

    def delete(self, point_id: str) -> None:
        self.points.pop(point_id, None)

    def health_check(self) -> bool:
        return True


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class FakeEmbeddings:
    """Deterministic bag-of-characters embedding."""

    def __init__(self, size: int = VECTOR_SIZE) -> None:
        self.size = size
        self.calls: list[str] = []

    def embed_query(self, text: str) -> list[float]:
        self.calls.append(text)
        vector = [0.0] * self.size
        for i, ch in enumerate(text):
            vector[(ord(ch) + i) % self.size] += 1.0
        return vector


class FakeLLM:
    """Echoes the first words of the document as its "summary"."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.fail_on = fail_on
        self.calls = 0

    def invoke(self, messages: list[Any]) -> AIMessage:
        self.calls += 1
        body = messages[-1].content
        if self.fail_on and self.fail_on in body:
            raise RuntimeError("model unavailable")
        doc = body.split("---")[1].strip()
        return AIMessage(content=f"  Summary: {doc[:40]}  ")


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture()
def memory_fs() -> InMemoryFileSystem:
    return InMemoryFileSystem()


@pytest.fixture()
def fake_store() -> FakeVectorStore:
    return FakeVectorStore()


@pytest.fixture()
def fake_embeddings() -> FakeEmbeddings:
    return FakeEmbeddings()


@pytest.fixture()
def fake_llm() -> FakeLLM:
    return FakeLLM()
