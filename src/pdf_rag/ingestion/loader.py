"""PDF text extraction and download helpers.

Local files go through LangChain's :class:`PyPDFLoader`; downloaded bytes
are parsed with :mod:`pypdf` directly.  Either way the pages of one
document are merged into a single text blob.
"""

from __future__ import annotations

import io
import logging
import time
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

import requests
from langchain_community.document_loaders import PyPDFLoader
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from pdf_rag.errors import ExtractionError, FetchError, SourceNotFoundError

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"


def is_url(source: str) -> bool:
    return urlparse(source).scheme in ("http", "https")


def cache_key(source: str) -> str:
    """Return the base name of *source* with its extension stripped.

    Works for local paths and for URLs (the last path segment is used,
    falling back to the host name).
    """
    if is_url(source):
        parsed = urlparse(source)
        stem = PurePosixPath(parsed.path).stem
        return stem or parsed.netloc
    return Path(source).stem


class PdfExtractor:
    """Turn a PDF into plain text."""

    def extract(self, path: str | Path) -> str | None:
        """Extract all pages of the PDF at *path*.

        Returns ``None`` when the file does not exist.  Any other read or
        parse failure raises :class:`ExtractionError`.
        """
        path = Path(path)
        if not path.exists():
            logger.warning("PDF not found: %s", path)
            return None

        try:
            pages = PyPDFLoader(str(path)).load()
        except (OSError, ValueError, PyPdfError) as exc:
            raise ExtractionError(str(path), str(exc)) from exc

        text = PAGE_SEPARATOR.join(page.page_content for page in pages)
        logger.info("Extracted %d pages (%d chars) from %s", len(pages), len(text), path)
        return text

    def extract_bytes(self, data: bytes, source: str = "<bytes>") -> str:
        """Extract all pages from in-memory PDF *data*."""
        try:
            reader = PdfReader(io.BytesIO(data))
            texts = [page.extract_text() or "" for page in reader.pages]
        except (OSError, ValueError, PyPdfError) as exc:
            raise ExtractionError(source, str(exc)) from exc

        text = PAGE_SEPARATOR.join(texts)
        logger.info("Extracted %d pages (%d chars) from %s", len(texts), len(text), source)
        return text


def fetch_pdf(url: str, *, timeout: float = 30.0, max_retries: int = 3) -> bytes:
    """Download *url* and return the raw body.

    Transient failures are retried with exponential back-off.  A 404
    raises :class:`SourceNotFoundError` immediately.
    """
    last_exc: Exception | None = None
    for attempt in range(1, max_retries + 1):
        try:
            resp = requests.get(url, timeout=timeout)
            if resp.status_code == 404:
                raise SourceNotFoundError(url)
            resp.raise_for_status()
            logger.info("Fetched %s (%d bytes)", url, len(resp.content))
            return resp.content
        except requests.RequestException as exc:
            last_exc = exc
            if attempt < max_retries:
                wait = 2**attempt
                logger.warning("Retry %d/%d for %s (wait %ds): %s", attempt, max_retries, url, wait, exc)
                time.sleep(wait)
    raise FetchError(url, max_retries) from last_exc
