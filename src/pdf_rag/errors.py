"""Exception hierarchy shared across the package."""

from __future__ import annotations

from enum import Enum


class PdfRagError(Exception):
    """Base class for all errors raised by pdf_rag."""


class SourceNotFoundError(PdfRagError):
    """A requested file or URL does not exist."""

    def __init__(self, source: str) -> None:
        super().__init__(f"Source not found: {source}")
        self.source = source


class ExtractionError(PdfRagError):
    """A source exists but its text could not be read or parsed."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Failed to extract {source}: {reason}")
        self.source = source


class FetchError(PdfRagError):
    """A remote PDF could not be downloaded."""

    def __init__(self, url: str, attempts: int) -> None:
        super().__init__(f"Failed to fetch {url} after {attempts} attempts")
        self.url = url
        self.attempts = attempts


class VectorStoreErrorKind(str, Enum):
    """Structured reason attached to every :class:`VectorStoreError`."""

    NOT_FOUND = "not_found"
    DIMENSION_MISMATCH = "dimension_mismatch"
    INVALID_REQUEST = "invalid_request"
    BACKEND = "backend"


class VectorStoreError(PdfRagError):
    """A vector-index operation failed.

    Callers branch on :attr:`kind` rather than on the message text.
    """

    def __init__(self, kind: VectorStoreErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
