"""Cache record schema and the validator that guards loading."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, ValidationError


class CacheRecord(BaseModel):
    """Extracted text for one source file.

    Attributes
    ----------
    content:
        Full extracted text of the document.
    timestamp:
        Epoch milliseconds at which the record was written.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    content: str
    timestamp: int


# Cache key (file stem) → record.
Cache = dict[str, CacheRecord]


@dataclass(frozen=True)
class Valid:
    record: CacheRecord


@dataclass(frozen=True)
class Invalid:
    reason: str


ValidationResult = Union[Valid, Invalid]


def validate_record(raw: Any) -> ValidationResult:
    """Check one raw cache entry and tag the outcome.

    Missing fields and mistyped values (including ``bool`` or ``float``
    timestamps) yield :class:`Invalid`; nothing is raised.
    """
    if not isinstance(raw, dict):
        return Invalid(f"expected an object, got {type(raw).__name__}")
    try:
        return Valid(CacheRecord.model_validate(raw))
    except ValidationError as exc:
        problems = ", ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}" for err in exc.errors()
        )
        return Invalid(problems)


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return int(time.time() * 1000)
