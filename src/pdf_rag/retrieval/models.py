"""Domain models for vector-store queries and results."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, Field


class MetadataFilter(BaseModel):
    """Declarative payload filter for vector-store queries.

    Attributes
    ----------
    field:
        The payload key to filter on (e.g. ``"file_name"``).
    operator:
        Comparison operator — one of ``eq``, ``ne``, ``in``.
    value:
        The value (or list of values for ``in``) to compare against.
    """

    field: str
    operator: str = "eq"
    value: Any = None

    @classmethod
    def equals(cls, field: str, value: Any) -> MetadataFilter:
        return cls(field=field, operator="eq", value=value)

    @classmethod
    def not_equals(cls, field: str, value: Any) -> MetadataFilter:
        return cls(field=field, operator="ne", value=value)

    @classmethod
    def one_of(cls, field: str, values: list[Any]) -> MetadataFilter:
        return cls(field=field, operator="in", value=values)

    @classmethod
    def from_mapping(cls, conditions: Mapping[str, Any]) -> list[MetadataFilter]:
        """Turn ``{"field": value, ...}`` into exact-match filters (ANDed)."""
        return [cls.equals(key, value) for key, value in conditions.items()]


class VectorPoint(BaseModel):
    """One stored vector with its payload."""

    id: str
    vector: list[float]
    payload: dict[str, str] = Field(default_factory=dict)


class SearchHit(BaseModel):
    """A similarity-search match.  Higher :attr:`score` means more similar."""

    id: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)
