"""Abstract base class for vector-store backends.

Adding a new backend (Qdrant, Pinecone, …) only requires subclassing
:class:`VectorStoreBase` and implementing the abstract methods.  Id
generation, vector-length checks, and the mapping-to-filter conversion
live here so every backend behaves the same.
"""

from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from typing import Mapping, Sequence

from pdf_rag.errors import VectorStoreError, VectorStoreErrorKind
from pdf_rag.retrieval.models import MetadataFilter, SearchHit, VectorPoint

# (vector, metadata) pair accepted by :meth:`VectorStoreBase.batch_store`.
VectorItem = tuple[Sequence[float], Mapping[str, str]]


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    vector_size:
        Dimensionality every stored and queried vector must have.
    """

    def __init__(self, collection_name: str, vector_size: int) -> None:
        self.collection_name = collection_name
        self.vector_size = vector_size

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def init_collection(self) -> None:
        """Ensure the collection exists with cosine distance.

        Must succeed when the collection already exists with the same
        dimensionality.
        """
        ...

    @abstractmethod
    def _upsert(self, points: list[VectorPoint]) -> None:
        """Write *points* in one request and return once acknowledged."""
        ...

    @abstractmethod
    def _query(
        self,
        vector: list[float],
        limit: int,
        filters: list[MetadataFilter] | None,
    ) -> list[SearchHit]:
        """Return up to *limit* hits, most similar first."""
        ...

    @abstractmethod
    def delete(self, point_id: str) -> None:
        """Remove one point.  Unknown ids are not an error."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...

    # -- public API -----------------------------------------------------------

    def store(self, vector: Sequence[float], metadata: Mapping[str, str]) -> str:
        """Store one vector under a freshly generated id and return the id."""
        return self.batch_store([(vector, metadata)])[0]

    def batch_store(self, items: Sequence[VectorItem]) -> list[str]:
        """Store all *items* in a single upsert.

        Returns one new id per item, in the same order as *items*.
        """
        if not items:
            return []
        points = [
            VectorPoint(id=str(uuid.uuid4()), vector=self._check_vector(vector), payload=dict(metadata))
            for vector, metadata in items
        ]
        self._upsert(points)
        return [point.id for point in points]

    def search(self, vector: Sequence[float], limit: int = 5) -> list[SearchHit]:
        """Return the *limit* nearest points to *vector*."""
        if limit <= 0:
            return []
        return self._query(self._check_vector(vector), limit, None)

    def search_filtered(
        self,
        vector: Sequence[float],
        filter: Mapping[str, str],  # noqa: A002
        limit: int = 5,
    ) -> list[SearchHit]:
        """Like :meth:`search`, restricted to points whose payload matches every key in *filter*."""
        if limit <= 0:
            return []
        filters = MetadataFilter.from_mapping(filter) or None
        return self._query(self._check_vector(vector), limit, filters)

    # -- internals ------------------------------------------------------------

    def _check_vector(self, vector: Sequence[float]) -> list[float]:
        if len(vector) != self.vector_size:
            raise VectorStoreError(
                VectorStoreErrorKind.INVALID_REQUEST,
                f"Expected a vector of size {self.vector_size}, got {len(vector)}",
            )
        return [float(x) for x in vector]
