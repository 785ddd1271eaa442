"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator

import chromadb
from chromadb.errors import ChromaError, InvalidDimensionException, NotFoundError

from pdf_rag.errors import VectorStoreError, VectorStoreErrorKind
from pdf_rag.retrieval.base import VectorStoreBase
from pdf_rag.retrieval.models import MetadataFilter, SearchHit, VectorPoint

if TYPE_CHECKING:
    from chromadb.api import ClientAPI
    from chromadb.api.models.Collection import Collection

    from pdf_rag.config import Settings

logger = logging.getLogger(__name__)

DISTANCE_METRIC = "cosine"
_DIMENSION_KEY = "dimension"


def _build_chroma_where(filters: list[MetadataFilter]) -> dict[str, Any] | None:
    """Convert a list of :class:`MetadataFilter` to Chroma ``where`` syntax."""
    if not filters:
        return None

    _OP_MAP = {
        "eq": "$eq",
        "ne": "$ne",
        "in": "$in",
    }

    clauses: list[dict[str, Any]] = []
    for f in filters:
        chroma_op = _OP_MAP.get(f.operator)
        if chroma_op is None:
            raise ValueError(f"Unsupported filter operator: {f.operator!r}")
        clauses.append({f.field: {chroma_op: f.value}})

    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    """Re-raise Chroma / transport failures as :class:`VectorStoreError`."""
    try:
        yield
    except VectorStoreError:
        raise
    except NotFoundError as exc:
        raise VectorStoreError(VectorStoreErrorKind.NOT_FOUND, f"{action}: {exc}") from exc
    except InvalidDimensionException as exc:
        raise VectorStoreError(VectorStoreErrorKind.DIMENSION_MISMATCH, f"{action}: {exc}") from exc
    except (ChromaError, ValueError) as exc:
        raise VectorStoreError(VectorStoreErrorKind.INVALID_REQUEST, f"{action}: {exc}") from exc
    except Exception as exc:
        raise VectorStoreError(VectorStoreErrorKind.BACKEND, f"{action}: {exc}") from exc


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    vector_size:
        Dimensionality of the embeddings stored in the collection.
    host / port:
        Chroma server location, used when *client* is not given.
    client:
        A ready Chroma client (e.g. ``chromadb.EphemeralClient()`` in tests).
    """

    def __init__(
        self,
        collection_name: str,
        vector_size: int,
        *,
        host: str = "localhost",
        port: int = 8000,
        client: ClientAPI | None = None,
    ) -> None:
        super().__init__(collection_name, vector_size)
        self._client = client or chromadb.HttpClient(host=host, port=port)
        self._collection: Collection | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> ChromaVectorStore:
        return cls(
            settings.collection_name,
            settings.vector_size,
            host=settings.chroma_host,
            port=settings.chroma_port,
        )

    # -- VectorStoreBase overrides --------------------------------------------

    def init_collection(self) -> None:
        with _translate_errors(f"init collection {self.collection_name!r}"):
            collection = self._client.get_or_create_collection(
                self.collection_name,
                metadata={"hnsw:space": DISTANCE_METRIC, _DIMENSION_KEY: self.vector_size},
            )

        meta = collection.metadata or {}
        existing = meta.get(_DIMENSION_KEY)
        if existing is not None and int(existing) != self.vector_size:
            raise VectorStoreError(
                VectorStoreErrorKind.DIMENSION_MISMATCH,
                f"Collection {self.collection_name!r} holds vectors of size {existing}, "
                f"not {self.vector_size}",
            )
        space = meta.get("hnsw:space", DISTANCE_METRIC)
        if space != DISTANCE_METRIC:
            raise VectorStoreError(
                VectorStoreErrorKind.INVALID_REQUEST,
                f"Collection {self.collection_name!r} uses {space!r} distance, not {DISTANCE_METRIC!r}",
            )

        self._collection = collection
        logger.info("Collection %r ready (size=%d, distance=%s)", self.collection_name, self.vector_size, space)

    def _upsert(self, points: list[VectorPoint]) -> None:
        collection = self._require_collection()
        with _translate_errors(f"upsert into {self.collection_name!r}"):
            collection.upsert(
                ids=[p.id for p in points],
                embeddings=[p.vector for p in points],
                # Chroma rejects empty metadata dicts; None means "no payload".
                metadatas=[p.payload or None for p in points],
            )
        logger.info("Upserted %d points into %r", len(points), self.collection_name)

    def _query(
        self,
        vector: list[float],
        limit: int,
        filters: list[MetadataFilter] | None,
    ) -> list[SearchHit]:
        collection = self._require_collection()
        where = _build_chroma_where(filters) if filters else None

        with _translate_errors(f"query {self.collection_name!r}"):
            results = collection.query(
                query_embeddings=[vector],
                n_results=limit,
                where=where,
                include=["metadatas", "distances"],
            )

        ids = (results.get("ids") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0] or [None] * len(ids)
        distances = (results.get("distances") or [[]])[0] or [1.0] * len(ids)

        hits = [
            # Cosine space returns distance = 1 - cosine similarity.
            SearchHit(id=point_id, score=1.0 - float(dist), metadata=dict(meta or {}))
            for point_id, meta, dist in zip(ids, metas, distances)
        ]
        hits.sort(key=lambda hit: hit.score, reverse=True)
        return hits

    def delete(self, point_id: str) -> None:
        collection = self._require_collection()
        with _translate_errors(f"delete {point_id!r} from {self.collection_name!r}"):
            collection.delete(ids=[point_id])
        logger.info("Deleted point %s from %r", point_id, self.collection_name)

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    # -- internals ------------------------------------------------------------

    def _require_collection(self) -> Collection:
        if self._collection is None:
            self.init_collection()
        if self._collection is None:
            raise VectorStoreError(
                VectorStoreErrorKind.BACKEND,
                f"Collection {self.collection_name!r} is not initialised",
            )
        return self._collection
