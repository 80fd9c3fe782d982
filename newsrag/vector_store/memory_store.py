"""In-process numpy vector index for offline runs and tests."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np

from newsrag.config import config
from newsrag.models import SearchHit
from newsrag.vector_store.base import as_query_vector, validate_points

if TYPE_CHECKING:
    from collections.abc import Sequence

    from newsrag.models import VectorPoint

logger = config.get_logger(__name__)


def _unit(vector: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vector)
    if norm == 0:
        return vector
    return vector / norm


class InMemoryVectorIndex:
    """Brute-force cosine similarity over vectors held in memory."""

    backend = "memory"

    def __init__(
        self, dimension: int = 1536, collection_name: str = "news_articles"
    ) -> None:
        self.dimension = dimension
        self.collection_name = collection_name
        self._vectors: dict[int, np.ndarray] = {}
        self._payloads: dict[int, dict[str, Any]] = {}

    def ensure_collection(self) -> None:
        logger.info("Using in-memory collection: %s", self.collection_name)

    def upsert(self, points: Sequence[VectorPoint]) -> None:
        """Insert points, replacing any existing point with the same id.

        Raises:
            ValidationError: On empty input, repeated ids or wrong dimension.
        """
        validate_points(points)
        vectors = [as_query_vector(point.vector, self.dimension) for point in points]
        for point, vector in zip(points, vectors, strict=True):
            self._vectors[int(point.id)] = _unit(vector)
            self._payloads[int(point.id)] = dict(point.payload)
        logger.info("Inserted %d vectors into %s", len(points), self.collection_name)

    def search(self, vector: object, top_k: int = 5) -> list[SearchHit]:
        query = _unit(as_query_vector(vector, self.dimension))
        if not self._vectors or top_k <= 0:
            return []

        ids = list(self._vectors)
        scores = np.vstack([self._vectors[point_id] for point_id in ids]) @ query
        order = np.argsort(-scores, kind="stable")[:top_k]
        return [
            SearchHit(score=float(scores[i]), payload=dict(self._payloads[ids[i]]))
            for i in order
        ]

    def save(self) -> None:
        logger.debug("In-memory collection %s is not persisted", self.collection_name)

    def load(self) -> None:
        logger.debug("Nothing to load for in-memory %s", self.collection_name)

    def collection_info(self) -> dict[str, Any]:
        return {
            "name": self.collection_name,
            "points_count": len(self._vectors),
            "vector_size": self.dimension,
        }

    def delete_collection(self) -> None:
        self._vectors.clear()
        self._payloads.clear()
        logger.info("Deleted collection: %s", self.collection_name)
