"""FAISS-backed vector index with SQLite payloads."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import faiss
import numpy as np

from newsrag.config import config
from newsrag.errors import ValidationError
from newsrag.models import SearchHit
from newsrag.vector_store.base import (
    BaseSQLiteStore,
    as_query_vector,
    validate_points,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from newsrag.models import VectorPoint

logger = config.get_logger(__name__)


def _normalized_matrix(vectors: Sequence[np.ndarray]) -> np.ndarray:
    """Stack vectors into a contiguous float32 matrix with unit rows.

    Inner product over unit vectors is cosine similarity.
    """
    matrix = np.ascontiguousarray(np.vstack(vectors), dtype="float32").copy()
    faiss.normalize_L2(matrix)
    return matrix


class FaissVectorIndex(BaseSQLiteStore):
    """Cosine similarity index using FAISS for vectors and SQLite for payloads."""

    backend = "faiss"

    def __init__(
        self,
        db_path: Path = Path("data/vector_store.db"),
        index_path: Path = Path("data/faiss/news_articles.faiss"),
        dimension: int = 1536,
        collection_name: str = "news_articles",
    ) -> None:
        """Configure FAISS-backed vector index."""
        self.index_path = Path(index_path)
        self.index_path.parent.mkdir(exist_ok=True, parents=True)
        self.dimension = dimension
        self.collection_name = collection_name
        self.index: faiss.IndexIDMap | None = None

        super().__init__(db_path)

    def _init_index(self) -> None:
        base_index = faiss.IndexFlatIP(self.dimension)
        self.index = faiss.IndexIDMap(base_index)
        logger.info(
            "Created collection %s (FAISS IndexIDMap, dimension %d)",
            self.collection_name,
            self.dimension,
        )

    def ensure_collection(self) -> None:
        """Load the index from disk, or create an empty one if there is none."""
        if self.index is not None:
            logger.info("Collection already exists: %s", self.collection_name)
            return
        self.load()
        if self.index is None:
            logger.info("Collection %s not found, creating...", self.collection_name)
            self._init_index()

    def upsert(self, points: Sequence[VectorPoint]) -> None:
        """Insert points, replacing any existing point with the same id.

        Raises:
            ValidationError: If there are no points, ids repeat or a vector
                has the wrong dimension.
        """
        validate_points(points)
        vectors = [as_query_vector(point.vector, self.dimension) for point in points]

        if self.index is None:
            self.ensure_collection()
        index = self.index

        ids_array = np.asarray([int(point.id) for point in points], dtype="int64")
        index.remove_ids(ids_array)
        index.add_with_ids(_normalized_matrix(vectors), ids_array)  # pyright: ignore[reportCallIssue]

        with self._connect() as conn:
            self._write_payloads(conn.cursor(), points)
            conn.commit()

        logger.info("Inserted %d vectors into %s", len(points), self.collection_name)

    def search(self, vector: object, top_k: int = 5) -> list[SearchHit]:
        """Search the top-k most similar points.

        Returns:
            Hits ordered by descending cosine similarity.
        """
        query = as_query_vector(vector, self.dimension)
        if self.index is None:
            self.load()
        index = self.index
        if index is None or index.ntotal == 0:
            logger.warning(
                "Collection %s is empty; returning no results", self.collection_name
            )
            return []
        if top_k <= 0:
            return []

        limit = min(top_k, index.ntotal)
        scores, ids = index.search(_normalized_matrix([query]), limit)  # pyright: ignore[reportCallIssue]

        matched = [
            (float(score), int(point_id))
            for score, point_id in zip(scores[0], ids[0], strict=True)
            if int(point_id) != -1  # faiss pads missing results with -1
        ]
        payloads = self.get_payloads([point_id for _, point_id in matched])
        return [
            SearchHit(score=score, payload=payloads[point_id])
            for score, point_id in matched
            if point_id in payloads
        ]

    def save(self) -> None:
        """Persist FAISS index to disk."""
        if self.index is None:
            logger.warning("No FAISS index to save")
            return
        self.index_path.parent.mkdir(exist_ok=True, parents=True)
        faiss.write_index(self.index, str(self.index_path))
        logger.info("Saved FAISS index to %s", self.index_path)

    def load(self) -> None:
        """Load the FAISS index from disk if it exists.

        Raises:
            ValidationError: If the stored index has a different dimension.
        """
        if not self.index_path.exists():
            logger.warning(
                "FAISS index not found at %s. Start with an empty index.",
                self.index_path,
            )
            self.index = None
            return

        loaded = faiss.read_index(str(self.index_path))
        if loaded.d != self.dimension:
            msg = (
                f"Stored index dimension {loaded.d} does not match "
                f"configured dimension {self.dimension}"
            )
            raise ValidationError(msg)
        if not isinstance(loaded, (faiss.IndexIDMap, faiss.IndexIDMap2)):
            logger.warning(
                "Loaded FAISS index is %s; wrapping with IndexIDMap to enable IDs",
                type(loaded).__name__,
            )
            loaded = faiss.IndexIDMap(loaded)
        self.index = loaded
        logger.info(
            "Loaded FAISS index from %s with %d vectors",
            self.index_path,
            loaded.ntotal,
        )

    def collection_info(self) -> dict[str, Any]:
        return {
            "name": self.collection_name,
            "points_count": int(self.index.ntotal) if self.index is not None else 0,
            "vector_size": self.dimension,
        }

    def delete_collection(self) -> None:
        """Drop all vectors and payloads, including the file on disk."""
        self.index = None
        if self.index_path.exists():
            self.index_path.unlink()
        self._clear_payloads()
        logger.info("Deleted collection: %s", self.collection_name)
