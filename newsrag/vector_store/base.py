"""SQLite payload storage shared by the vector index backends."""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np

from newsrag.config import config
from newsrag.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from newsrag.models import VectorPoint

logger = config.get_logger(__name__)


def as_query_vector(vector: object, dimension: int | None) -> np.ndarray:
    """Coerce a query or point vector to a 1-D float32 array.

    Raises:
        ValidationError: If the vector is empty, not 1-D or has the wrong size.
    """
    try:
        array = np.asarray(vector, dtype="float32")
    except (TypeError, ValueError) as exc:
        msg = "Invalid vector: expected a sequence of floats"
        raise ValidationError(msg) from exc
    if array.ndim != 1 or array.size == 0:
        msg = f"Invalid vector: expected a non-empty 1-D vector, got {array.shape}"
        raise ValidationError(msg)
    if dimension is not None and array.shape[0] != dimension:
        msg = (
            f"Vector dimension {array.shape[0]} does not match "
            f"index dimension {dimension}"
        )
        raise ValidationError(msg)
    return array


def validate_points(points: Sequence[VectorPoint]) -> None:
    """Reject empty batches and duplicate ids within one batch.

    Raises:
        ValidationError: If there is nothing to insert or an id repeats.
    """
    if not points:
        msg = "No points to insert"
        raise ValidationError(msg)
    ids = [int(point.id) for point in points]
    if len(set(ids)) != len(ids):
        msg = "Point ids must be unique within a batch"
        raise ValidationError(msg)


class BaseSQLiteStore:
    """Keeps point payloads as JSON rows keyed by the vector id."""

    def __init__(self, db_path: Path) -> None:
        """Initialize payload store and ensure schema exists."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(exist_ok=True, parents=True)
        self._create_tables()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def _create_tables(self) -> None:
        """Create the payload table if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS points (
                    id INTEGER PRIMARY KEY,
                    payload TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()

    @staticmethod
    def _write_payloads(
        cursor: sqlite3.Cursor, points: Iterable[VectorPoint]
    ) -> None:
        cursor.executemany(
            """
            INSERT INTO points (id, payload) VALUES (?, ?)
            ON CONFLICT(id) DO UPDATE SET
                payload = excluded.payload,
                updated_at = CURRENT_TIMESTAMP
            """,
            [(int(point.id), json.dumps(point.payload)) for point in points],
        )

    @staticmethod
    def _read_payloads(
        cursor: sqlite3.Cursor, ids: Sequence[int]
    ) -> dict[int, dict[str, Any]]:
        if not ids:
            return {}
        placeholders = ",".join("?" for _ in ids)
        cursor.execute(
            f"SELECT id, payload FROM points WHERE id IN ({placeholders})",  # noqa: S608
            [int(point_id) for point_id in ids],
        )
        return {int(row[0]): json.loads(row[1]) for row in cursor.fetchall()}

    def get_payloads(self, ids: Sequence[int]) -> dict[int, dict[str, Any]]:
        """Fetch stored payloads by point id.

        Returns:
            Mapping of id to payload for the ids that exist.
        """
        with self._connect() as conn:
            return self._read_payloads(conn.cursor(), ids)

    def payload_count(self) -> int:
        with self._connect() as conn:
            return int(conn.execute("SELECT COUNT(*) FROM points").fetchone()[0])

    def _clear_payloads(self) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM points")
            conn.commit()
