"""Vector index adapters and factory."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from newsrag.config import config

from .faiss_store import FaissVectorIndex
from .memory_store import InMemoryVectorIndex

if TYPE_CHECKING:
    from pathlib import Path

VectorBackend = Literal["faiss", "memory"]


def get_vector_index(
    backend: VectorBackend = "faiss",
    *,
    db_path: Path | None = None,
    index_path: Path | None = None,
    dimension: int | None = None,
    collection_name: str | None = None,
) -> FaissVectorIndex | InMemoryVectorIndex:
    """Return a configured vector index instance.

    Raises:
        ValueError: If an unsupported backend is requested.
    """
    if dimension is None:
        dimension = config.VECTOR_SIZE
    if collection_name is None:
        collection_name = config.VECTOR_COLLECTION_NAME
    backend_value = backend.lower()

    if backend_value == "faiss":
        return FaissVectorIndex(
            db_path=db_path if db_path is not None else config.VECTOR_STORE_DB_PATH,
            index_path=(
                index_path if index_path is not None else config.FAISS_INDEX_PATH
            ),
            dimension=dimension,
            collection_name=collection_name,
        )

    if backend_value == "memory":
        return InMemoryVectorIndex(dimension=dimension, collection_name=collection_name)

    msg = f"Unsupported vector store backend: {backend}"
    raise ValueError(msg)


__all__ = [
    "FaissVectorIndex",
    "InMemoryVectorIndex",
    "VectorBackend",
    "get_vector_index",
]
