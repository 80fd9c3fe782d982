"""Ingestion pipeline: Chunk -> Embed -> Upsert."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .config import config
from .models import VectorPoint
from .retry import RetryPolicy

if TYPE_CHECKING:
    import numpy as np

    from .chunking import TextChunker
    from .interfaces import Embedder, VectorIndex
    from .models import Chunk, Document

logger = config.get_logger(__name__)


@dataclass(frozen=True)
class IngestionReport:
    documents: int
    chunks: int
    batches: int
    points: int
    collection: dict[str, Any]


class IngestionPipeline:
    """Turns a document corpus into indexed, embedded chunks.

    Embedding runs in fixed-size batches with a pause between batches to stay
    under upstream rate limits. Point ids are sequential from 1.
    """

    def __init__(  # noqa: PLR0913
        self,
        chunker: TextChunker,
        embedder: Embedder,
        index: VectorIndex,
        *,
        batch_size: int | None = None,
        batch_delay_seconds: float | None = None,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the ingestion pipeline.

        Args:
            chunker: Splits documents into chunk records.
            embedder: Embedding provider.
            index: Vector index receiving the points.
            batch_size: Chunks per embedding call. If None, uses
                config.EMBED_BATCH_SIZE.
            batch_delay_seconds: Pause between batches. If None, uses
                config.EMBED_BATCH_DELAY_SECONDS.
            retry_policy: Retry policy for embedding calls. If None, built
                from configuration.
            sleep: Sleep function, injectable for tests.
        """
        if batch_size is None:
            batch_size = config.EMBED_BATCH_SIZE
        if batch_delay_seconds is None:
            batch_delay_seconds = config.EMBED_BATCH_DELAY_SECONDS
        if batch_size <= 0:
            msg = f"batch_size must be positive, got {batch_size}"
            raise ValueError(msg)

        self.chunker = chunker
        self.embedder = embedder
        self.index = index
        self.batch_size = batch_size
        self.batch_delay_seconds = batch_delay_seconds
        self.retry_policy = retry_policy or RetryPolicy.from_config(sleep=sleep)
        self._sleep = sleep

    @staticmethod
    def build_points(
        chunks: Sequence[Chunk], embeddings: Sequence[np.ndarray], first_id: int
    ) -> list[VectorPoint]:
        return [
            VectorPoint(
                id=first_id + offset, vector=embedding, payload=chunk.to_payload()
            )
            for offset, (chunk, embedding) in enumerate(
                zip(chunks, embeddings, strict=True)
            )
        ]

    def ingest(self, documents: Sequence[Document]) -> IngestionReport:
        """Chunk, embed and index a corpus.

        Returns:
            Counts of what was processed and the final collection info.

        Raises:
            UpstreamError: If embedding fails after retries or indexing fails.
        """
        logger.info("Starting vector ingestion for %d articles", len(documents))
        self.index.ensure_collection()

        chunks = self.chunker.chunk_documents(documents)
        total_batches = -(-len(chunks) // self.batch_size)
        next_id = 1

        for batch_number, start in enumerate(
            range(0, len(chunks), self.batch_size), start=1
        ):
            batch = chunks[start : start + self.batch_size]
            logger.info(
                "[Batch %d/%d] Processing %d chunks...",
                batch_number,
                total_batches,
                len(batch),
            )

            embeddings = self.retry_policy.run(
                self.embedder.embed, [chunk.text for chunk in batch]
            )
            points = self.build_points(batch, embeddings, next_id)
            self.index.upsert(points)
            next_id += len(points)

            if start + self.batch_size < len(chunks):
                logger.debug(
                    "Waiting %.1f seconds before next batch", self.batch_delay_seconds
                )
                self._sleep(self.batch_delay_seconds)

        self.index.save()
        collection = self.index.collection_info()
        logger.info(
            "Ingestion complete: %d vectors in %s",
            collection.get("points_count", 0),
            collection.get("name"),
        )
        return IngestionReport(
            documents=len(documents),
            chunks=len(chunks),
            batches=total_batches,
            points=next_id - 1,
            collection=collection,
        )
