"""Builds the configured collaborators for the CLI and the web UI."""

from __future__ import annotations

from typing import cast

from .chat import ChatService
from .chunking import TextChunker
from .config import config
from .embeddings import EmbeddingService
from .generator import ChatGenerator
from .ingest import IngestionPipeline
from .retry import RetryPolicy
from .sessions import SQLiteSessionStore
from .vector_store import (
    FaissVectorIndex,
    InMemoryVectorIndex,
    VectorBackend,
    get_vector_index,
)

logger = config.get_logger(__name__)


def build_vector_index() -> FaissVectorIndex | InMemoryVectorIndex:
    backend = cast("VectorBackend", config.VECTOR_BACKEND)
    index = get_vector_index(backend)
    logger.info("Using %s vector index", index.backend)
    return index


def build_chat_service(api_key: str | None = None) -> ChatService:
    """Wire a ChatService from configuration."""
    index = build_vector_index()
    index.load()
    return ChatService(
        sessions=SQLiteSessionStore(
            db_path=config.SESSION_DB_PATH, ttl_seconds=config.SESSION_TTL_SECONDS
        ),
        embedder=EmbeddingService(api_key=api_key),
        index=index,
        generator=ChatGenerator(api_key=api_key),
        top_k=config.RETRIEVAL_TOP_K,
        retry_policy=RetryPolicy.from_config(),
    )


def build_ingestion_pipeline(api_key: str | None = None) -> IngestionPipeline:
    """Wire an IngestionPipeline from configuration."""
    return IngestionPipeline(
        chunker=TextChunker(target_words=config.INGEST_CHUNK_WORDS),
        embedder=EmbeddingService(api_key=api_key),
        index=build_vector_index(),
        batch_size=config.EMBED_BATCH_SIZE,
        batch_delay_seconds=config.EMBED_BATCH_DELAY_SECONDS,
        retry_policy=RetryPolicy.from_config(),
    )
