"""newsrag - retrieval-augmented chat over a news corpus."""

from .chat import ChatService
from .chunking import TextChunker, chunk_text, word_count
from .composer import FALLBACK_ANSWER, compose, finalize
from .embeddings import EmbeddingService
from .errors import NewsRagError, UpstreamError, ValidationError
from .generator import ChatGenerator, GenerationConfig
from .ingest import IngestionPipeline, IngestionReport
from .models import (
    ChatAnswer,
    ChatMessage,
    ChatTurnResult,
    Chunk,
    ComposedPrompt,
    Document,
    RetrievedPassage,
    SearchHit,
    SourceCitation,
    VectorPoint,
)
from .retry import RetryPolicy
from .sessions import SQLiteSessionStore
from .vector_store import FaissVectorIndex, InMemoryVectorIndex, get_vector_index

__all__ = [
    "FALLBACK_ANSWER",
    "ChatAnswer",
    "ChatGenerator",
    "ChatMessage",
    "ChatService",
    "ChatTurnResult",
    "Chunk",
    "ComposedPrompt",
    "Document",
    "EmbeddingService",
    "FaissVectorIndex",
    "GenerationConfig",
    "InMemoryVectorIndex",
    "IngestionPipeline",
    "IngestionReport",
    "NewsRagError",
    "RetrievedPassage",
    "RetryPolicy",
    "SQLiteSessionStore",
    "SearchHit",
    "SourceCitation",
    "TextChunker",
    "UpstreamError",
    "ValidationError",
    "VectorPoint",
    "chunk_text",
    "compose",
    "finalize",
    "get_vector_index",
    "word_count",
]
