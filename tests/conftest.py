"""Test configuration and fixtures for newsrag tests.

This module provides reusable test fixtures organized by functionality:
- Constants and test data
- Mock services and API responses
- EmbeddingService and ChatGenerator fixtures
- Vector index and session store fixtures
- Sample data factories
"""

import hashlib
from unittest.mock import Mock, patch

import numpy as np
import pytest

from newsrag import (
    ChatGenerator,
    ChatService,
    Document,
    EmbeddingService,
    FaissVectorIndex,
    InMemoryVectorIndex,
    RetrievedPassage,
    RetryPolicy,
    SQLiteSessionStore,
    TextChunker,
    VectorPoint,
)


class TestConstants:
    """Centralized test constants to avoid repetition across test files."""

    # API Configuration
    TEST_API_KEY = "test-key"
    TEST_EMBEDDING_MODEL = "text-embedding-3-small"
    TEST_CHAT_MODEL = "test-chat-model"
    EMBEDDING_DIMENSION = 8

    # Session Configuration
    SESSION_TTL = 1800
    START_TIME = 1_700_000_000.0


class MockEmbeddingService:
    """Mock embedder for testing without API calls.

    Generates deterministic embeddings based on text content hash,
    ensuring consistent test results across runs.
    """

    def __init__(self, dimension: int = TestConstants.EMBEDDING_DIMENSION) -> None:
        self.dimension = dimension
        self.calls: list[list[str]] = []

    def embed_one(self, text: str) -> np.ndarray:
        return self.embed([text])[0]

    def embed(self, texts: list[str]) -> list[np.ndarray]:
        self.calls.append(list(texts))
        return [self._vector(text) for text in texts]

    def _vector(self, text: str) -> np.ndarray:
        seed = int.from_bytes(
            hashlib.sha256(text.lower().encode("utf-8")).digest()[:8],
            byteorder="big",
            signed=False,
        )
        rng = np.random.default_rng(seed)
        embedding = rng.normal(0, 1, self.dimension)
        return (embedding / np.linalg.norm(embedding)).astype(np.float32)


class FakeGenerator:
    """Generator stand-in that records prompts and returns a canned answer."""

    def __init__(
        self, answer: str = "Generated answer.", model: str = "test-chat-model"
    ) -> None:
        self.answer = answer
        self.model = model
        self.prompts: list[str] = []
        self.side_effect: Exception | None = None

    def generate(self, prompt_text: str) -> str:
        self.prompts.append(prompt_text)
        if self.side_effect is not None:
            raise self.side_effect
        return self.answer


class FakeClock:
    """Manually advanced UNIX clock."""

    def __init__(self, start: float = TestConstants.START_TIME) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def create_mock_openai_response(embeddings: list[list[float]]) -> Mock:
    """Create a mock OpenAI embeddings API response.

    Args:
        embeddings: List of embedding vectors to return.

    Returns:
        Mock object representing OpenAI embeddings API response.
    """
    mock_response = Mock()
    mock_response.data = [Mock(embedding=emb) for emb in embeddings]
    return mock_response


def create_mock_chat_response(content: str | None) -> Mock:
    """Create a mock OpenAI chat completion response.

    Args:
        content: The content for the chat completion response.

    Returns:
        Mock object representing OpenAI chat completion response.
    """
    mock_response = Mock()
    mock_response.choices = [Mock(message=Mock(content=content))]
    return mock_response


@pytest.fixture
def make_sentences():
    """Factory building ``count`` distinct sentences of fixed word length."""

    def _make(count: int, words_per_sentence: int) -> str:
        sentences = []
        for i in range(count):
            words = [f"s{i}w{j}" for j in range(words_per_sentence)]
            sentences.append(" ".join(words) + ".")
        return " ".join(sentences)

    return _make


@pytest.fixture
def openai_embeddings_api_mock():
    """Patch the OpenAI embeddings.create method."""
    with patch("openai.resources.embeddings.Embeddings.create") as mock_create:
        yield mock_create


@pytest.fixture
def openai_chat_api_mock():
    """Patch the OpenAI chat.completions.create method."""
    with patch("openai.resources.chat.completions.Completions.create") as mock_create:
        yield mock_create


@pytest.fixture
def embedding_service_factory():
    """Factory for creating EmbeddingService instances with different configurations."""

    def _create_service(api_key=None, model=None):  # noqa: ANN202
        api_key = api_key or TestConstants.TEST_API_KEY
        if model is not None:
            return EmbeddingService(api_key=api_key, model=model)
        return EmbeddingService(api_key=api_key)

    return _create_service


@pytest.fixture
def embedding_service(embedding_service_factory):
    """Default EmbeddingService with test API key for most tests."""
    return embedding_service_factory(model=TestConstants.TEST_EMBEDDING_MODEL)


@pytest.fixture
def chat_generator():
    return ChatGenerator(
        api_key=TestConstants.TEST_API_KEY, model=TestConstants.TEST_CHAT_MODEL
    )


@pytest.fixture
def mock_embedder():
    return MockEmbeddingService()


@pytest.fixture
def fake_generator():
    return FakeGenerator()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def text_chunker_factory():
    """Factory fixture that creates ``TextChunker`` instances on demand."""

    def _create_chunker(target_words: int = 450) -> TextChunker:
        return TextChunker(target_words=target_words)

    return _create_chunker


@pytest.fixture
def temp_faiss_index(tmp_path) -> FaissVectorIndex:
    """Create a temporary FAISS index with SQLite payloads."""
    return FaissVectorIndex(
        db_path=tmp_path / "vector_store.db",
        index_path=tmp_path / "faiss" / "news.faiss",
        dimension=TestConstants.EMBEDDING_DIMENSION,
        collection_name="test_news",
    )


@pytest.fixture
def memory_index() -> InMemoryVectorIndex:
    return InMemoryVectorIndex(
        dimension=TestConstants.EMBEDDING_DIMENSION, collection_name="test_news"
    )


@pytest.fixture
def session_store(tmp_path, fake_clock) -> SQLiteSessionStore:
    """Session store on a temporary database with a controllable clock."""
    return SQLiteSessionStore(
        db_path=tmp_path / "sessions.db",
        ttl_seconds=TestConstants.SESSION_TTL,
        clock=fake_clock,
    )


@pytest.fixture
def sample_documents():
    """Three short articles, each a few complete sentences."""
    return [
        Document(
            title="Central bank holds rates",
            content=(
                "The central bank kept interest rates unchanged on Thursday. "
                "Officials said inflation was easing. Markets rose slightly."
            ),
            url="https://example.com/rates",
        ),
        Document(
            title="Storm hits the coast",
            content=(
                "A strong storm reached the coast overnight. Thousands lost power. "
                "Crews are working to restore it."
            ),
            url="https://example.com/storm",
        ),
        Document(
            title="Local team wins final",
            content="The local team won the final in extra time. Fans celebrated.",
            url="https://example.com/final",
        ),
    ]


@pytest.fixture
def sample_passages():
    """Retrieved passages ordered best match first."""
    return [
        RetrievedPassage(
            text="The central bank kept interest rates unchanged on Thursday.",
            title="Central bank holds rates",
            url="https://example.com/rates",
            score=0.91,
        ),
        RetrievedPassage(
            text="Officials said inflation was easing.",
            title="Inflation report",
            url="https://example.com/inflation",
            score=0.74,
        ),
    ]


@pytest.fixture
def point_factory(mock_embedder):
    """Factory for VectorPoint objects with deterministic embeddings."""

    def _create_points(texts: list[str], first_id: int = 1) -> list[VectorPoint]:
        return [
            VectorPoint(
                id=first_id + offset,
                vector=mock_embedder.embed_one(text),
                payload={"text": text, "title": f"Title {offset}", "url": f"u{offset}"},
            )
            for offset, text in enumerate(texts)
        ]

    return _create_points


@pytest.fixture
def chat_service_factory(session_store, mock_embedder, memory_index, fake_generator):
    """Factory for ChatService wired to in-process collaborators."""

    def _create_service(**overrides) -> ChatService:  # noqa: ANN003
        collaborators = {
            "sessions": session_store,
            "embedder": mock_embedder,
            "index": memory_index,
            "generator": fake_generator,
        }
        options = {"top_k": 3, "retry_policy": RetryPolicy.no_retry()}
        for key, value in overrides.items():
            if key in collaborators:
                collaborators[key] = value
            else:
                options[key] = value
        return ChatService(**collaborators, **options)

    return _create_service
