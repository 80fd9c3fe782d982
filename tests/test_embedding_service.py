"""Tests for EmbeddingService class."""

import os
from unittest.mock import Mock, patch

import httpx
import numpy as np
import pytest
from openai import APIConnectionError

from newsrag import EmbeddingService, UpstreamError, ValidationError
from newsrag.config import config


def _embedding_response(embeddings):
    response = Mock()
    response.data = [Mock(embedding=embedding) for embedding in embeddings]
    return response


def test_init_with_api_key(embedding_service_factory) -> None:
    service = embedding_service_factory(model="text-embedding-3-small")
    assert service.model == "text-embedding-3-small"
    assert service.client.api_key == "test-key"


def test_init_with_env_api_key() -> None:
    with patch.dict(os.environ, {"OPENAI_API_KEY": "env-key"}):
        service = EmbeddingService(model="text-embedding-3-small")
        assert service.client.api_key == "env-key"


def test_init_default_model(embedding_service_factory) -> None:
    assert embedding_service_factory().model == config.EMBEDDING_MODEL


def test_embed_batch_success(openai_embeddings_api_mock, embedding_service) -> None:
    openai_embeddings_api_mock.return_value = _embedding_response(
        [[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]]
    )
    texts = ["text1", "text2"]

    results = embedding_service.embed(texts)

    openai_embeddings_api_mock.assert_called_once_with(
        model="text-embedding-3-small", input=texts
    )
    assert len(results) == 2
    for result, expected in zip(results, [[0.1, 0.2, 0.3], [0.4, 0.5, 0.6]]):
        assert result.dtype == np.float32
        np.testing.assert_allclose(result, np.array(expected, dtype=np.float32))


def test_embed_one_sends_single_item_batch(
    openai_embeddings_api_mock, embedding_service
) -> None:
    openai_embeddings_api_mock.return_value = _embedding_response([[1.0, 0.0]])

    result = embedding_service.embed_one("query")

    openai_embeddings_api_mock.assert_called_once_with(
        model="text-embedding-3-small", input=["query"]
    )
    np.testing.assert_array_equal(result, np.array([1.0, 0.0], dtype=np.float32))


@pytest.mark.parametrize("texts", [[], "text", ["ok", 3], None])
def test_embed_rejects_invalid_input(
    openai_embeddings_api_mock, embedding_service, texts
) -> None:
    with pytest.raises(ValidationError):
        embedding_service.embed(texts)
    openai_embeddings_api_mock.assert_not_called()


@pytest.mark.parametrize("text", ["", None])
def test_embed_one_rejects_empty_text(embedding_service, text) -> None:
    with pytest.raises(ValidationError):
        embedding_service.embed_one(text)


def test_embed_wraps_provider_error(
    openai_embeddings_api_mock, embedding_service
) -> None:
    openai_embeddings_api_mock.side_effect = Exception("invalid model")

    with pytest.raises(UpstreamError, match="invalid model") as exc_info:
        embedding_service.embed(["text"])

    assert exc_info.value.transient is False


def test_embed_marks_connection_errors_transient(
    openai_embeddings_api_mock, embedding_service
) -> None:
    request = httpx.Request("POST", "https://api.openai.com/v1/embeddings")
    openai_embeddings_api_mock.side_effect = APIConnectionError(request=request)

    with pytest.raises(UpstreamError) as exc_info:
        embedding_service.embed(["text"])

    assert exc_info.value.transient is True


def test_embed_marks_loading_errors_transient(
    openai_embeddings_api_mock, embedding_service
) -> None:
    openai_embeddings_api_mock.side_effect = Exception("Model is currently loading")

    with pytest.raises(UpstreamError) as exc_info:
        embedding_service.embed(["text"])

    assert exc_info.value.transient is True


def test_embed_rejects_count_mismatch(
    openai_embeddings_api_mock, embedding_service
) -> None:
    openai_embeddings_api_mock.return_value = _embedding_response([[0.1, 0.2]])

    with pytest.raises(UpstreamError, match="Expected 2 embeddings"):
        embedding_service.embed(["a", "b"])
