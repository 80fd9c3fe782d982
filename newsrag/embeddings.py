"""OpenAI embeddings service."""

import numpy as np
from openai import OpenAI

from .config import config
from .errors import UpstreamError, ValidationError, is_transient

logger = config.get_logger(__name__)


class EmbeddingService:
    """Handles OpenAI embeddings generation."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
    ) -> None:
        """Initialize the EmbeddingService with OpenAI API key and model.

        Args:
            api_key: OpenAI API key. If None,
                reads from OPENAI_API_KEY environment variable.
            model: Embedding model name. If None, uses config.EMBEDDING_MODEL.
        """
        api_key = api_key or config.get_openai_api_key()
        self.client = OpenAI(api_key=api_key, base_url=config.OPENAI_BASE_URL)
        self.model = model or config.EMBEDDING_MODEL

    def embed(self, texts: list[str]) -> list[np.ndarray]:
        """Get embeddings for several texts in a single request.

        Args:
            texts: Non-empty list of input texts.

        Returns:
            One vector per input text, in input order.

        Raises:
            ValidationError: If ``texts`` is not a non-empty list of strings.
            UpstreamError: If the provider call fails.
        """
        if (
            not isinstance(texts, list)
            or not texts
            or not all(isinstance(text, str) for text in texts)
        ):
            msg = "texts must be a non-empty list of strings"
            raise ValidationError(msg)

        logger.debug("Generating embeddings for %d text(s)", len(texts))
        try:
            response = self.client.embeddings.create(model=self.model, input=texts)
        except Exception as exc:
            logger.exception("Error generating embeddings with model %s", self.model)
            msg = f"Embedding request failed: {exc}"
            raise UpstreamError(msg, transient=is_transient(exc)) from exc

        embeddings = [
            np.asarray(item.embedding, dtype=np.float32) for item in response.data
        ]
        if len(embeddings) != len(texts):
            msg = (
                f"Expected {len(texts)} embeddings, "
                f"provider returned {len(embeddings)}"
            )
            raise UpstreamError(msg)
        return embeddings

    def embed_one(self, text: str) -> np.ndarray:
        """Get embedding for a single text.

        Raises:
            ValidationError: If ``text`` is empty or not a string.
        """
        if not text or not isinstance(text, str):
            msg = "text must be a non-empty string"
            raise ValidationError(msg)
        return self.embed([text])[0]
