"""Chat turn orchestration over the session store, retrieval and generation."""

from __future__ import annotations

import datetime
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from .composer import compose, finalize
from .config import config
from .errors import UpstreamError, ValidationError
from .models import ChatTurnResult, RetrievedPassage, SessionHistory
from .retry import RetryPolicy

if TYPE_CHECKING:
    from .interfaces import Embedder, Generator, SessionStore, VectorIndex

T = TypeVar("T")

logger = config.get_logger(__name__)

EMPTY_GENERATION_ANSWER = "I apologize, but I couldn't generate a response."


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(tz=datetime.UTC)


class ChatService:
    """Runs chat turns: store, retrieve, compose, generate, store.

    A failure after the user message is stored leaves it in the session
    without a reply; nothing is rolled back.
    """

    def __init__(  # noqa: PLR0913
        self,
        sessions: SessionStore,
        embedder: Embedder,
        index: VectorIndex,
        generator: Generator,
        *,
        top_k: int | None = None,
        retry_policy: RetryPolicy | None = None,
        clock: Callable[[], datetime.datetime] = _utc_now,
    ) -> None:
        """Initialize ChatService.

        Args:
            sessions: Session store for the conversation history.
            embedder: Embedding provider for the user message.
            index: Vector index searched for passages.
            generator: Language model generator.
            top_k: Passages retrieved per turn. If None, uses
                config.RETRIEVAL_TOP_K.
            retry_policy: Retry policy for the query embedding. If None, built
                from configuration.
            clock: Source of the response timestamp.
        """
        self.sessions = sessions
        self.embedder = embedder
        self.index = index
        self.generator = generator
        self.top_k = top_k if top_k is not None else config.RETRIEVAL_TOP_K
        self.retry_policy = retry_policy or RetryPolicy.from_config()
        self._clock = clock

    @staticmethod
    def validate_request(session_id: object, message: object) -> None:
        """Reject requests the chat endpoint would answer with a 400.

        Raises:
            ValidationError: On missing fields, wrong types or a blank message.
        """
        if not session_id or not message:
            msg = "Missing required fields: sessionId and message"
            raise ValidationError(msg)
        if not isinstance(session_id, str) or not isinstance(message, str):
            msg = "Invalid field types: sessionId and message must be strings"
            raise ValidationError(msg)
        if not message.strip():
            msg = "Message cannot be empty"
            raise ValidationError(msg)

    @staticmethod
    def _upstream(step: str, func: Callable[..., T], *args: object) -> T:
        try:
            return func(*args)
        except UpstreamError:
            logger.exception("[Chat] %s failed", step)
            raise
        except Exception as exc:
            logger.exception("[Chat] %s failed", step)
            msg = f"{step} failed: {exc}"
            raise UpstreamError(msg) from exc

    def retrieve(self, message: str) -> list[RetrievedPassage]:
        """Embed the message and return the top-k passages, best first."""
        query_vector = self._upstream(
            "Embedding", self.retry_policy.run, self.embedder.embed_one, message
        )
        hits = self._upstream(
            "Vector search", self.index.search, query_vector, self.top_k
        )
        return [RetrievedPassage.from_hit(hit) for hit in hits]

    def handle_turn(self, session_id: str, message: str) -> ChatTurnResult:
        """Answer one user message within a session.

        Returns:
            The answer with its sources, the model name and a timestamp.

        Raises:
            ValidationError: If the request is malformed.
            UpstreamError: If a collaborator fails.
        """
        self.validate_request(session_id, message)
        logger.info("[Chat] Session: %s", session_id)
        logger.debug("[Chat] User message: %s", message)

        self._upstream(
            "Saving user message",
            self.sessions.append_message,
            session_id,
            "user",
            message,
        )

        passages = self.retrieve(message)
        logger.info("[Chat] Retrieved %d chunks", len(passages))

        prompt = compose(message, passages)
        if prompt.needs_generation:
            raw_answer = self._upstream(
                "Generation", self.generator.generate, prompt.prompt_text
            )
        else:
            logger.info("[Chat] No context retrieved; skipping generation")
            raw_answer = prompt.fallback_answer or ""

        answer = finalize(raw_answer, prompt.ordered_sources)
        answer_text = answer.answer_text or EMPTY_GENERATION_ANSWER

        self._upstream(
            "Saving assistant message",
            self.sessions.append_message,
            session_id,
            "assistant",
            answer_text,
        )

        return ChatTurnResult(
            session_id=session_id,
            user_message=message,
            answer=answer_text,
            sources=answer.sources,
            model=self.generator.model,
            timestamp=self._clock().isoformat(),
        )

    def history(self, session_id: str) -> SessionHistory:
        """Return the stored messages and remaining TTL of a session.

        Raises:
            ValidationError: If the session id is missing.
        """
        if not session_id or not isinstance(session_id, str):
            msg = "Missing sessionId parameter"
            raise ValidationError(msg)
        messages = self._upstream(
            "Reading history", self.sessions.get_messages, session_id
        )
        ttl = self._upstream("Reading TTL", self.sessions.get_ttl, session_id)
        logger.info("[History] Found %d messages for %s", len(messages), session_id)
        return SessionHistory(
            session_id=session_id,
            messages=messages,
            ttl_seconds=ttl if ttl > 0 else None,
        )

    def clear(self, session_id: str) -> bool:
        """Delete a session.

        Returns:
            True if the session existed.
        """
        if not session_id or not isinstance(session_id, str):
            msg = "Missing sessionId parameter"
            raise ValidationError(msg)
        return self._upstream(
            "Clearing session", self.sessions.clear_session, session_id
        )
