"""Data models for the news chat service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

import numpy as np

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class Document:
    """A news article as stored in the corpus file."""

    title: str
    content: str
    url: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Document:
        return cls(
            title=str(data.get("title") or ""),
            content=data.get("content") or "",
            url=str(data.get("url") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "content": self.content, "url": self.url}


@dataclass(frozen=True)
class Chunk:
    """A sentence-aligned slice of a document, ready for embedding."""

    text: str
    title: str
    url: str
    document_index: int
    chunk_index: int

    def to_payload(self) -> dict[str, Any]:
        """Payload stored next to the vector in the index."""
        return {
            "text": self.text,
            "title": self.title,
            "url": self.url,
            "documentIndex": self.document_index,
            "chunkIndex": self.chunk_index,
        }


@dataclass(frozen=True)
class VectorPoint:
    """A vector with its integer id and payload, as upserted into the index."""

    id: int
    vector: np.ndarray
    payload: dict[str, Any]


@dataclass(frozen=True)
class SearchHit:
    """A single similarity search result."""

    score: float
    payload: dict[str, Any]


@dataclass(frozen=True)
class RetrievedPassage:
    """A chunk returned by similarity search, annotated with its score."""

    text: str
    title: str
    url: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_hit(cls, hit: SearchHit) -> RetrievedPassage:
        payload = hit.payload
        return cls(
            text=str(payload.get("text", "")),
            title=str(payload.get("title", "")),
            url=str(payload.get("url", "")),
            score=float(hit.score),
            metadata=dict(payload),
        )


@dataclass(frozen=True)
class ComposedPrompt:
    """Prompt built for one chat turn.

    ``ordered_sources`` maps citation number ``i`` to ``ordered_sources[i - 1]``.
    ``fallback_answer`` is set when there was no context to generate from.
    """

    prompt_text: str
    ordered_sources: tuple[RetrievedPassage, ...]
    fallback_answer: str | None = None

    @property
    def needs_generation(self) -> bool:
        return self.fallback_answer is None


@dataclass(frozen=True)
class SourceCitation:
    title: str
    url: str
    score: float

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "url": self.url, "score": self.score}


@dataclass(frozen=True)
class ChatAnswer:
    answer_text: str
    sources: tuple[SourceCitation, ...]


@dataclass(frozen=True)
class ChatMessage:
    """A single persisted message of a chat session."""

    role: Role
    content: str
    timestamp: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content, "timestamp": self.timestamp}


@dataclass(frozen=True)
class SessionHistory:
    session_id: str
    messages: list[ChatMessage]
    ttl_seconds: int | None


@dataclass(frozen=True)
class ChatTurnResult:
    """Outcome of one chat turn, shaped like the chat response body."""

    session_id: str
    user_message: str
    answer: str
    sources: tuple[SourceCitation, ...]
    model: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "sessionId": self.session_id,
            "userMessage": self.user_message,
            "answer": self.answer,
            "sources": [source.to_dict() for source in self.sources],
            "model": self.model,
            "timestamp": self.timestamp,
        }
