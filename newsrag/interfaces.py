"""Collaborator interfaces the chat and ingestion pipelines depend on."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    import numpy as np

    from .models import ChatMessage, SearchHit, VectorPoint


class Embedder(Protocol):
    def embed(self, texts: list[str]) -> list[np.ndarray]: ...

    def embed_one(self, text: str) -> np.ndarray: ...


class VectorIndex(Protocol):
    def ensure_collection(self) -> None: ...

    def upsert(self, points: Sequence[VectorPoint]) -> None: ...

    def search(self, vector: object, top_k: int = 5) -> list[SearchHit]: ...

    def save(self) -> None: ...

    def collection_info(self) -> dict[str, Any]: ...


class SessionStore(Protocol):
    def append_message(
        self, session_id: str, role: str, content: str
    ) -> ChatMessage: ...

    def get_messages(self, session_id: str) -> list[ChatMessage]: ...

    def clear_session(self, session_id: str) -> bool: ...

    def get_ttl(self, session_id: str) -> int: ...


class Generator(Protocol):
    model: str

    def generate(self, prompt_text: str) -> str: ...
