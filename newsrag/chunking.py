"""Sentence-aware text chunking for embedding."""

from __future__ import annotations

import re
from functools import partial, reduce
from typing import TYPE_CHECKING, NamedTuple

from .config import config
from .errors import ValidationError
from .models import Chunk

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .models import Document

logger = config.get_logger(__name__)

DEFAULT_TARGET_WORDS = 450

# A sentence is a run of non-terminal characters closed by one or more
# terminal marks. "Dr." and "U.S." split too; chunk boundaries depend on it.
_SENTENCE_PATTERN = re.compile(r"[^.!?]+[.!?]+")


class _ChunkState(NamedTuple):
    closed: tuple[str, ...]
    current: str
    words: int


def word_count(text: object) -> int:
    """Count whitespace-delimited words; non-string or empty input counts 0."""
    if not text or not isinstance(text, str):
        return 0
    return len(text.split())


def split_sentences(text: str) -> list[str]:
    """Split text on sentence-terminal punctuation.

    Text after the last terminal mark is not a sentence and is left out. Input
    without any terminal mark is returned whole as a single sentence.
    """
    return _SENTENCE_PATTERN.findall(text) or [text]


def _validate_target(target_words: object) -> int:
    if (
        isinstance(target_words, bool)
        or not isinstance(target_words, int)
        or target_words <= 0
    ):
        msg = f"target_words must be a positive integer, got {target_words!r}"
        raise ValidationError(msg)
    return target_words


def _add_sentence(target_words: int, state: _ChunkState, sentence: str) -> _ChunkState:
    sentence = sentence.strip()
    if not sentence:
        return state

    sentence_words = len(sentence.split())
    if state.words > 0 and state.words + sentence_words > target_words:
        return _ChunkState(state.closed + (state.current,), sentence, sentence_words)

    current = f"{state.current} {sentence}" if state.current else sentence
    return _ChunkState(state.closed, current, state.words + sentence_words)


def chunk_text(text: object, target_words: int = DEFAULT_TARGET_WORDS) -> list[str]:
    """Split text into sentence-aligned chunks of roughly ``target_words`` words.

    The target is checked only between sentences: a sentence is never split,
    so one longer than the target becomes a chunk of its own.

    Args:
        text: Raw document body. Non-string or empty input yields no chunks.
        target_words: Soft cap on words per chunk.

    Returns:
        Non-empty chunk strings in document order.

    Raises:
        ValidationError: If ``target_words`` is not a positive integer.
    """
    target_words = _validate_target(target_words)
    if not text or not isinstance(text, str):
        return []

    state = reduce(
        partial(_add_sentence, target_words),
        split_sentences(text),
        _ChunkState((), "", 0),
    )
    if state.current:
        return [*state.closed, state.current]
    return list(state.closed)


class TextChunker:
    """Turns documents into chunk records tagged with their source."""

    def __init__(self, target_words: int | None = None) -> None:
        """Initialize the TextChunker.

        Args:
            target_words: Target words per chunk. If None, uses
                config.CHUNK_TARGET_WORDS.
        """
        if target_words is None:
            target_words = config.CHUNK_TARGET_WORDS
        self.target_words = _validate_target(target_words)

    def chunk_document(self, document: Document, document_index: int) -> list[Chunk]:
        """Chunk one document.

        Returns:
            Chunks with a contiguous zero-based ``chunk_index``.
        """
        return [
            Chunk(
                text=text,
                title=document.title,
                url=document.url,
                document_index=document_index,
                chunk_index=chunk_index,
            )
            for chunk_index, text in enumerate(
                chunk_text(document.content, self.target_words)
            )
        ]

    def chunk_documents(self, documents: Iterable[Document]) -> list[Chunk]:
        """Chunk a corpus, keeping each document's position as its index."""
        chunks: list[Chunk] = []
        document_total = 0
        for document_index, document in enumerate(documents):
            document_total += 1
            if not document.content:
                logger.warning("Skipping article %r - no content", document.title)
                continue
            chunks.extend(self.chunk_document(document, document_index))

        logger.info(
            "Created %d chunks from %d articles", len(chunks), document_total
        )
        return chunks
