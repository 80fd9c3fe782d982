"""Prompt composition and answer post-processing for retrieved passages."""

from __future__ import annotations

from collections.abc import Sequence

from .errors import ValidationError
from .models import ChatAnswer, ComposedPrompt, RetrievedPassage, SourceCitation

FALLBACK_ANSWER = "I don't know based on the provided sources."

PROMPT_PREAMBLE = (
    "You are a helpful news assistant. Your job is to answer questions based ONLY "
    "on the provided context from news articles.\n"
    "\n"
    "IMPORTANT RULES:\n"
    "1. Answer ONLY using information from the context below\n"
    f'2. If the answer is not in the context, respond with "{FALLBACK_ANSWER}"\n'
    "3. When answering, cite the source by mentioning the article title\n"
    "4. Be concise and accurate\n"
    "5. Do NOT make up information or use external knowledge"
)

SOURCE_DELIMITER = "---"


def _validate_passages(passages: object) -> tuple[RetrievedPassage, ...]:
    if isinstance(passages, (str, bytes)) or not isinstance(passages, Sequence):
        msg = (
            "passages must be a sequence of RetrievedPassage, "
            f"got {type(passages).__name__}"
        )
        raise ValidationError(msg)
    for position, passage in enumerate(passages):
        if not isinstance(passage, RetrievedPassage):
            msg = (
                f"passages[{position}] must be a RetrievedPassage, "
                f"got {type(passage).__name__}"
            )
            raise ValidationError(msg)
    return tuple(passages)


def render_source(index: int, passage: RetrievedPassage) -> str:
    """Render one passage as a numbered source block (``index`` is 1-based)."""
    return (
        f"[Source {index}: {passage.title}]\n"
        f"{passage.text}\n"
        f"URL: {passage.url}\n"
        f"{SOURCE_DELIMITER}"
    )


def compose(user_message: str, passages: Sequence[RetrievedPassage]) -> ComposedPrompt:
    """Build the generation prompt for a user message and its retrieved passages.

    Passages are rendered in the order given, which is taken to be best match
    first. With no passages there is nothing to ground an answer on, so the
    result carries the fallback answer and must not be sent to the generator.

    Raises:
        ValidationError: If the message is not a string or the passages are
            not a sequence of RetrievedPassage.
    """
    if not isinstance(user_message, str):
        msg = f"user_message must be a string, got {type(user_message).__name__}"
        raise ValidationError(msg)
    sources = _validate_passages(passages)

    if not sources:
        return ComposedPrompt(
            prompt_text="", ordered_sources=(), fallback_answer=FALLBACK_ANSWER
        )

    context_text = "\n\n".join(
        render_source(index, passage) for index, passage in enumerate(sources, start=1)
    )
    prompt_text = (
        f"{PROMPT_PREAMBLE}\n"
        "\n"
        "CONTEXT:\n"
        f"{context_text}\n"
        "\n"
        "USER QUESTION:\n"
        f"{user_message}\n"
        "\n"
        "ANSWER:"
    )
    return ComposedPrompt(prompt_text=prompt_text, ordered_sources=sources)


def finalize(raw_answer_text: str, passages: Sequence[RetrievedPassage]) -> ChatAnswer:
    """Trim the generated answer and attach the citation list.

    Citation ``i`` in the list is source ``i + 1`` in the composed prompt.

    Raises:
        ValidationError: On a non-string answer or malformed passages.
    """
    if not isinstance(raw_answer_text, str):
        msg = f"raw_answer_text must be a string, got {type(raw_answer_text).__name__}"
        raise ValidationError(msg)
    sources = _validate_passages(passages)

    return ChatAnswer(
        answer_text=raw_answer_text.strip(),
        sources=tuple(
            SourceCitation(title=passage.title, url=passage.url, score=passage.score)
            for passage in sources
        ),
    )
