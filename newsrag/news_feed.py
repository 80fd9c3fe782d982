"""Guardian content API client and the JSON news corpus."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx

from .config import config
from .errors import UpstreamError, ValidationError, is_transient
from .models import Document

logger = config.get_logger(__name__)

MIN_CONTENT_LENGTH = 300


def articles_from_results(
    results: list[dict[str, Any]], min_length: int = MIN_CONTENT_LENGTH
) -> list[Document]:
    """Keep results that carry a headline, a URL and enough body text."""
    documents = []
    for item in results:
        fields = item.get("fields") or {}
        title = fields.get("headline")
        content = fields.get("bodyText")
        url = item.get("webUrl")
        if not title or not content or len(content) < min_length:
            continue
        documents.append(Document(title=title, content=content, url=url or ""))
    return documents


class GuardianClient:
    """Fetches the newest articles from the Guardian content API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        page_size: int | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or config.get_guardian_api_key()
        if not self.api_key:
            msg = "Missing GUARDIAN_API_KEY in env"
            raise ValueError(msg)
        self.base_url = base_url or config.GUARDIAN_API_URL
        self.page_size = page_size or config.NEWS_MAX_ARTICLES
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout or config.NEWS_HTTP_TIMEOUT_SECONDS),
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> GuardianClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def fetch_results(self) -> list[dict[str, Any]]:
        """Return the raw ``response.results`` list of the search endpoint.

        Raises:
            UpstreamError: On transport errors, error statuses or bad payloads.
        """
        params = {
            "api-key": self.api_key,
            "show-fields": "bodyText,headline",
            "pageSize": self.page_size,
            "orderBy": "newest",
        }
        try:
            response = self._client.get(self.base_url, params=params)
            response.raise_for_status()
            return response.json()["response"]["results"]
        except httpx.HTTPStatusError as exc:
            logger.exception("Guardian API returned an error status")
            msg = f"Guardian API error: {exc.response.status_code}"
            raise UpstreamError(
                msg, transient=exc.response.status_code in {429, 500, 502, 503, 504}
            ) from exc
        except httpx.HTTPError as exc:
            logger.exception("Guardian API request failed")
            msg = f"Guardian API request failed: {exc}"
            raise UpstreamError(msg, transient=is_transient(exc)) from exc
        except (KeyError, TypeError, ValueError) as exc:
            logger.exception("Unexpected Guardian API payload")
            msg = "Unexpected Guardian API payload"
            raise UpstreamError(msg) from exc

    def fetch_articles(self) -> list[Document]:
        results = self.fetch_results()
        documents = articles_from_results(results)
        logger.info(
            "Fetched %d results, kept %d articles", len(results), len(documents)
        )
        return documents


def save_corpus(documents: list[Document], path: Path) -> None:
    """Write documents to the corpus JSON file, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps([document.to_dict() for document in documents], indent=2),
        encoding="utf-8",
    )
    logger.info("Saved %d articles to %s", len(documents), path)


def load_corpus(path: Path) -> list[Document]:
    """Read documents from the corpus JSON file.

    Raises:
        ValidationError: If the file does not hold a JSON list of articles.
    """
    path = Path(path)
    with path.open(encoding="utf-8") as file:
        data = json.load(file)
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        msg = f"News corpus at {path} must be a JSON list of articles"
        raise ValidationError(msg)
    documents = [Document.from_dict(item) for item in data]
    logger.info("Loaded %d articles from %s", len(documents), path)
    return documents
