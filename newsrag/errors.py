"""Exception types shared across the service."""


class NewsRagError(Exception):
    """Base class for all newsrag errors."""


class ValidationError(NewsRagError, ValueError):
    """Raised when chunking, composition or a request gets malformed input."""


class UpstreamError(NewsRagError, RuntimeError):
    """Raised when an embedding, search, generation or session call fails.

    ``transient`` marks failures worth retrying (model still loading, rate
    limits, timeouts, 5xx). Retrying is the caller's decision.
    """

    def __init__(self, message: str, *, transient: bool = False) -> None:
        super().__init__(message)
        self.transient = transient


_TRANSIENT_STATUS = {408, 429, 500, 502, 503, 504}
_TRANSIENT_NAME_MARKERS = (
    "RateLimitError",
    "APITimeoutError",
    "APIConnectionError",
    "InternalServerError",
    "TimeoutException",
)
_TRANSIENT_BODY_MARKERS = ("loading", "503", "rate limit", "timeout")


def is_transient(exc: BaseException) -> bool:
    """Classify a provider exception as retryable or not."""
    status_code = getattr(exc, "status_code", None)
    if status_code in _TRANSIENT_STATUS:
        return True
    name = exc.__class__.__name__
    if any(marker in name for marker in _TRANSIENT_NAME_MARKERS):
        return True
    body = str(exc).lower()
    return any(marker in body for marker in _TRANSIENT_BODY_MARKERS)
