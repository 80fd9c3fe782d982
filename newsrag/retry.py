"""Bounded retry policy for transient upstream failures."""

from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from typing import TypeVar

from .config import config
from .errors import UpstreamError

T = TypeVar("T")

logger = config.get_logger(__name__)


class RetryPolicy:
    """Retry a call on transient ``UpstreamError`` with a fixed backoff schedule.

    ``delays[i]`` is the wait before attempt ``i + 2``; the last delay repeats
    when there are more attempts than delays.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        delays: Sequence[float] = (10.0,),
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            msg = f"max_attempts must be at least 1, got {max_attempts}"
            raise ValueError(msg)
        if not delays:
            msg = "delays must contain at least one value"
            raise ValueError(msg)
        self.max_attempts = max_attempts
        self.delays = tuple(float(delay) for delay in delays)
        self._sleep = sleep

    @classmethod
    def from_config(cls, sleep: Callable[[float], None] = time.sleep) -> RetryPolicy:
        return cls(
            max_attempts=config.EMBED_MAX_ATTEMPTS,
            delays=(config.EMBED_RETRY_DELAY_SECONDS,),
            sleep=sleep,
        )

    @classmethod
    def no_retry(cls) -> RetryPolicy:
        return cls(max_attempts=1)

    def delay_for(self, attempt: int) -> float:
        """Delay to wait after failed attempt number ``attempt`` (1-based)."""
        return self.delays[min(attempt - 1, len(self.delays) - 1)]

    def run(self, func: Callable[..., T], *args: object, **kwargs: object) -> T:
        """Call ``func`` until it succeeds or the attempts run out.

        Raises:
            UpstreamError: The last failure, when it is not transient or no
                attempts are left.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return func(*args, **kwargs)
            except UpstreamError as exc:
                if not exc.transient or attempt == self.max_attempts:
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    "Transient upstream error (attempt %d/%d): %s. "
                    "Retrying in %.1f seconds...",
                    attempt,
                    self.max_attempts,
                    exc,
                    delay,
                )
                self._sleep(delay)

        msg = "Retry policy exhausted without a result"
        raise UpstreamError(msg)
