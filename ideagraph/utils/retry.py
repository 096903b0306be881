"""Backoff helper for transient network failures.

Only the fetcher uses it, and only for connection-level errors: a page that
answered (blocked, challenge, 5xx) is never retried here. Expansion-level
retry is a user action on the graph crawler.
"""

import asyncio
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Type

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """Exponential backoff with optional jitter.

    ``jitter`` is a fraction of the computed delay added at random, so that
    several clients backing off from the same outage do not retry in step.
    """

    max_retries: int = 1
    delay: float = 1.0
    backoff_factor: float = 2.0
    max_delay: float = 10.0
    jitter: float = 0.0
    exceptions: tuple[Type[Exception], ...] = field(default_factory=lambda: (Exception,))

    def get_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt + 1`` (0-indexed)."""
        base = min(self.delay * (self.backoff_factor**attempt), self.max_delay)
        if self.jitter > 0:
            base += random.uniform(0, base * self.jitter)
        return base


@dataclass
class RetryResult:
    success: bool
    value: Any = None
    error: Optional[Exception] = None
    attempts: int = 0
    errors: list[Exception] = field(default_factory=list)


async def retry_with_result(
    func: Callable[..., Awaitable[Any]],
    *args,
    config: Optional[RetryConfig] = None,
    **kwargs,
) -> RetryResult:
    """Await ``func(*args, **kwargs)`` until it succeeds or retries run out.

    Exceptions in ``config.exceptions`` are collected into the result;
    anything else propagates unchanged, including cancellation.

    Usage:
        result = await retry_with_result(self._get, session, url, config=self.retry_config)
        if not result.success:
            raise FetchFailed(url, str(result.error))
    """
    config = config or RetryConfig()
    errors: list[Exception] = []
    name = getattr(func, "__name__", "call")

    attempt = 0
    while True:
        try:
            value = await func(*args, **kwargs)
        except config.exceptions as e:
            errors.append(e)
            if attempt >= config.max_retries:
                break
            wait = config.get_delay(attempt)
            logger.warning(
                "%s failed (%s: %s), retry %d/%d in %.1fs",
                name,
                type(e).__name__,
                e,
                attempt + 1,
                config.max_retries,
                wait,
            )
            await asyncio.sleep(wait)
            attempt += 1
        else:
            return RetryResult(success=True, value=value, attempts=attempt + 1, errors=errors)

    return RetryResult(success=False, error=errors[-1], attempts=len(errors), errors=errors)
