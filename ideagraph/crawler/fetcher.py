"""PageFetcher: one HTTP GET per interest page with a rotated identity."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Self

import aiohttp

from ideagraph.config import get_settings
from ideagraph.utils.retry import RetryConfig, retry_with_result

from .base import FetchResult
from .constants import ACCEPT_HTML, random_profile
from .errors import Blocked, ChallengeRequired, FetchFailed, FetchTimeout
from .urls import looks_like_challenge_url

logger = logging.getLogger(__name__)

BLOCKED_STATUSES = (403, 429)


def check_response(url: str, status: int, final_url: str) -> None:
    """Raise the typed failure for a finished response, if any.

    The final URL is checked before the status: walls are often served with
    a 200 after a redirect.
    """
    if looks_like_challenge_url(final_url):
        raise ChallengeRequired(f"redirected to {final_url}")
    if status in BLOCKED_STATUSES:
        raise Blocked(f"fetching {url}", status=status)
    if not 200 <= status < 300:
        raise FetchFailed(url, status=status)


class PageFetcher:
    """Fetch interest pages over a shared aiohttp session.

    Usage:
        async with PageFetcher() as fetcher:
            result = await fetcher.fetch(url, accept_language="en-US,en;q=0.9")

    Outside a context manager each call opens and closes its own session.
    """

    def __init__(
        self,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
    ) -> None:
        settings = get_settings().crawler
        self.timeout = timeout if timeout is not None else settings.fetch_timeout
        self.retry_config = RetryConfig(
            max_retries=retries if retries is not None else settings.fetch_retries,
            jitter=0.25,
            exceptions=(aiohttp.ClientConnectionError,),
        )
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> Self:
        self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        if self._session:
            await self._session.close()
            self._session = None

    def build_headers(self, accept_language: Optional[str] = None) -> dict[str, str]:
        headers = random_profile().headers()
        headers["Accept"] = ACCEPT_HTML
        if accept_language:
            headers["Accept-Language"] = accept_language
        return headers

    async def _get(self, session: aiohttp.ClientSession, url: str, headers: dict[str, str], timeout: float) -> FetchResult:
        async with session.get(
            url,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=timeout),
            allow_redirects=True,
        ) as resp:
            body = await resp.text(errors="replace")
            return FetchResult(status=resp.status, final_url=str(resp.url), body=body)

    async def fetch(
        self,
        url: str,
        accept_language: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> FetchResult:
        """Fetch ``url`` and return status, final URL and body.

        Raises:
            ChallengeRequired: Final URL is a login/challenge wall.
            Blocked: HTTP 403 / 429.
            FetchFailed: Other non-2xx status or connection failure.
            FetchTimeout: The request exceeded its time budget.
        """
        timeout = timeout if timeout is not None else self.timeout
        headers = self.build_headers(accept_language)

        own_session = self._session is None
        session = aiohttp.ClientSession() if own_session else self._session
        try:
            result = await retry_with_result(self._get, session, url, headers, timeout, config=self.retry_config)
        except asyncio.TimeoutError as e:
            raise FetchTimeout(url, timeout) from e
        except aiohttp.ClientError as e:
            raise FetchFailed(url, str(e)) from e
        finally:
            if own_session:
                await session.close()

        if not result.success:
            if isinstance(result.error, asyncio.TimeoutError):
                raise FetchTimeout(url, timeout) from result.error
            raise FetchFailed(url, str(result.error)) from result.error

        fetched: FetchResult = result.value
        logger.debug("Fetched %s -> %s (HTTP %d, %d chars)", url, fetched.final_url, fetched.status, len(fetched.body))
        check_response(url, fetched.status, fetched.final_url)
        return fetched
