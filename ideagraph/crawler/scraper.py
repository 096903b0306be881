"""InterestScraper: fetch + extract for interest page URLs."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Optional, Self

from ideagraph.config import get_settings
from ideagraph.languages import get_language_config

from .base import ExtractionContext, ExtractionResult
from .errors import ExtractionError, InvalidUrl
from .extractor import extract
from .fetcher import PageFetcher
from .urls import ensure_scheme, extract_id_from_url, is_valid_ideas_url, normalize_domain

logger = logging.getLogger(__name__)


@dataclass
class BatchItem:
    """Outcome for one URL of a batch scrape."""

    url: str
    result: Optional[ExtractionResult] = None
    error: Optional[ExtractionError] = None

    @property
    def success(self) -> bool:
        return self.result is not None


class InterestScraper:
    """Scrape interest pages in a given language.

    Usage:
        async with InterestScraper() as scraper:
            result = await scraper.scrape("https://www.pinterest.com/ideas/kitchen/9183/", language="en")
    """

    def __init__(self, fetcher: Optional[PageFetcher] = None) -> None:
        self.settings = get_settings()
        self.fetcher = fetcher or PageFetcher()

    async def __aenter__(self) -> Self:
        await self.fetcher.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.fetcher.__aexit__(exc_type, exc_val, exc_tb)

    def build_context(self, url: str, language: Optional[str] = None) -> ExtractionContext:
        """Validate ``url`` and build the extraction context for ``language``.

        Raises:
            InvalidUrl: ``url`` is not an /ideas/<slug>/<id> URL.
        """
        url = ensure_scheme(url)
        if not is_valid_ideas_url(url) or not extract_id_from_url(url):
            raise InvalidUrl(url)

        lang = get_language_config(language)
        return ExtractionContext(
            url=normalize_domain(url, lang.domain),
            target_domain=lang.domain,
            accept_language=lang.accept_language,
            language=lang.code,
        )

    async def scrape(self, url: str, language: Optional[str] = None) -> ExtractionResult:
        """Fetch and extract one interest page. Raises ExtractionError."""
        context = self.build_context(url, language)
        logger.info("Scraping %s (lang=%s)", context.url, context.language)

        try:
            fetched = await self.fetcher.fetch(context.url, accept_language=context.accept_language)
            context = context.model_copy(update={"final_url": fetched.final_url})
            return extract(fetched.body, context)
        except ExtractionError as e:
            logger.warning("Scrape failed for %s [%s]: %s", context.url, e.code, e)
            raise

    async def scrape_batch(self, urls: list[str], language: Optional[str] = None) -> list[BatchItem]:
        """Scrape URLs one after another with a randomized pause in between."""
        crawler_settings = self.settings.crawler
        items: list[BatchItem] = []

        for i, url in enumerate(urls):
            try:
                items.append(BatchItem(url=url, result=await self.scrape(url, language)))
            except ExtractionError as e:
                items.append(BatchItem(url=url, error=e))

            if i < len(urls) - 1:
                await asyncio.sleep(
                    random.uniform(crawler_settings.batch_delay_min, crawler_settings.batch_delay_max)
                )

        succeeded = sum(1 for item in items if item.success)
        logger.info("Batch scrape finished: %d/%d succeeded", succeeded, len(items))
        return items
