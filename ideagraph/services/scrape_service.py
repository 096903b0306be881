"""Scrape orchestration: fetch, extract and optionally persist interests.

The service is the graph crawler's resolver. Persistence is best effort: a
failed database write is logged and the scraped record is still returned,
and pins are only stored after their interest row made it.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Self

from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from ideagraph.config import get_settings
from ideagraph.crawler import InterestRecord, InterestScraper, PinRecord
from ideagraph.crawler.urls import ensure_scheme, extract_id_from_url
from ideagraph.db import InterestRepository

logger = logging.getLogger(__name__)


class ScrapeOutcome(BaseModel):
    """What a scrape produced and what happened to it.

    Attributes:
        record: The interest record (fresh or from the store)
        pins: Pins shown on the page
        from_store: True when a recent stored record was reused
        saved: True when the record was written to the database
        is_new: True when the interest was not stored before
    """

    record: InterestRecord
    pins: list[PinRecord] = Field(default_factory=list)
    from_store: bool = False
    saved: bool = False
    is_new: bool = False


class ScrapeService:
    """Scrape interests and keep the store up to date.

    Usage:
        async with ScrapeService(repository=InterestRepository()) as service:
            outcome = await service.scrape(url, language="en", skip_if_recent=True)
            crawler = GraphCrawler(resolver=service.resolve)
    """

    def __init__(
        self,
        scraper: Optional[InterestScraper] = None,
        repository: Optional[InterestRepository] = None,
    ) -> None:
        self.settings = get_settings()
        self.scraper = scraper or InterestScraper()
        self.repository = repository

    async def __aenter__(self) -> Self:
        await self.scraper.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.scraper.__aexit__(exc_type, exc_val, exc_tb)

    async def scrape(
        self,
        url: str,
        language: Optional[str] = None,
        skip_if_recent: bool = False,
    ) -> ScrapeOutcome:
        """Scrape one interest URL. Extraction errors propagate."""
        if skip_if_recent:
            stored = await self._recent_record(url)
            if stored is not None:
                return stored

        result = await self.scraper.scrape(url, language)
        outcome = ScrapeOutcome(record=result.record, pins=result.pins)
        if self.repository is not None:
            await self._persist(outcome)
        return outcome

    async def resolve(self, url: str, language: Optional[str] = None) -> InterestRecord:
        """Resolver for GraphCrawler: URL to record."""
        outcome = await self.scrape(url, language)
        return outcome.record

    async def load_record(self, interest_id: str) -> Optional[InterestRecord]:
        if self.repository is None:
            return None
        return await self.repository.get_interest(interest_id)

    # ──────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────

    async def _recent_record(self, url: str) -> Optional[ScrapeOutcome]:
        interest_id = extract_id_from_url(ensure_scheme(url))
        if self.repository is None or not interest_id:
            return None

        stored = await self.repository.get_interest(interest_id)
        if stored is None:
            return None

        window = timedelta(minutes=self.settings.scrape.recent_scrape_minutes)
        age = datetime.now(timezone.utc) - stored.last_scrape
        if age >= window:
            return None

        logger.info("Reusing %s scraped %d min ago", interest_id, int(age.total_seconds() // 60))
        pins = await self.repository.get_pins(interest_id)
        return ScrapeOutcome(record=stored, pins=pins, from_store=True)

    async def _persist(self, outcome: ScrapeOutcome) -> None:
        record = outcome.record
        try:
            result = await self.repository.upsert_interest(record)
        except SQLAlchemyError as e:
            logger.error("Failed to save interest %s: %s", record.id, e)
            return

        outcome.saved = True
        outcome.is_new = result.is_new

        if not outcome.pins:
            return
        try:
            await self.repository.upsert_pins(record.id, outcome.pins)
        except SQLAlchemyError as e:
            logger.warning("Failed to save %d pins for %s: %s", len(outcome.pins), record.id, e)
