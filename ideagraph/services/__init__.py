"""Application services."""

from .scrape_service import ScrapeOutcome, ScrapeService

__all__ = ["ScrapeOutcome", "ScrapeService"]
