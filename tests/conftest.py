"""Shared fixtures."""

import pytest

from ideagraph.config import get_settings
from ideagraph.crawler import ExtractionContext

from .factories import KITCHEN_URL


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Isolate tests from a local .env and from each other's env overrides."""
    for name in ("SCRAPE_DEFAULT_LANGUAGE", "CRAWLER_MAX_DEPTH", "CRAWLER_MAX_NODES", "CRAWLER_REQUEST_DELAY"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def context() -> ExtractionContext:
    return ExtractionContext(url=KITCHEN_URL, target_domain="www.pinterest.com", language="en")
