"""Tests for the interest scraper."""

from unittest.mock import AsyncMock, patch

import pytest

from ideagraph.crawler import Blocked, FetchResult, InterestScraper, InvalidUrl

from .factories import KITCHEN_URL, interest_data, page, redux_state


def fake_fetcher(*results):
    fetcher = AsyncMock()
    fetcher.fetch.side_effect = list(results)
    return fetcher


def ok(url: str = KITCHEN_URL, body: str | None = None) -> FetchResult:
    return FetchResult(status=200, final_url=url, body=body or page(redux_state(interest_data())))


class TestBuildContext:
    def test_rejects_non_interest_urls(self):
        scraper = InterestScraper(fetcher=fake_fetcher())
        with pytest.raises(InvalidUrl):
            scraper.build_context("https://www.pinterest.com/pin/123/")
        with pytest.raises(InvalidUrl):
            scraper.build_context("https://www.pinterest.com/ideas/kitchen/")

    def test_url_moved_to_language_domain(self):
        context = InterestScraper(fetcher=fake_fetcher()).build_context(KITCHEN_URL, "fr")
        assert context.url == "https://fr.pinterest.com/ideas/kitchen/9183/"
        assert context.target_domain == "fr.pinterest.com"
        assert context.language == "fr"

    def test_default_language(self):
        context = InterestScraper(fetcher=fake_fetcher()).build_context("de.pinterest.com/ideas/kueche/9183/")
        assert context.language == "de"
        assert context.accept_language.startswith("de-DE")


class TestScrape:
    @pytest.mark.asyncio
    async def test_scrape(self):
        fetcher = fake_fetcher(ok())
        result = await InterestScraper(fetcher=fetcher).scrape(KITCHEN_URL, "en")

        assert result.record.id == "9183"
        assert result.record.language_hint == "en"
        fetcher.fetch.assert_awaited_once_with(KITCHEN_URL, accept_language="en-US,en;q=0.9")

    @pytest.mark.asyncio
    async def test_fetch_errors_propagate(self):
        fetcher = fake_fetcher(Blocked(status=429))
        with pytest.raises(Blocked):
            await InterestScraper(fetcher=fetcher).scrape(KITCHEN_URL, "en")

    @pytest.mark.asyncio
    async def test_batch_keeps_going_after_errors(self):
        second = "https://www.pinterest.com/ideas/pantry/9200/"
        fetcher = fake_fetcher(Blocked(status=403), ok(second))
        sleep = AsyncMock()

        with patch("ideagraph.crawler.scraper.asyncio.sleep", new=sleep):
            items = await InterestScraper(fetcher=fetcher).scrape_batch([KITCHEN_URL, second], "en")

        assert [item.success for item in items] == [False, True]
        assert items[0].error.code == "Blocked"
        assert items[1].result.record.id == "9200"
        sleep.assert_awaited_once()
        delay = sleep.await_args.args[0]
        assert 2.0 <= delay <= 3.0
