"""Tests for settings and the retry helper."""

from unittest.mock import AsyncMock, patch

import pytest
from pydantic import ValidationError

from ideagraph.config import CrawlerSettings, get_settings, reload_settings
from ideagraph.utils import RetryConfig, retry_with_result


class TestSettings:
    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("CRAWLER_MAX_NODES", "50")
        monkeypatch.setenv("CRAWLER_REQUEST_DELAY", "1.5")
        settings = reload_settings()
        assert settings.crawler.max_nodes == 50
        assert settings.crawler.request_delay == 1.5

    def test_budgets_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("CRAWLER_MAX_DEPTH", "0")
        with pytest.raises(ValidationError):
            CrawlerSettings()

    def test_cached(self):
        assert get_settings() is get_settings()


class TestRetryWithResult:
    @pytest.mark.asyncio
    async def test_success_after_retry(self):
        func = AsyncMock(side_effect=[ConnectionError("reset"), "ok"])
        with patch("ideagraph.utils.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await retry_with_result(func, config=RetryConfig(max_retries=2, exceptions=(ConnectionError,)))

        assert result.success
        assert result.value == "ok"
        assert result.attempts == 2
        sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_gives_up(self):
        func = AsyncMock(side_effect=ConnectionError("reset"))
        with patch("ideagraph.utils.retry.asyncio.sleep", new=AsyncMock()):
            result = await retry_with_result(func, config=RetryConfig(max_retries=1, exceptions=(ConnectionError,)))

        assert not result.success
        assert isinstance(result.error, ConnectionError)
        assert len(result.errors) == 2

    @pytest.mark.asyncio
    async def test_unlisted_errors_propagate(self):
        func = AsyncMock(side_effect=ValueError("bad"))
        with pytest.raises(ValueError):
            await retry_with_result(func, config=RetryConfig(exceptions=(ConnectionError,)))

    def test_delay_is_capped(self):
        config = RetryConfig(delay=1.0, backoff_factor=10.0, max_delay=5.0)
        assert config.get_delay(0) == 1.0
        assert config.get_delay(3) == 5.0

    def test_jitter_stays_within_fraction(self):
        config = RetryConfig(delay=2.0, jitter=0.5)
        for _ in range(20):
            assert 2.0 <= config.get_delay(0) <= 3.0
