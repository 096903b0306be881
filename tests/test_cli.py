"""Tests for the command line driver."""

import asyncio
import json
from unittest.mock import AsyncMock, patch

import pytest

from ideagraph.__main__ import build_parser, expand_levels, main
from ideagraph.crawler import ExtractionResult
from ideagraph.graph import GraphCrawler, NodeStatus

from .factories import KITCHEN_URL, FakeResolver, make_record


class TestParser:
    def test_scrape_args(self):
        args = build_parser().parse_args(["scrape", KITCHEN_URL, "--language", "en", "--save"])
        assert args.command == "scrape"
        assert args.language == "en"
        assert args.save

    def test_tree_defaults(self):
        args = build_parser().parse_args(["tree", KITCHEN_URL])
        assert args.depth == 1
        assert args.language is None
        assert not args.save

    def test_rejects_unknown_language(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["scrape", KITCHEN_URL, "--language", "xx"])


class TestMain:
    @pytest.mark.asyncio
    async def test_scrape_prints_json(self, capsys):
        result = ExtractionResult(record=make_record("9183"))
        with patch("ideagraph.services.scrape_service.InterestScraper") as scraper_cls:
            scraper = scraper_cls.return_value
            scraper.__aenter__ = AsyncMock(return_value=scraper)
            scraper.__aexit__ = AsyncMock(return_value=None)
            scraper.scrape = AsyncMock(return_value=result)

            code = await main(["scrape", KITCHEN_URL, "--language", "en"])

        assert code == 0
        printed = json.loads(capsys.readouterr().out)
        assert printed["record"]["id"] == "9183"
        assert printed["saved"] is False


class TestExpandLevels:
    @pytest.mark.asyncio
    async def test_expands_requested_levels_only(self):
        graph = {"1": ["2", "3"], "2": ["4"], "3": ["4", "5"], "4": ["6"]}
        crawler = GraphCrawler(resolver=FakeResolver(graph), request_delay=0)
        crawler.add_root(make_record("1", graph["1"]))

        await expand_levels(crawler, "1", 2, asyncio.Event())

        assert [crawler.get(i).status for i in ("1", "2", "3")] == [NodeStatus.EXPANDED] * 3
        assert crawler.get("4").status is NodeStatus.COLLAPSED
        assert "6" not in crawler.nodes

    @pytest.mark.asyncio
    async def test_stop_event(self):
        crawler = GraphCrawler(resolver=FakeResolver({"1": ["2"]}), request_delay=0)
        crawler.add_root(make_record("1", ["2"]))
        stop = asyncio.Event()
        stop.set()

        await expand_levels(crawler, "1", 3, stop)

        assert crawler.get("1").status is NodeStatus.COLLAPSED
