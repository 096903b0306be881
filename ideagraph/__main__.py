"""Command line entry point.

    python -m ideagraph scrape https://www.pinterest.com/ideas/kitchen/9183/ --language en
    python -m ideagraph tree https://www.pinterest.com/ideas/kitchen/9183/ --depth 2 --save
"""

import argparse
import asyncio
import json
import logging
import signal
import sys

from ideagraph.config import get_settings
from ideagraph.crawler import ExtractionError
from ideagraph.db import InterestRepository, close_engine, create_tables
from ideagraph.graph import GraphCrawler, NodeStatus, walk
from ideagraph.languages import SUPPORTED_LANGUAGES
from ideagraph.services import ScrapeService

logger = logging.getLogger("ideagraph")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ideagraph", description="Interest page scraper and keyword graph crawler")
    sub = parser.add_subparsers(dest="command", required=True)

    scrape = sub.add_parser("scrape", help="Scrape one interest page and print it as JSON")
    scrape.add_argument("url")
    scrape.add_argument("--language", choices=SUPPORTED_LANGUAGES)
    scrape.add_argument("--save", action="store_true", help="Store the result in the database")
    scrape.add_argument("--skip-recent", action="store_true", help="Reuse a recently stored record")

    tree = sub.add_parser("tree", help="Expand the keyword tree from an interest page")
    tree.add_argument("url")
    tree.add_argument("--language", choices=SUPPORTED_LANGUAGES)
    tree.add_argument("--depth", type=int, default=1, help="Levels to expand below the root")
    tree.add_argument("--save", action="store_true", help="Store every scraped interest")

    return parser


async def _open_repository(save: bool) -> InterestRepository | None:
    if not save:
        return None
    await create_tables()
    return InterestRepository()


async def run_scrape(args: argparse.Namespace) -> int:
    repository = await _open_repository(args.save)
    async with ScrapeService(repository=repository) as service:
        try:
            outcome = await service.scrape(args.url, args.language, skip_if_recent=args.skip_recent)
        except ExtractionError as e:
            logger.error("Scrape failed [%s]: %s", e.code, e)
            return 1

    print(json.dumps(outcome.model_dump(mode="json"), ensure_ascii=False, indent=2))
    return 0


async def expand_levels(crawler: GraphCrawler, root_id: str, depth: int, stop: asyncio.Event) -> None:
    """Breadth-first expansion, one level at a time, following first-discovery edges only."""
    frontier = [root_id]
    for _ in range(depth):
        next_frontier: list[str] = []
        for node_id in frontier:
            if stop.is_set():
                return
            await crawler.expand(node_id)
            node = crawler.get(node_id)
            if node.status is not NodeStatus.EXPANDED:
                continue
            for child_id in node.child_ids:
                child = crawler.get(child_id)
                if child.parent_id == node_id and child.status is NodeStatus.COLLAPSED:
                    next_frontier.append(child_id)
        if not next_frontier:
            return
        frontier = next_frontier


async def run_tree(args: argparse.Namespace) -> int:
    repository = await _open_repository(args.save)
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    async with ScrapeService(repository=repository) as service:
        crawler = GraphCrawler(resolver=service.resolve)

        def handle_interrupt() -> None:
            logger.info("Interrupted, finishing current edge")
            stop.set()
            crawler.abort()

        try:
            loop.add_signal_handler(signal.SIGINT, handle_interrupt)
        except NotImplementedError:
            pass

        try:
            root = await crawler.load_root(args.url, args.language)
            await expand_levels(crawler, root.id, args.depth, stop)
        except ExtractionError as e:
            logger.error("Root scrape failed [%s]: %s", e.code, e)
            return 1
        finally:
            try:
                loop.remove_signal_handler(signal.SIGINT)
            except NotImplementedError:
                pass

    for row in walk(crawler):
        print("  " * row.level + row.label)

    stats = crawler.stats
    print(
        f"\n{stats.total_nodes} nodes, depth {stats.max_depth}, "
        f"{stats.error_count} errors, {stats.loading_count} loading"
    )
    return 0


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        if args.command == "scrape":
            return await run_scrape(args)
        return await run_tree(args)
    finally:
        await close_engine()


def cli() -> None:
    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
