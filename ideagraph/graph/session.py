"""Serializes user actions against one GraphCrawler.

A UI or CLI may fire expand/collapse/retry faster than the crawler can
finish a network-bound expansion. Commands are queued and applied by a
single worker task in submission order, so the crawler's entry points never
overlap.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Self

from .crawler import GraphCrawler
from .models import CrawlStats, TreeNode

logger = logging.getLogger(__name__)


@dataclass
class _Command:
    action: str
    node_id: str
    future: asyncio.Future


class CrawlSession:
    """Command queue in front of a GraphCrawler.

    Usage:
        async with CrawlSession(crawler) as session:
            await session.expand(root_id)
            await session.retry(child_id)
    """

    def __init__(self, crawler: GraphCrawler) -> None:
        self.crawler = crawler
        self._queue: asyncio.Queue[Optional[_Command]] = asyncio.Queue()
        self._worker: asyncio.Task | None = None

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def start(self) -> None:
        if self._worker is None:
            self._worker = asyncio.create_task(self._run())

    async def close(self) -> None:
        """Drain queued commands and stop the worker."""
        if self._worker is None:
            return
        await self._queue.put(None)
        await self._worker
        self._worker = None

    # ──────────────────────────────────────────────
    # Commands
    # ──────────────────────────────────────────────

    async def expand(self, node_id: str) -> None:
        await self._submit("expand", node_id)

    async def collapse(self, node_id: str) -> None:
        await self._submit("collapse", node_id)

    async def retry(self, node_id: str) -> None:
        await self._submit("retry", node_id)

    def abort(self) -> None:
        """Stop the running expansion at its next edge, or the next queued one. Not queued itself."""
        self.crawler.abort()

    @property
    def nodes(self) -> Mapping[str, TreeNode]:
        return self.crawler.nodes

    @property
    def stats(self) -> CrawlStats:
        return self.crawler.stats

    # ──────────────────────────────────────────────
    # Worker
    # ──────────────────────────────────────────────

    async def _submit(self, action: str, node_id: str) -> None:
        self.start()
        future = asyncio.get_running_loop().create_future()
        await self._queue.put(_Command(action, node_id, future))
        await future

    async def _run(self) -> None:
        while True:
            command = await self._queue.get()
            try:
                if command is None:
                    return
                try:
                    await self._dispatch(command)
                except Exception as e:
                    if not command.future.done():
                        command.future.set_exception(e)
                else:
                    if not command.future.done():
                        command.future.set_result(None)
            finally:
                self._queue.task_done()

    async def _dispatch(self, command: _Command) -> None:
        logger.debug("Applying %s on %s", command.action, command.node_id)
        if command.action == "expand":
            await self.crawler.expand(command.node_id)
        elif command.action == "collapse":
            self.crawler.collapse(command.node_id)
        elif command.action == "retry":
            await self.crawler.retry(command.node_id)
        else:
            raise ValueError(f"Unknown command: {command.action}")
