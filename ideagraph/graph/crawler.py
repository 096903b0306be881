"""Incremental expansion of the keyword graph.

The crawler owns a map from interest id to TreeNode. Nodes are created the
first time their id is discovered and are never removed; a node reached
from several parents is stored once and listed in each parent's
``child_ids``.

Expansion is strictly sequential: one fetch per outward edge with a fixed
delay in between, because the platform rate-limits aggressively and
parallel fetches would trip its block page for the whole session.

State is published in two steps. The ``loading`` flag is set on the node as
soon as an expansion starts; new children and the final ``child_ids`` list
are accumulated locally and committed together when the edge loop ends.
"""

from __future__ import annotations

import asyncio
import logging
from types import MappingProxyType
from typing import Awaitable, Callable, Mapping, Optional

from ideagraph.config import get_settings
from ideagraph.crawler.base import Edge, InterestRecord
from ideagraph.crawler.errors import DepthLimitReached
from ideagraph.crawler.urls import extract_id_from_url

from .models import CrawlStats, NodeStatus, TreeNode, error_code, error_message

logger = logging.getLogger(__name__)

Resolver = Callable[[str, Optional[str]], Awaitable[InterestRecord]]


class GraphCrawler:
    """Single-writer state machine over the crawl's node map.

    Usage:
        crawler = GraphCrawler(resolver=service.resolve)
        await crawler.load_root("https://www.pinterest.com/ideas/kitchen/9183/", "en")
        await crawler.expand(crawler.root.id)

    Entry points (``expand``, ``collapse``, ``retry``) must not run
    concurrently on one crawler; put a CrawlSession in front of it when
    callers may overlap.
    """

    def __init__(
        self,
        resolver: Resolver,
        max_depth: Optional[int] = None,
        max_nodes: Optional[int] = None,
        request_delay: Optional[float] = None,
    ) -> None:
        settings = get_settings().crawler
        self.resolver = resolver
        self.max_depth = max_depth if max_depth is not None else settings.max_depth
        self.max_nodes = max_nodes if max_nodes is not None else settings.max_nodes
        self.request_delay = request_delay if request_delay is not None else settings.request_delay

        self._nodes: dict[str, TreeNode] = {}
        self._root_id: str | None = None
        self._abort_requested = False

    # ──────────────────────────────────────────────
    # Read access
    # ──────────────────────────────────────────────

    @property
    def nodes(self) -> Mapping[str, TreeNode]:
        return MappingProxyType(self._nodes)

    @property
    def root(self) -> TreeNode | None:
        return self._nodes.get(self._root_id) if self._root_id else None

    def get(self, node_id: str) -> TreeNode:
        """Return the node for ``node_id``. Raises KeyError if unknown."""
        try:
            return self._nodes[node_id]
        except KeyError:
            raise KeyError(f"Unknown node: {node_id}") from None

    @property
    def stats(self) -> CrawlStats:
        nodes = self._nodes.values()
        return CrawlStats(
            total_nodes=len(self._nodes),
            max_depth=max((n.depth for n in nodes), default=0),
            loading_count=sum(1 for n in nodes if n.status is NodeStatus.LOADING),
            error_count=sum(1 for n in nodes if n.status is NodeStatus.ERROR),
        )

    def is_ancestor(self, node_id: str, target_id: str) -> bool:
        """True if ``target_id`` is on the stored parent chain of ``node_id``."""
        seen: set[str] = set()
        current = self._nodes.get(node_id)
        while current is not None and current.parent_id and current.id not in seen:
            if current.parent_id == target_id:
                return True
            seen.add(current.id)
            current = self._nodes.get(current.parent_id)
        return False

    # ──────────────────────────────────────────────
    # Root
    # ──────────────────────────────────────────────

    def add_root(self, record: InterestRecord) -> TreeNode:
        """Start the session from an already resolved record."""
        if self._nodes:
            raise ValueError("Crawl session already has a root")
        node = TreeNode.from_record(record, depth=0, parent_id=None)
        self._nodes[node.id] = node
        self._root_id = node.id
        logger.info("Crawl root %s (%s), %d outward edges", node.id, node.name, len(node.outward_edges))
        return node

    async def load_root(self, url: str, language: Optional[str] = None) -> TreeNode:
        """Resolve ``url`` and make it the root. Resolver errors propagate."""
        record = await self.resolver(url, language)
        return self.add_root(record)

    # ──────────────────────────────────────────────
    # Entry points
    # ──────────────────────────────────────────────

    def abort(self) -> None:
        """Stop the running expansion before its next edge.

        With no expansion running, the request applies to the next one that
        follows edges. It is cleared once an edge loop has ended.
        """
        self._abort_requested = True

    def collapse(self, node_id: str) -> None:
        """Hide an expanded node's children. Children stay in the map."""
        node = self.get(node_id)
        if node.status is NodeStatus.EXPANDED:
            node.status = NodeStatus.COLLAPSED
        else:
            logger.debug("Collapse ignored for %s in state %s", node_id, node.status.value)

    async def expand(self, node_id: str) -> None:
        """Expand ``node_id`` by following its outward edges.

        Loading nodes are left alone, expanded nodes toggle to collapsed, and
        nodes whose children were materialized earlier re-expand without
        network access. Error nodes only leave the error state via retry.
        """
        node = self.get(node_id)

        if node.status is NodeStatus.LOADING:
            return
        if node.status is NodeStatus.EXPANDED:
            self.collapse(node_id)
            return
        if node.status is NodeStatus.ERROR:
            logger.info("Node %s is in error state; use retry", node_id)
            return
        if node.child_ids:
            node.status = NodeStatus.EXPANDED
            return

        node.status = NodeStatus.LOADING

        if node.depth >= self.max_depth:
            self._mark_error(node, DepthLimitReached(node.depth, self.max_depth))
            return

        edges = list(node.outward_edges)
        if not edges:
            node.child_ids = []
            node.status = NodeStatus.EXPANDED
            return

        try:
            child_ids, new_children = await self._follow_edges(node, edges)
        except asyncio.CancelledError:
            node.status = NodeStatus.COLLAPSED
            raise
        finally:
            # an abort is consumed by the edge loop that sees it
            self._abort_requested = False

        self._commit(node, child_ids, new_children)

    async def retry(self, node_id: str) -> None:
        """Re-resolve an error node's own URL.

        On success the node is refreshed in place and becomes collapsed,
        ready to expand; on failure the stored error is replaced. Depth and
        parent never change.
        """
        node = self.get(node_id)
        if node.status is not NodeStatus.ERROR or node.parent_id is None:
            logger.warning("Retry ignored for %s (status=%s, parent=%s)", node_id, node.status.value, node.parent_id)
            return

        previous_error, previous_code = node.last_error, node.error_code
        node.status = NodeStatus.LOADING
        node.last_error = None
        node.error_code = None

        try:
            record = await self.resolver(node.source_url, node.language_hint)
        except asyncio.CancelledError:
            node.status = NodeStatus.ERROR
            node.last_error, node.error_code = previous_error, previous_code
            raise
        except Exception as e:
            self._mark_error(node, e)
            return

        node.name = record.name
        node.search_volume = record.search_volume
        node.language_hint = record.language_hint or node.language_hint
        node.outward_edges = list(record.pivot_edges)
        node.status = NodeStatus.COLLAPSED
        logger.info("Retry succeeded for %s (%s)", node.id, node.name)

    # ──────────────────────────────────────────────
    # Internals
    # ──────────────────────────────────────────────

    def _mark_error(self, node: TreeNode, error: BaseException) -> None:
        node.status = NodeStatus.ERROR
        node.last_error = error_message(error)
        node.error_code = error_code(error)
        logger.warning("Node %s failed [%s]: %s", node.id, node.error_code, node.last_error)

    def _budget_left(self, pending: int) -> bool:
        return len(self._nodes) + pending < self.max_nodes

    async def _follow_edges(self, node: TreeNode, edges: list[Edge]) -> tuple[list[str], list[TreeNode]]:
        child_ids: list[str] = []
        pending: dict[str, TreeNode] = {}
        last = len(edges) - 1

        for i, edge in enumerate(edges):
            if self._abort_requested:
                logger.info("Expansion of %s aborted after %d/%d edges", node.id, i, len(edges))
                break
            if not self._budget_left(len(pending)):
                logger.info("Node budget (%d) reached while expanding %s", self.max_nodes, node.id)
                break

            target_id = extract_id_from_url(edge.url)
            if target_id is None:
                logger.debug("Skipping edge without id: %s", edge.url)
                continue

            if target_id in self._nodes or target_id in pending:
                self._link_existing(node, target_id, child_ids)
                continue

            try:
                record = await self.resolver(edge.url, node.language_hint)
            except Exception as e:
                child = TreeNode.error_node(target_id, edge, node.depth + 1, node.id, e)
                logger.warning("Edge %s -> %s failed [%s]: %s", node.id, target_id, child.error_code, child.last_error)
            else:
                child = TreeNode.from_record(record, depth=node.depth + 1, parent_id=node.id)

            if child.id in self._nodes or child.id in pending:
                # the edge URL resolved to an interest that is already known
                self._link_existing(node, child.id, child_ids)
            else:
                pending[child.id] = child
                child_ids.append(child.id)

            if i < last:
                await asyncio.sleep(self.request_delay)

        return child_ids, list(pending.values())

    def _link_existing(self, node: TreeNode, target_id: str, child_ids: list[str]) -> None:
        if target_id == node.id or self.is_ancestor(node.id, target_id):
            logger.debug("Edge %s -> %s points back to an ancestor", node.id, target_id)
        if target_id not in child_ids:
            child_ids.append(target_id)

    def _commit(self, node: TreeNode, child_ids: list[str], new_children: list[TreeNode]) -> None:
        for child in new_children:
            if child.id not in self._nodes:
                self._nodes[child.id] = child
        node.child_ids = child_ids
        node.status = NodeStatus.EXPANDED
        logger.info(
            "Expanded %s: %d children (%d new), %d nodes total",
            node.id,
            len(child_ids),
            len(new_children),
            len(self._nodes),
        )
