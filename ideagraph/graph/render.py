"""Flattens the visible part of the crawl into display rows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .crawler import GraphCrawler
from .models import NodeStatus, TreeNode


@dataclass
class TreeRow:
    """One line of the rendered tree.

    ``parent_id`` is the node this row is rendered under, which differs from
    ``node.parent_id`` for cross-references.
    """

    node: TreeNode
    level: int
    parent_id: str | None
    is_cross_reference: bool = False
    is_cycle: bool = False

    @property
    def label(self) -> str:
        label = self.node.name
        if self.node.search_volume:
            label += f" ({self.node.search_volume:,})"
        if self.is_cycle:
            label += " [cycle]"
        elif self.is_cross_reference:
            label += " [see above]"
        if self.node.status is NodeStatus.ERROR:
            label += f" [error: {self.node.last_error}]"
        return label


def walk(crawler: GraphCrawler, root_id: Optional[str] = None) -> list[TreeRow]:
    """Depth-first rows for every visible node, starting at the root.

    A child stored under another parent is emitted once as a cross-reference
    and not descended into. A child that is on the current render path or an
    ancestor of the rendering node is emitted as a cycle, also not descended.
    """
    if root_id is not None:
        root = crawler.get(root_id)
    else:
        root = crawler.root
    if root is None:
        return []

    rows: list[TreeRow] = []

    def visit(node: TreeNode, level: int, render_parent: str | None, path: frozenset[str]) -> None:
        rows.append(TreeRow(node=node, level=level, parent_id=render_parent))
        if node.status is not NodeStatus.EXPANDED:
            return
        path = path | {node.id}
        for child_id in node.child_ids:
            child = crawler.nodes.get(child_id)
            if child is None:
                continue
            is_cycle = child_id in path or crawler.is_ancestor(node.id, child_id)
            is_cross = child.parent_id != node.id
            if is_cycle or is_cross:
                rows.append(
                    TreeRow(
                        node=child,
                        level=level + 1,
                        parent_id=node.id,
                        is_cross_reference=is_cross,
                        is_cycle=is_cycle,
                    )
                )
                continue
            visit(child, level + 1, node.id, path)

    visit(root, 0, None, frozenset())
    return rows
