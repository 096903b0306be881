"""Working structures of the keyword graph crawler."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from ideagraph.crawler.base import Edge, InterestRecord


class NodeStatus(str, Enum):
    """Node lifecycle.

    collapsed -> loading -> expanded | error
    expanded <-> collapsed (toggle, no network)
    error -> loading only through retry
    """

    COLLAPSED = "collapsed"
    LOADING = "loading"
    EXPANDED = "expanded"
    ERROR = "error"


class TreeNode(BaseModel):
    """One vertex of the crawl.

    A node is stored once per id no matter how many parents reference it;
    ``depth`` and ``parent_id`` record where it was first discovered.
    """

    id: str
    name: str
    source_url: str
    search_volume: int | None = None
    language_hint: str | None = None
    outward_edges: list[Edge] = Field(default_factory=list)
    child_ids: list[str] = Field(default_factory=list)
    status: NodeStatus = NodeStatus.COLLAPSED
    depth: int = Field(default=0, ge=0)
    parent_id: str | None = None
    last_error: str | None = None
    error_code: str | None = None

    @classmethod
    def from_record(cls, record: InterestRecord, depth: int = 0, parent_id: str | None = None) -> "TreeNode":
        return cls(
            id=record.id,
            name=record.name,
            source_url=record.url,
            search_volume=record.search_volume,
            language_hint=record.language_hint,
            outward_edges=list(record.pivot_edges),
            depth=depth,
            parent_id=parent_id,
        )

    @classmethod
    def error_node(
        cls,
        node_id: str,
        edge: Edge,
        depth: int,
        parent_id: str,
        error: BaseException,
    ) -> "TreeNode":
        return cls(
            id=node_id,
            name=edge.name,
            source_url=edge.url,
            status=NodeStatus.ERROR,
            depth=depth,
            parent_id=parent_id,
            last_error=error_message(error),
            error_code=error_code(error),
        )


class CrawlStats(BaseModel):
    total_nodes: int = 0
    max_depth: int = 0
    loading_count: int = 0
    error_count: int = 0


def error_message(error: BaseException) -> str:
    return str(error) or type(error).__name__


def error_code(error: BaseException) -> str:
    return getattr(error, "code", None) or type(error).__name__
