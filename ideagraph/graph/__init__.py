"""Keyword graph crawling over interest pivots."""

from .crawler import GraphCrawler, Resolver
from .models import CrawlStats, NodeStatus, TreeNode
from .render import TreeRow, walk
from .session import CrawlSession

__all__ = [
    "CrawlSession",
    "CrawlStats",
    "GraphCrawler",
    "NodeStatus",
    "Resolver",
    "TreeNode",
    "TreeRow",
    "walk",
]
