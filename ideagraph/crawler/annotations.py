"""Pin annotation aggregation.

Counts how often each tag occurs across an interest page's pins and ranks
them. Only tags whose link looks like a genuine interest page are counted:
the URL must contain ``/ideas/``, end in a numeric id and contain no
parentheses (tag links with parentheses are platform noise).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable

from .base import Annotation
from .constants import MAX_ANNOTATIONS
from .parsers.pin import raw_annotations

_TRAILING_ID_RE = re.compile(r"/\d+/?$")


def is_annotation_link(url: str) -> bool:
    return (
        "/ideas/" in url
        and bool(_TRAILING_ID_RE.search(url))
        and "(" not in url
        and ")" not in url
    )


@dataclass
class _Tally:
    count: int
    url: str


class AnnotationAggregator:
    """Frequency counter over (tag, url) pairs.

    Insertion order of the underlying dict is first-seen order, and the
    ranking sort is stable, so equal counts keep first-seen order.
    """

    def __init__(self) -> None:
        self._tallies: dict[str, _Tally] = {}

    def add(self, name: Any, url: Any) -> bool:
        """Count one occurrence. Returns False when the pair is discarded."""
        if not isinstance(name, str) or not name or not isinstance(url, str) or not url:
            return False
        if not is_annotation_link(url):
            return False
        tally = self._tallies.get(name)
        if tally is None:
            self._tallies[name] = _Tally(count=1, url=url)
        else:
            tally.count += 1
        return True

    def add_pin(self, pin: Any) -> None:
        for item in raw_annotations(pin):
            self.add(item.get("name"), item.get("url"))

    def __len__(self) -> int:
        return len(self._tallies)

    def ranked(self, limit: int = MAX_ANNOTATIONS) -> list[Annotation]:
        ordered = sorted(self._tallies.items(), key=lambda item: item[1].count, reverse=True)
        return [
            Annotation(tag=name, occurrence_count=tally.count, representative_url=tally.url)
            for name, tally in ordered[:limit]
        ]


def aggregate_annotations(pins: Iterable[Any], limit: int = MAX_ANNOTATIONS) -> list[Annotation]:
    """Rank the tags of raw pin entries."""
    aggregator = AnnotationAggregator()
    for pin in pins:
        aggregator.add_pin(pin)
    return aggregator.ranked(limit)
