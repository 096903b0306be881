"""Pin parser: extracts a normalized PinRecord from a raw pin entry.

Pin payloads embedded in interest pages vary by age: counters, timestamps
and link fields each live in one of several legacy locations. The parser
probes them in a fixed order and takes the first one present.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any
from urllib.parse import urlparse

from ..base import Engagement, PinRecord
from ..constants import (
    IMAGE_FALLBACK,
    IMAGE_SIZES,
    MAX_PIN_TAGS,
    PIN_PERMALINK,
    SECONDS_CUTOFF,
    THUMBNAIL_SIZES,
)

logger = logging.getLogger(__name__)

_REPIN_PATHS = (
    ("repin_count",),
    ("aggregated_pin_data", "repin_count"),
    ("aggregated_pin_data", "aggregated_stats", "repins"),
)
_SAVE_PATHS = (
    ("aggregated_pin_data", "aggregated_stats", "saves"),
    ("save_count",),
    ("aggregated_pin_data", "save_count"),
)
_COMMENT_PATHS = (
    ("comment_count",),
    ("aggregated_pin_data", "comment_count"),
    ("aggregated_pin_data", "aggregated_stats", "comments"),
)
_CREATED_PATHS = (
    ("created_at",),
    ("created_time",),
    ("date_created",),
    ("native_creator", "created_at"),
)
_ARTICLE_PATHS = (
    ("rich_summary", "url"),
    ("rich_metadata", "url"),
    ("rich_metadata", "article", "url"),
    ("link",),
    ("attribution", "url"),
    ("tracked_link",),
)
_DOMAIN_PATHS = (
    ("domain",),
    ("rich_metadata", "site_name"),
    ("rich_summary", "display_name"),
)
_BOARD_PATHS = (
    ("board", "name"),
    ("board_name",),
    ("pinned_to_board", "name"),
)


def _dig(data: Any, path: tuple[str, ...]) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _first(data: dict[str, Any], paths: tuple[tuple[str, ...], ...]) -> Any:
    """Value at the first path that is present (not None, not empty string)."""
    for path in paths:
        value = _dig(data, path)
        if value is not None and value != "":
            return value
    return None


def _first_text(data: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def _as_count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def _image_url(images: Any, sizes: tuple[str, ...], fallback: str | None = None) -> str | None:
    if not isinstance(images, dict):
        return None
    candidates = (*sizes, fallback) if fallback else sizes
    for size in candidates:
        url = _dig(images, (size, "url"))
        if isinstance(url, str) and url:
            return url
    return None


def convert_timestamp(value: Any) -> datetime | None:
    """Convert a raw pin creation value to an aware UTC datetime.

    Numbers below SECONDS_CUTOFF are Unix seconds, anything else is
    milliseconds. Numeric strings are treated as numbers; ISO-8601 and
    RFC-2822 strings are parsed; other values yield None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.isdigit():
            value = int(text)
        else:
            return _parse_date_string(text)
    if isinstance(value, (int, float)):
        if value < SECONDS_CUTOFF:
            millis = value * 1000
        else:
            millis = value
        try:
            return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            logger.debug("Pin timestamp out of range: %r", value)
            return None
    return None


def _parse_date_string(text: str) -> datetime | None:
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError):
            logger.debug("Unparseable pin timestamp: %r", text)
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def raw_annotations(pin: Any) -> list[dict[str, Any]]:
    """Return the pin's raw {name, url} annotation entries in source order.

    ``pin_join.annotations_with_links`` appears as a flat list, a list of
    lists, or a mapping keyed by annotation name.
    """
    if not isinstance(pin, dict):
        return []
    raw = _dig(pin, ("pin_join", "annotations_with_links"))
    if not raw:
        return []

    if isinstance(raw, dict):
        items = list(raw.values())
    elif isinstance(raw, list):
        items = []
        for item in raw:
            if isinstance(item, list):
                items.extend(item)
            else:
                items.append(item)
    else:
        return []

    return [item for item in items if isinstance(item, dict)]


def parse_pin(pin: Any) -> PinRecord | None:
    """Parse one raw pin entry. Returns None for entries without an id."""
    if not isinstance(pin, dict):
        return None

    pin_id = pin.get("id")
    if pin_id is None or pin_id == "":
        return None
    pin_id = str(pin_id)

    tags = [item["name"] for item in raw_annotations(pin) if isinstance(item.get("name"), str) and item["name"]]

    images = pin.get("images")
    article_url = _first(pin, _ARTICLE_PATHS)

    source_domain = _first(pin, _DOMAIN_PATHS)
    board_name = _first(pin, _BOARD_PATHS)
    if not source_domain and isinstance(article_url, str):
        source_domain = urlparse(article_url).hostname

    return PinRecord(
        id=pin_id,
        title=_first_text(pin, "title", "grid_title"),
        description=_first_text(pin, "description", "closeup_description"),
        image_url=_image_url(images, IMAGE_SIZES, IMAGE_FALLBACK),
        thumbnail_url=_image_url(images, THUMBNAIL_SIZES),
        link=PIN_PERMALINK.format(pin_id=pin_id),
        article_url=article_url if isinstance(article_url, str) else None,
        engagement=Engagement(
            repin_count=_as_count(_first(pin, _REPIN_PATHS)),
            save_count=_as_count(_first(pin, _SAVE_PATHS)),
            comment_count=_as_count(_first(pin, _COMMENT_PATHS)),
        ),
        created_at=convert_timestamp(_first(pin, _CREATED_PATHS)),
        tags=tags[:MAX_PIN_TAGS],
        source_domain=source_domain if isinstance(source_domain, str) else None,
        board_name=board_name if isinstance(board_name, str) else None,
    )
