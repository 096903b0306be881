"""Extractor: turns one fetched interest page into canonical records.

Pipeline:
1. Find the embedded state blob (markers tried in order; on a miss, sniff
   for blocked / challenge pages before reporting NoEmbeddedState)
2. Parse it as JSON
3. Resolve the interest resource via the ordered path strategies
4. Normalize name, search volume, breadcrumbs and both edge lists
5. Parse up to 20 pins in source order
6. Rank pin annotations across all raw pins

Extraction is read-only; persisting the result is the caller's job.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from .annotations import aggregate_annotations
from .base import Edge, ExtractionContext, ExtractionResult, InterestRecord, PinRecord
from .constants import BLOCKED_SIGNATURES, CHALLENGE_SIGNATURES, MAX_PINS, STATE_MARKERS
from .errors import (
    Blocked,
    ChallengeRequired,
    MalformedState,
    NoEmbeddedState,
    NoName,
    ResourceNotFound,
)
from .parsers.pin import parse_pin
from .strategies import (
    INTEREST_STRATEGIES,
    PINS_STRATEGIES,
    available_resource_keys,
    pin_entries,
    resolve_first,
)
from .urls import absolutize, edge_key, extract_id_from_url, looks_like_challenge_url

logger = logging.getLogger(__name__)


def locate_state(page: str) -> tuple[str, str]:
    """Return (marker name, raw blob) for the first marker present.

    Raises Blocked / ChallengeRequired when the page is a known wall, and
    NoEmbeddedState otherwise.
    """
    for marker, pattern in STATE_MARKERS:
        match = pattern.search(page)
        if match:
            return marker, match.group(1)

    lowered = page.lower()
    for signature in CHALLENGE_SIGNATURES:
        if signature in lowered:
            raise ChallengeRequired(f"page contains '{signature}'")
    for signature in BLOCKED_SIGNATURES:
        if signature in lowered:
            raise Blocked(f"page contains '{signature}'")
    raise NoEmbeddedState([marker for marker, _ in STATE_MARKERS])


def parse_state(marker: str, blob: str) -> Any:
    try:
        return json.loads(blob)
    except json.JSONDecodeError as e:
        raise MalformedState(marker, str(e)) from e


def _text(value: Any) -> str | None:
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return None


def _search_volume(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def _breadcrumbs(raw: Any) -> list[str]:
    if not isinstance(raw, list):
        return []
    names = []
    for crumb in raw:
        name = _text(crumb.get("name")) if isinstance(crumb, dict) else _text(crumb)
        if name:
            names.append(name)
    return names


def _collect_edges(
    raw: Any,
    target_domain: str,
    name_key: str,
    url_key: str,
    id_key: str | None = None,
    slug_key: str | None = None,
) -> list[Edge]:
    """Edges with a non-empty name and a resolvable URL, deduped by URL."""
    if not isinstance(raw, list):
        return []

    edges: list[Edge] = []
    seen: set[str] = set()
    for item in raw:
        if not isinstance(item, dict):
            continue
        name = _text(item.get(name_key))
        url = _text(item.get(url_key))
        if url is None and slug_key and _text(item.get(slug_key)):
            url = f"/ideas/{item[slug_key].strip()}/"
        url = absolutize(url, target_domain)
        if not name or not url:
            continue

        key = edge_key(url)
        if key in seen:
            continue
        seen.add(key)

        edge_id = item.get(id_key) if id_key else None
        edges.append(Edge(name=name, url=url, id=str(edge_id) if edge_id not in (None, "") else None))
    return edges


def extract(page: str | bytes, context: ExtractionContext) -> ExtractionResult:
    """Extract the interest record and its pins from a raw page (text or UTF-8 bytes).

    Raises:
        ChallengeRequired: Redirected to, or served, a login/challenge page.
        Blocked: The page is a block / rate-limit page.
        NoEmbeddedState: No known state marker present.
        MalformedState: State blob is not valid JSON.
        ResourceNotFound: No path strategy located the interest resource.
        NoName: The interest resource has no name.
    """
    if isinstance(page, bytes):
        page = page.decode("utf-8", errors="replace")
    if looks_like_challenge_url(context.final_url):
        raise ChallengeRequired(f"redirected to {context.final_url}")

    marker, blob = locate_state(page)
    state = parse_state(marker, blob)

    data = resolve_first(state, INTEREST_STRATEGIES)
    if not isinstance(data, dict):
        raise ResourceNotFound(available_resource_keys(state))

    page_metadata = data.get("page_metadata")
    metatags = page_metadata.get("metatags") if isinstance(page_metadata, dict) else None
    if not isinstance(metatags, dict):
        metatags = {}

    name = _text(metatags.get("og:title")) or _text(data.get("name"))
    if not name:
        raise NoName()

    interest_id = extract_id_from_url(context.url) or (str(data["id"]) if data.get("id") else None)
    if not interest_id:
        raise ResourceNotFound(detail="Interest id missing from URL and resource")

    domain = context.target_domain
    related_edges = _collect_edges(
        data.get("seo_related_interests"), domain, "name", "url", id_key="id", slug_key="key"
    )
    pivot_edges = _collect_edges(data.get("ideas_klp_pivots"), domain, "pivot_full_name", "pivot_url")

    raw_pins = pin_entries(resolve_first(state, PINS_STRATEGIES))
    pins: list[PinRecord] = []
    for raw_pin in raw_pins[:MAX_PINS]:
        pin = parse_pin(raw_pin)
        if pin is not None:
            pins.append(pin)

    record = InterestRecord(
        id=interest_id,
        name=name,
        url=context.url,
        search_volume=_search_volume(data.get("internal_search_count")),
        breadcrumbs=_breadcrumbs(data.get("seo_breadcrumbs")),
        related_edges=related_edges,
        pivot_edges=pivot_edges,
        top_annotations=aggregate_annotations(raw_pins),
        language_hint=context.language,
        last_update=_text(metatags.get("og:updated_time")),
        last_scrape=datetime.now(timezone.utc),
    )

    logger.debug(
        "Extracted interest %s via %s: %d pivots, %d related, %d pins",
        record.id,
        marker,
        len(pivot_edges),
        len(related_edges),
        len(pins),
    )
    return ExtractionResult(record=record, pins=pins)
