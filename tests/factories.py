"""Builders for synthetic interest pages, records and an offline resolver."""

import json
from datetime import datetime, timezone

from ideagraph.crawler import Edge, InterestRecord
from ideagraph.crawler.urls import extract_id_from_url

BASE_URL = "https://www.pinterest.com"
KITCHEN_URL = f"{BASE_URL}/ideas/kitchen/9183/"


def interest_url(interest_id: str, slug: str | None = None) -> str:
    return f"{BASE_URL}/ideas/{slug or 'topic-' + interest_id}/{interest_id}/"


def pivot(name: str, slug: str, interest_id: str) -> dict:
    return {"pivot_full_name": name, "pivot_url": f"/ideas/{slug}/{interest_id}/"}


def interest_data(
    name: str = "Kitchen",
    interest_id: str = "9183",
    pivots: list[dict] | None = None,
    related: list[dict] | None = None,
    search_count=12345,
    breadcrumbs: tuple[str, ...] = ("Home decor", "Kitchen"),
    og_title: str | None = None,
    updated_time: str | None = None,
) -> dict:
    data = {
        "id": interest_id,
        "name": name,
        "internal_search_count": search_count,
        "seo_breadcrumbs": [{"name": crumb} for crumb in breadcrumbs],
        "seo_related_interests": related or [],
        "ideas_klp_pivots": pivots or [],
    }
    metatags = {}
    if og_title:
        metatags["og:title"] = og_title
    if updated_time:
        metatags["og:updated_time"] = updated_time
    if metatags:
        data["page_metadata"] = {"metatags": metatags}
    return data


def make_pin(pin_id, annotations: list[tuple[str, str]] = (), **extra) -> dict:
    pin = {
        "id": pin_id,
        "title": f"Pin {pin_id}",
        "images": {
            "736x": {"url": f"https://i.pinimg.com/736x/{pin_id}.jpg"},
            "236x": {"url": f"https://i.pinimg.com/236x/{pin_id}.jpg"},
        },
    }
    if annotations:
        pin["pin_join"] = {"annotations_with_links": [{"name": name, "url": url} for name, url in annotations]}
    pin.update(extra)
    return pin


def redux_state(data: dict, pins: list[dict] | None = None) -> dict:
    return {
        "initialReduxState": {
            "resources": {"InterestResource": {"interest-request-key": {"data": data}}},
            "pins": {str(p.get("id")): p for p in pins or []},
        }
    }


def props_state(data: dict, pins: list[dict] | None = None) -> dict:
    return {"props": redux_state(data, pins)}


def responses_state(data: dict, pins: list[dict] | None = None) -> dict:
    return {
        "resourceResponses": [
            {"name": "InterestResource", "response": {"data": data}},
            {"name": "InterestFeedResource", "response": {"data": list(pins or [])}},
        ]
    }


def page(state: dict, marker: str = "__PWS_DATA__") -> str:
    return (
        "<!DOCTYPE html><html><head>"
        f'<script id="{marker}" type="application/json">{json.dumps(state)}</script>'
        "</head><body><div id=\"root\"></div></body></html>"
    )


def make_record(interest_id: str, pivots: list[str] = (), name: str | None = None) -> InterestRecord:
    return InterestRecord(
        id=interest_id,
        name=name or f"Interest {interest_id}",
        url=interest_url(interest_id),
        search_volume=int(interest_id) * 10,
        pivot_edges=[Edge(name=f"Interest {t}", url=interest_url(t)) for t in pivots],
        language_hint="en",
        last_scrape=datetime.now(timezone.utc),
    )


class FakeResolver:
    """Resolves interest URLs against an in-memory adjacency map.

    ``failures`` maps an interest id to errors raised on successive calls;
    once the list is used up the id resolves normally.
    """

    def __init__(self, graph: dict[str, list[str]], failures: dict[str, list[Exception]] | None = None):
        self.graph = graph
        self.failures = {k: list(v) for k, v in (failures or {}).items()}
        self.calls: list[str] = []

    async def __call__(self, url: str, language: str | None = None) -> InterestRecord:
        interest_id = extract_id_from_url(url)
        self.calls.append(interest_id)
        pending = self.failures.get(interest_id)
        if pending:
            raise pending.pop(0)
        return make_record(interest_id, self.graph.get(interest_id, []))
