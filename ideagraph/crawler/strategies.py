"""Path strategies for locating records inside the embedded page state.

The platform has nested the interest resource differently over time. Each
strategy below knows one nesting and returns the resource (or the pins
collection) or None. The extractor tries them in order; supporting a new
layout means adding one function to the relevant list.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

INTEREST_RESOURCE = "InterestResource"
PINS_RESOURCE = "InterestFeedResource"

Strategy = Callable[[Any], Optional[Any]]


def _dig(data: Any, *keys: str) -> Any:
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _first_resource_data(resource: Any) -> dict[str, Any] | None:
    """Data of the first entry in a ``{request_key: {"data": ...}}`` map."""
    if not isinstance(resource, dict):
        return None
    for entry in resource.values():
        data = _dig(entry, "data")
        if isinstance(data, dict) and data:
            return data
    return None


def _response_data(responses: Any, name: str) -> Any:
    """Data of the first ``resourceResponses`` entry named ``name``."""
    if not isinstance(responses, list):
        return None
    for entry in responses:
        if isinstance(entry, dict) and entry.get("name") == name:
            data = _dig(entry, "response", "data")
            if data:
                return data
    return None


# ──────────────────────────────────────────────
# Interest resource
# ──────────────────────────────────────────────

def redux_interest(state: Any) -> dict[str, Any] | None:
    """initialReduxState.resources.InterestResource.<key>.data"""
    return _first_resource_data(_dig(state, "initialReduxState", "resources", INTEREST_RESOURCE))


def props_redux_interest(state: Any) -> dict[str, Any] | None:
    """props.initialReduxState.resources.InterestResource.<key>.data"""
    return _first_resource_data(
        _dig(state, "props", "initialReduxState", "resources", INTEREST_RESOURCE)
    )


def resource_responses_interest(state: Any) -> dict[str, Any] | None:
    """resourceResponses[name=InterestResource].response.data (top level or under props)"""
    for responses in (_dig(state, "resourceResponses"), _dig(state, "props", "resourceResponses")):
        data = _response_data(responses, INTEREST_RESOURCE)
        if isinstance(data, dict):
            return data
    return None


INTEREST_STRATEGIES: list[Strategy] = [
    redux_interest,
    props_redux_interest,
    resource_responses_interest,
]


# ──────────────────────────────────────────────
# Pins collection (a sibling of the interest resource)
# ──────────────────────────────────────────────

def redux_pins(state: Any) -> Any:
    return _dig(state, "initialReduxState", "pins") or None


def props_redux_pins(state: Any) -> Any:
    return _dig(state, "props", "initialReduxState", "pins") or None


def resource_responses_pins(state: Any) -> Any:
    for responses in (_dig(state, "resourceResponses"), _dig(state, "props", "resourceResponses")):
        data = _response_data(responses, PINS_RESOURCE)
        if data:
            return data
    return None


PINS_STRATEGIES: list[Strategy] = [
    redux_pins,
    props_redux_pins,
    resource_responses_pins,
]


def resolve_first(state: Any, strategies: list[Strategy]) -> Any:
    """Result of the first strategy that returns a non-null value."""
    for strategy in strategies:
        found = strategy(state)
        if found is not None:
            return found
    return None


def pin_entries(collection: Any) -> list[Any]:
    """Pin entries in source order, whether stored as a mapping or a list."""
    if isinstance(collection, dict):
        return list(collection.values())
    if isinstance(collection, list):
        return list(collection)
    return []


def available_resource_keys(state: Any) -> list[str]:
    """Resource names present in the state, for schema-drift diagnostics."""
    keys: list[str] = []
    for resources in (
        _dig(state, "initialReduxState", "resources"),
        _dig(state, "props", "initialReduxState", "resources"),
    ):
        if isinstance(resources, dict):
            keys.extend(k for k in resources if k not in keys)
    for responses in (_dig(state, "resourceResponses"), _dig(state, "props", "resourceResponses")):
        if isinstance(responses, list):
            for entry in responses:
                name = entry.get("name") if isinstance(entry, dict) else None
                if isinstance(name, str) and name not in keys:
                    keys.append(name)
    if not keys and isinstance(state, dict):
        keys = [str(k) for k in state]
    return keys
