"""Extraction and crawl error hierarchy.

Every extraction failure is terminal for the page it was raised for. Retry
policy lives in the graph crawler, never in the extractor.
"""

from __future__ import annotations


class ExtractionError(Exception):
    """Base error for one page fetch + extract attempt."""

    code = "ExtractionError"
    # Blocked / challenge pages mean "try again later with another identity",
    # not "the page schema changed".
    retry_later = False


class InvalidUrl(ExtractionError):
    """URL is not an interest page URL."""

    code = "InvalidUrl"

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Not an interest page URL: {url}")


class NoEmbeddedState(ExtractionError):
    """None of the known embedding markers is present in the page."""

    code = "NoEmbeddedState"

    def __init__(self, tried: list[str] | tuple[str, ...] = ()) -> None:
        self.tried = list(tried)
        msg = "No embedded page state found"
        if self.tried:
            msg += f" (tried: {', '.join(self.tried)})"
        super().__init__(msg)


class Blocked(ExtractionError):
    """The platform refused to serve the page (rate limit, bot wall)."""

    code = "Blocked"
    retry_later = True

    def __init__(self, reason: str = "", status: int | None = None) -> None:
        self.status = status
        msg = "Blocked by platform"
        if status:
            msg += f" (HTTP {status})"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ChallengeRequired(ExtractionError):
    """The platform answered with a login, captcha or challenge page."""

    code = "ChallengeRequired"
    retry_later = True

    def __init__(self, reason: str = "") -> None:
        msg = "Challenge or login required"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class MalformedState(ExtractionError):
    """The embedded state blob was found but is not valid JSON."""

    code = "MalformedState"

    def __init__(self, marker: str, detail: str = "") -> None:
        self.marker = marker
        msg = f"Embedded state under {marker} is not valid JSON"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class ResourceNotFound(ExtractionError):
    """No known path led to the interest resource."""

    code = "ResourceNotFound"

    def __init__(self, available_keys: list[str] | None = None, detail: str = "") -> None:
        self.available_keys = list(available_keys or [])
        msg = detail or "Interest resource not found"
        if self.available_keys:
            msg += f" (present: {', '.join(self.available_keys)})"
        super().__init__(msg)


class NoName(ExtractionError):
    """The interest resource has no display name."""

    code = "NoName"

    def __init__(self) -> None:
        super().__init__("Interest resource has no name")


class FetchFailed(ExtractionError):
    """The page could not be fetched."""

    code = "FetchFailed"

    def __init__(self, url: str, reason: str = "", status: int | None = None) -> None:
        self.url = url
        self.status = status
        if status is not None:
            msg = f"HTTP error {status} for {url}"
        else:
            msg = f"Failed to fetch {url}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class FetchTimeout(ExtractionError):
    """The fetch exceeded its time budget."""

    code = "Timeout"

    def __init__(self, url: str, timeout: float) -> None:
        self.url = url
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout:g}s for {url}")


class CrawlerError(Exception):
    """Base error for graph crawl policy stops."""

    code = "CrawlerError"


class DepthLimitReached(CrawlerError):
    """The node sits at or below the configured depth budget."""

    code = "DepthLimitReached"

    def __init__(self, depth: int, max_depth: int) -> None:
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(f"Maximum depth reached ({depth} >= {max_depth})")
