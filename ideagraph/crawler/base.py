"""Canonical records produced by the extractor.

All extractors should:
1. Keep records free of raw platform payloads (only normalized fields)
2. Default missing counters to 0 rather than None
3. Leave language handling to the caller (``language_hint`` is never inferred)
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class Edge(BaseModel):
    """Outward link from one interest to another.

    Attributes:
        name: Display name of the target interest
        url: Absolute URL of the target interest page
        id: Target interest id when the page states it
    """

    name: str
    url: str
    id: str | None = None


class Annotation(BaseModel):
    """One ranked pin tag."""

    tag: str
    occurrence_count: int
    representative_url: str


class Engagement(BaseModel):
    repin_count: int = 0
    save_count: int = 0
    comment_count: int = 0


class PinRecord(BaseModel):
    """A content pin referenced from an interest page.

    Attributes:
        id: Platform pin id (pins without one are dropped)
        title: Pin title
        description: Pin description
        image_url: Largest available image variant
        thumbnail_url: Largest available thumbnail variant
        link: Canonical pin permalink
        article_url: Rich pin / outbound article link
        engagement: Repin, save and comment counters
        created_at: When the pin was created on the platform
        tags: Up to 10 annotation names, no URLs
        source_domain: Domain of the pin's source
        board_name: Board the pin was saved to
    """

    id: str
    title: str | None = None
    description: str | None = None
    image_url: str | None = None
    thumbnail_url: str | None = None
    link: str | None = None
    article_url: str | None = None
    engagement: Engagement = Field(default_factory=Engagement)
    created_at: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    source_domain: str | None = None
    board_name: str | None = None


class InterestRecord(BaseModel):
    """One scraped interest (topic) page.

    Attributes:
        id: Numeric-looking platform id, the graph key
        name: Display name
        url: Canonical source URL (normalized to the target domain)
        search_volume: Platform search count, 0 when absent
        breadcrumbs: Category path, outermost first
        related_edges: Related-interest links
        pivot_edges: Keyword pivot links, used for graph expansion
        top_annotations: Ranked pin tags (max 20)
        language_hint: Caller-supplied locale code
        last_update: Source metadata timestamp when present
        last_scrape: Extraction time
    """

    id: str
    name: str
    url: str
    search_volume: int = 0
    breadcrumbs: list[str] = Field(default_factory=list)
    related_edges: list[Edge] = Field(default_factory=list)
    pivot_edges: list[Edge] = Field(default_factory=list)
    top_annotations: list[Annotation] = Field(default_factory=list)
    language_hint: str | None = None
    last_update: str | None = None
    last_scrape: datetime

    @property
    def annotation_url_map(self) -> dict[str, str]:
        """Lower-cased tag name -> representative URL."""
        return {a.tag.lower(): a.representative_url for a in self.top_annotations}


class ExtractionContext(BaseModel):
    """Caller-supplied inputs for one extraction.

    Attributes:
        url: URL the caller asked for (normalized to the target domain)
        target_domain: Host used to absolutize relative edge URLs
        accept_language: Accept-Language header value used for the fetch
        language: Language hint stored verbatim on the record
        final_url: URL after redirects, when the page was fetched
    """

    url: str
    target_domain: str = "www.pinterest.com"
    accept_language: str | None = None
    language: str | None = None
    final_url: str | None = None


class ExtractionResult(BaseModel):
    record: InterestRecord
    pins: list[PinRecord] = Field(default_factory=list)


class FetchResult(BaseModel):
    """Raw outcome of one successful page fetch."""

    status: int
    final_url: str
    body: str
