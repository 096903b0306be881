"""Interest page fetching and extraction."""

from .annotations import AnnotationAggregator, aggregate_annotations, is_annotation_link
from .base import (
    Annotation,
    Edge,
    Engagement,
    ExtractionContext,
    ExtractionResult,
    FetchResult,
    InterestRecord,
    PinRecord,
)
from .errors import (
    Blocked,
    ChallengeRequired,
    CrawlerError,
    DepthLimitReached,
    ExtractionError,
    FetchFailed,
    FetchTimeout,
    InvalidUrl,
    MalformedState,
    NoEmbeddedState,
    NoName,
    ResourceNotFound,
)
from .extractor import extract
from .fetcher import PageFetcher
from .scraper import BatchItem, InterestScraper

__all__ = [
    "Annotation",
    "AnnotationAggregator",
    "BatchItem",
    "Blocked",
    "ChallengeRequired",
    "CrawlerError",
    "DepthLimitReached",
    "Edge",
    "Engagement",
    "ExtractionContext",
    "ExtractionError",
    "ExtractionResult",
    "FetchFailed",
    "FetchResult",
    "FetchTimeout",
    "InterestRecord",
    "InterestScraper",
    "InvalidUrl",
    "MalformedState",
    "NoEmbeddedState",
    "NoName",
    "PageFetcher",
    "PinRecord",
    "ResourceNotFound",
    "aggregate_annotations",
    "extract",
    "is_annotation_link",
]
