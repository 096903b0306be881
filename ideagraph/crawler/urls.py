"""Interest URL helpers."""

from __future__ import annotations

import re
from urllib.parse import urlsplit, urlunsplit

from .constants import CHALLENGE_PATH_SEGMENTS

_IDEAS_ID_RE = re.compile(r"/ideas/[^/]+/(\d+)")
_IDEAS_URL_RE = re.compile(r"^https?://([a-z]{2}\.)?((www\.)?pinterest\.[a-z.]+)/ideas/[^/]+/\d+")
_PLATFORM_HOST_RE = re.compile(r"https?://([a-z]{2}\.)?(www\.)?pinterest\.[a-z.]+")


def extract_id_from_url(url: str | None) -> str | None:
    """Return the numeric interest id from an /ideas/<slug>/<id> URL."""
    if not url:
        return None
    match = _IDEAS_ID_RE.search(url)
    return match.group(1) if match else None


def is_valid_ideas_url(url: str) -> bool:
    return bool(_IDEAS_URL_RE.match(url))


def ensure_scheme(url: str) -> str:
    url = url.strip()
    if not url.startswith("http"):
        return "https://" + url.lstrip("/")
    return url


def normalize_domain(url: str, target_domain: str | None) -> str:
    """Rewrite any platform host in ``url`` to ``target_domain``."""
    if not target_domain:
        return url
    return _PLATFORM_HOST_RE.sub(f"https://{target_domain}", url, count=1)


def absolutize(url: str | None, target_domain: str) -> str | None:
    """Make a relative link absolute on ``target_domain``.

    Absolute links are returned unchanged. The caller's target domain is used
    rather than the host that served the page, so a cross-locale redirect
    cannot leak into stored links.
    """
    if not url:
        return None
    url = url.strip()
    if not url:
        return None
    if url.startswith(("http://", "https://")):
        return url
    if url.startswith("//"):
        return "https:" + url
    if not url.startswith("/"):
        url = "/" + url
    return f"https://{target_domain}{url}"


def edge_key(url: str) -> str:
    """Normalized form of an edge URL, used for deduplication."""
    parts = urlsplit(url.strip())
    path = parts.path.rstrip("/") or "/"
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, "", ""))


def looks_like_challenge_url(url: str | None) -> bool:
    """True when a final (post-redirect) URL points at a login or challenge wall."""
    if not url:
        return False
    path = urlsplit(url).path.lower()
    return any(path == segment or path.startswith(segment + "/") for segment in CHALLENGE_PATH_SEGMENTS)
