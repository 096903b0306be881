"""Platform constants: client identities, state markers, extraction caps."""

from __future__ import annotations

import random
import re
from dataclasses import dataclass


@dataclass(frozen=True)
class UAProfile:
    """A user agent with matching client-hint headers.

    A Chrome UA without Sec-CH-UA headers (or with hints naming another OS)
    is an easy bot signal, so the fields travel together.
    """
    user_agent: str
    sec_ch_ua: str = ""             # Sec-CH-UA header, Chromium only
    sec_ch_ua_platform: str = ""    # Sec-CH-UA-Platform header
    sec_ch_ua_mobile: str = "?0"

    def headers(self) -> dict[str, str]:
        headers = {"User-Agent": self.user_agent}
        if self.sec_ch_ua:
            headers["Sec-CH-UA"] = self.sec_ch_ua
            headers["Sec-CH-UA-Platform"] = self.sec_ch_ua_platform
            headers["Sec-CH-UA-Mobile"] = self.sec_ch_ua_mobile
        return headers


_PROFILES = [
    # Windows + Chrome 131
    UAProfile(
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
        sec_ch_ua='"Google Chrome";v="131", "Chromium";v="131", "Not_A Brand";v="24"',
        sec_ch_ua_platform='"Windows"',
    ),
    # macOS + Chrome 131
    UAProfile(
        user_agent="Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
        sec_ch_ua='"Google Chrome";v="131", "Chromium";v="131", "Not_A Brand";v="24"',
        sec_ch_ua_platform='"macOS"',
    ),
    # Windows + Firefox 122 (no client hints)
    UAProfile(
        user_agent="Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:122.0) Gecko/20100101 Firefox/122.0",
    ),
    # macOS + Safari 17
    UAProfile(
        user_agent="Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.2 Safari/605.1.15",
    ),
]


def random_profile() -> UAProfile:
    """Pick a random client identity."""
    return random.choice(_PROFILES)


ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8"

# Embedded state markers, tried in order. The first one present wins.
STATE_MARKERS: list[tuple[str, re.Pattern[str]]] = [
    ("__PWS_INITIAL_PROPS__", re.compile(r'<script id="__PWS_INITIAL_PROPS__"[^>]*>(.*?)</script>', re.S)),
    ("__PWS_DATA__", re.compile(r'<script id="__PWS_DATA__"[^>]*>(.*?)</script>', re.S)),
]

# Page text signatures, checked only when no marker matched.
CHALLENGE_SIGNATURES = (
    "captcha",
    "g-recaptcha",
    "challenge-form",
    "verify you are human",
    "log in to see more",
    "unauth_home",
)
BLOCKED_SIGNATURES = (
    "access denied",
    "request blocked",
    "too many requests",
    "unusual traffic",
)

# Final-URL path segments that mean the fetch was redirected to a wall.
CHALLENGE_PATH_SEGMENTS = ("/login", "/challenge", "/captcha", "/checkpoint")

# Extraction caps
MAX_PINS = 20
MAX_ANNOTATIONS = 20
MAX_PIN_TAGS = 10

# Numeric pin timestamps below this are Unix seconds (2100-01-01T00:00:00Z),
# anything at or above is milliseconds. Changing it re-dates stored pins.
SECONDS_CUTOFF = 4102444800

# Image variants, largest first
IMAGE_SIZES = ("736x", "564x", "474x")
IMAGE_FALLBACK = "orig"
THUMBNAIL_SIZES = ("236x", "170x", "136x136")

PIN_PERMALINK = "https://www.pinterest.com/pin/{pin_id}/"
