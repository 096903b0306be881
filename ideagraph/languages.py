"""Per-language platform domains and request headers.

The extractor never derives a language from page content. These values are
chosen by the caller and threaded through the extraction context verbatim.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ideagraph.config import get_settings


@dataclass(frozen=True)
class LanguageConfig:
    """Domain and header settings for one supported language."""

    code: str
    domain: str
    accept_language: str
    fallback_domain: str


LANGUAGE_CONFIGS: dict[str, LanguageConfig] = {
    "de": LanguageConfig(
        code="de",
        domain="de.pinterest.com",
        accept_language="de-DE,de;q=0.9,en-US;q=0.8,en;q=0.7",
        fallback_domain="www.pinterest.de",
    ),
    "en": LanguageConfig(
        code="en",
        domain="www.pinterest.com",
        accept_language="en-US,en;q=0.9",
        fallback_domain="www.pinterest.com",
    ),
    "fr": LanguageConfig(
        code="fr",
        domain="fr.pinterest.com",
        accept_language="fr-FR,fr;q=0.9,en-US;q=0.8,en;q=0.7",
        fallback_domain="www.pinterest.fr",
    ),
    "es": LanguageConfig(
        code="es",
        domain="es.pinterest.com",
        accept_language="es-ES,es;q=0.9,en-US;q=0.8,en;q=0.7",
        fallback_domain="www.pinterest.es",
    ),
    "it": LanguageConfig(
        code="it",
        domain="it.pinterest.com",
        accept_language="it-IT,it;q=0.9,en-US;q=0.8,en;q=0.7",
        fallback_domain="www.pinterest.it",
    ),
    "pt": LanguageConfig(
        code="pt",
        domain="br.pinterest.com",
        accept_language="pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7",
        fallback_domain="www.pinterest.com.br",
    ),
    "nl": LanguageConfig(
        code="nl",
        domain="nl.pinterest.com",
        accept_language="nl-NL,nl;q=0.9,en-US;q=0.8,en;q=0.7",
        fallback_domain="www.pinterest.nl",
    ),
}

SUPPORTED_LANGUAGES = tuple(LANGUAGE_CONFIGS)

_SUBDOMAIN_RE = re.compile(r"https?://([a-z]{2})\.pinterest\.com")
_WWW_RE = re.compile(r"https?://www\.pinterest\.com")


def is_supported_language(code: str | None) -> bool:
    return code in LANGUAGE_CONFIGS


def get_language_config(code: str | None = None) -> LanguageConfig:
    """Return the config for ``code``, falling back to the default language."""
    if code and is_supported_language(code):
        return LANGUAGE_CONFIGS[code]
    default = get_settings().scrape.default_language
    return LANGUAGE_CONFIGS.get(default, LANGUAGE_CONFIGS["de"])


def detect_language_from_url(url: str) -> str | None:
    """Guess the language from a platform URL's host.

    "fr.pinterest.com" -> "fr", "br.pinterest.com" -> "pt",
    "www.pinterest.com" -> "en".
    """
    match = _SUBDOMAIN_RE.match(url)
    if match:
        subdomain = match.group(1)
        if subdomain == "br":
            return "pt"
        if is_supported_language(subdomain):
            return subdomain
    if _WWW_RE.match(url):
        return "en"
    return None
