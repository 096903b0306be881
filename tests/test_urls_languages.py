"""Tests for URL helpers and language configuration."""

import pytest

from ideagraph.config import get_settings
from ideagraph.crawler.urls import (
    absolutize,
    edge_key,
    ensure_scheme,
    extract_id_from_url,
    is_valid_ideas_url,
    looks_like_challenge_url,
    normalize_domain,
)
from ideagraph.languages import detect_language_from_url, get_language_config, is_supported_language


class TestUrls:
    def test_extract_id(self):
        assert extract_id_from_url("https://www.pinterest.com/ideas/kitchen/9183/") == "9183"
        assert extract_id_from_url("https://www.pinterest.com/ideas/kitchen/") is None
        assert extract_id_from_url(None) is None

    def test_valid_ideas_url(self):
        assert is_valid_ideas_url("https://de.pinterest.com/ideas/kueche/9183/")
        assert is_valid_ideas_url("https://www.pinterest.com.br/ideas/cozinha/9183/")
        assert not is_valid_ideas_url("https://example.com/ideas/kitchen/9183/")
        assert not is_valid_ideas_url("https://www.pinterest.com/pin/123/")

    def test_ensure_scheme(self):
        assert ensure_scheme("www.pinterest.com/ideas/a/1/") == "https://www.pinterest.com/ideas/a/1/"
        assert ensure_scheme(" https://x.com ") == "https://x.com"

    def test_normalize_domain(self):
        url = "https://www.pinterest.de/ideas/kueche/9183/"
        assert normalize_domain(url, "de.pinterest.com") == "https://de.pinterest.com/ideas/kueche/9183/"
        assert normalize_domain(url, None) == url

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("/ideas/a/1/", "https://de.pinterest.com/ideas/a/1/"),
            ("ideas/a/1/", "https://de.pinterest.com/ideas/a/1/"),
            ("//www.pinterest.com/ideas/a/1/", "https://www.pinterest.com/ideas/a/1/"),
            ("https://www.pinterest.com/ideas/a/1/", "https://www.pinterest.com/ideas/a/1/"),
            ("  ", None),
            (None, None),
        ],
    )
    def test_absolutize(self, raw, expected):
        assert absolutize(raw, "de.pinterest.com") == expected

    def test_edge_key_ignores_case_query_and_trailing_slash(self):
        assert edge_key("HTTPS://WWW.Pinterest.com/ideas/a/1/?utm=x#top") == edge_key("https://www.pinterest.com/ideas/a/1")

    def test_challenge_urls(self):
        assert looks_like_challenge_url("https://www.pinterest.com/login/?next=/ideas/a/1/")
        assert looks_like_challenge_url("https://www.pinterest.com/challenge")
        assert not looks_like_challenge_url("https://www.pinterest.com/ideas/login-ideas/1/")
        assert not looks_like_challenge_url(None)


class TestLanguages:
    def test_known_language(self):
        config = get_language_config("fr")
        assert config.domain == "fr.pinterest.com"
        assert config.accept_language.startswith("fr-FR")

    def test_unknown_language_falls_back_to_default(self):
        assert get_language_config("xx").code == "de"
        assert get_language_config(None).code == "de"

    def test_default_language_from_env(self, monkeypatch):
        monkeypatch.setenv("SCRAPE_DEFAULT_LANGUAGE", "en")
        get_settings.cache_clear()
        assert get_language_config().domain == "www.pinterest.com"

    def test_supported(self):
        assert is_supported_language("de")
        assert not is_supported_language("xx")
        assert not is_supported_language(None)

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://fr.pinterest.com/ideas/a/1/", "fr"),
            ("https://br.pinterest.com/ideas/a/1/", "pt"),
            ("https://www.pinterest.com/ideas/a/1/", "en"),
            ("https://example.com/ideas/a/1/", None),
        ],
    )
    def test_detect_language(self, url, expected):
        assert detect_language_from_url(url) == expected
