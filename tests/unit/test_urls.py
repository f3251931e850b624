"""Unit tests for URL helpers."""
from __future__ import annotations

import pytest

from schema_radar.utils.urls import (
    VisitedTracker,
    absolutize,
    deduplicate_urls,
    get_base_url,
    is_absolute_http_url,
    is_same_domain,
    normalize_url,
)


class TestAbsoluteUrls:
    """Tests for is_absolute_http_url and absolutize."""

    @pytest.mark.parametrize("url", ["https://example.com", "http://example.com/a?b=1"])
    def test_absolute(self, url):
        assert is_absolute_http_url(url) is True

    @pytest.mark.parametrize("url", ["", "not a url", "/relative", "ftp://example.com", "https://", "http://[::1"])
    def test_not_absolute(self, url):
        assert is_absolute_http_url(url) is False

    def test_absolutize(self):
        assert absolutize("../img.png", "https://example.com/a/b/") == "https://example.com/a/img.png"
        assert absolutize("https://cdn.example.com/x", "https://example.com/") == "https://cdn.example.com/x"
        assert absolutize("", "https://example.com/") == ""


class TestNormalizeUrl:
    """Tests for normalize_url."""

    def test_host_lowercased_and_fragment_dropped(self):
        assert normalize_url("https://EXAMPLE.com/Rooms#top") == "https://example.com/Rooms"

    def test_trailing_slash_stripped_except_root(self):
        assert normalize_url("https://example.com/faq/") == "https://example.com/faq"
        assert normalize_url("https://example.com") == "https://example.com/"

    def test_query_optionally_removed(self):
        assert normalize_url("https://example.com/a?x=1") == "https://example.com/a?x=1"
        assert normalize_url("https://example.com/a?x=1", remove_query=True) == "https://example.com/a"

    def test_relative_returned_unchanged(self):
        assert normalize_url("/faq/") == "/faq/"


class TestDomainHelpers:
    """Tests for domain helpers."""

    def test_deduplicate_keeps_first_original(self):
        urls = ["https://example.com/faq/", "https://EXAMPLE.com/faq", "https://example.com/about"]
        assert deduplicate_urls(urls) == ["https://example.com/faq/", "https://example.com/about"]

    def test_same_domain(self):
        assert is_same_domain("https://example.com/a", "http://example.com/b") is True
        assert is_same_domain("https://example.com/a", "https://other.com/") is False
        assert is_same_domain("mailto:a@example.com", "https://example.com/") is False
        assert is_same_domain("http://[::1", "http://[::1") is False

    def test_get_base_url(self):
        assert get_base_url("https://example.com/a/b?c=1") == "https://example.com"
        assert get_base_url("http://127.0.0.1:8080/x") == "http://127.0.0.1:8080"
        assert get_base_url("http://[::1]:8000/x") == "http://[::1]:8000"
        assert get_base_url("/relative") is None
        assert get_base_url("http://[::1") is None
        assert get_base_url("http://example.com:99999/") is None


class TestVisitedTracker:
    """Tests for VisitedTracker."""

    def test_query_insensitive(self):
        tracker = VisitedTracker()
        tracker.mark_visited("https://example.com/rooms?page=2")

        assert tracker.has_visited("https://example.com/rooms/")
        assert not tracker.has_visited("https://example.com/faq")
        assert len(tracker) == 1

    def test_visited_sorted_and_clear(self):
        tracker = VisitedTracker()
        tracker.mark_visited("https://example.com/b")
        tracker.mark_visited("https://example.com/a")

        assert tracker.visited == ["https://example.com/a", "https://example.com/b"]
        tracker.clear()
        assert len(tracker) == 0
