"""Unit tests for the headless-browser fetcher (Playwright is mocked)."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from schema_radar.config.settings import RenderSettings
from schema_radar.fetcher.js_render_fetcher import RENDER_HEADERS, render_page

MODULE = "schema_radar.fetcher.js_render_fetcher"


class FakeChromium:
    """Hands out mock browsers and remembers which ones were closed."""

    def __init__(self, html: str = "<html><body>rendered</body></html>", goto_error: Exception | None = None):
        self.html = html
        self.goto_error = goto_error
        self.launched: list[MagicMock] = []
        self.closed: list[MagicMock] = []
        self.pages: list[MagicMock] = []

    def launch(self, **kwargs):
        browser = MagicMock()
        browser.launch_kwargs = kwargs
        page = browser.new_context.return_value.new_page.return_value
        page.content.return_value = self.html
        if self.goto_error is not None:
            page.goto.side_effect = self.goto_error
        browser.close.side_effect = lambda: self.closed.append(browser)
        self.launched.append(browser)
        self.pages.append(page)
        return browser

    @property
    def open_browsers(self) -> int:
        return len(self.launched) - len(self.closed)


@pytest.fixture
def enabled() -> RenderSettings:
    return RenderSettings(enabled=True, settle_delay_ms=0)


def _patch_playwright(chromium: FakeChromium):
    playwright = MagicMock()
    playwright.chromium = chromium
    sync = MagicMock()
    sync.return_value.__enter__.return_value = playwright
    return patch(f"{MODULE}.sync_playwright", sync)


class TestDisabled:
    """Tests for the disabled path."""

    def test_returns_none_without_launching(self):
        """With rendering disabled no browser is started."""
        with patch(f"{MODULE}.sync_playwright") as sync:
            assert render_page("https://example.com/", RenderSettings(enabled=False)) is None
        sync.assert_not_called()

    def test_default_settings_disabled(self):
        assert render_page("https://example.com/") is None


class TestSuccessfulRender:
    """Tests for a successful render."""

    def test_result(self, enabled):
        chromium = FakeChromium()
        with _patch_playwright(chromium), \
                patch(f"{MODULE}.extract_from_page", return_value=[{"@type": "Hotel"}]):
            result = render_page("https://example.com/", enabled)

        assert result.success is True
        assert result.method == "rendered"
        assert result.html == "<html><body>rendered</body></html>"
        assert result.error is None
        assert result.extracted_schemas == [{"@type": "Hotel"}]
        assert chromium.open_browsers == 0

    def test_browser_configuration(self, enabled):
        """Headless launch, configured viewport/user agent, networkidle navigation."""
        chromium = FakeChromium()
        with _patch_playwright(chromium), patch(f"{MODULE}.extract_from_page", return_value=[]):
            render_page("https://example.com/", enabled)

        browser = chromium.launched[0]
        assert browser.launch_kwargs == {"headless": True}
        browser.new_context.assert_called_once_with(
            viewport={"width": 1920, "height": 1080},
            user_agent=enabled.user_agent,
            extra_http_headers=RENDER_HEADERS,
        )
        page = chromium.pages[0]
        page.goto.assert_called_once_with("https://example.com/", wait_until="networkidle", timeout=30000)
        page.wait_for_selector.assert_called_once_with(
            'script[type="application/ld+json"]', state="attached", timeout=5000
        )
        page.wait_for_timeout.assert_called_once_with(0)

    def test_missing_schema_tags_not_fatal(self, enabled):
        """A selector timeout is only a best-effort wait."""
        chromium = FakeChromium()
        with _patch_playwright(chromium), patch(f"{MODULE}.extract_from_page", return_value=[]):
            chromium_launch = chromium.launch

            def launch(**kwargs):
                browser = chromium_launch(**kwargs)
                chromium.pages[-1].wait_for_selector.side_effect = PlaywrightTimeoutError("Timeout 5000ms")
                return browser

            chromium.launch = launch
            result = render_page("https://example.com/", enabled)

        assert result.success is True

    def test_close_failure_ignored(self, enabled):
        chromium = FakeChromium()
        with _patch_playwright(chromium), patch(f"{MODULE}.extract_from_page", return_value=[]):
            chromium_launch = chromium.launch

            def launch(**kwargs):
                browser = chromium_launch(**kwargs)
                browser.close.side_effect = PlaywrightError("Target closed")
                return browser

            chromium.launch = launch
            result = render_page("https://example.com/", enabled)

        assert result.success is True
        chromium.launched[0].close.assert_called_once()


class TestFailedRender:
    """Tests for failures inside the rendered path."""

    def test_navigation_timeout_returns_failure(self, enabled):
        chromium = FakeChromium(goto_error=PlaywrightTimeoutError("Timeout 30000ms exceeded"))
        with _patch_playwright(chromium):
            result = render_page("https://example.com/", enabled)

        assert result.success is False
        assert result.html is None
        assert result.method == "rendered"
        assert "Timeout 30000ms exceeded" in result.error
        assert result.extracted_schemas == []

    def test_launch_failure_returns_failure(self, enabled):
        chromium = MagicMock()
        chromium.launch.side_effect = PlaywrightError("Executable doesn't exist")
        playwright = MagicMock(chromium=chromium)
        with patch(f"{MODULE}.sync_playwright") as sync:
            sync.return_value.__enter__.return_value = playwright
            result = render_page("https://example.com/", enabled)

        assert result.success is False
        assert "Executable doesn't exist" in result.error

    def test_repeated_timeouts_leak_no_browsers(self, enabled):
        """100 navigation timeouts in a row leave no browser open."""
        chromium = FakeChromium(goto_error=PlaywrightTimeoutError("Timeout 30000ms exceeded"))
        with _patch_playwright(chromium):
            results = [render_page(f"https://example.com/{i}", enabled) for i in range(100)]

        assert all(r.success is False for r in results)
        assert len(chromium.launched) == 100
        assert chromium.open_browsers == 0

    def test_unexpected_error_contained(self, enabled):
        """Errors from page extraction never escape render_page."""
        chromium = FakeChromium()
        with _patch_playwright(chromium), \
                patch(f"{MODULE}.extract_from_page", side_effect=RuntimeError("boom")):
            result = render_page("https://example.com/", enabled)

        assert result.success is False
        assert result.error == "boom"
        assert chromium.open_browsers == 0

    def test_empty_snapshot_returns_failure(self, enabled):
        """A blank page after rendering is a failed render, not an empty success."""
        chromium = FakeChromium(html="  \n ")
        with _patch_playwright(chromium), patch(f"{MODULE}.extract_from_page") as extract:
            result = render_page("https://example.com/", enabled)

        assert result.success is False
        assert result.error == "Rendered page was empty"
        extract.assert_not_called()
        assert chromium.open_browsers == 0
