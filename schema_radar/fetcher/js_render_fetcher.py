"""JS-rendered HTML fetcher using a headless Chromium through Playwright."""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import structlog
from playwright.sync_api import Browser, Page, Playwright, sync_playwright
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from schema_radar.config.settings import RenderSettings
from schema_radar.errors import RenderError
from schema_radar.parser.normalizer import ExtractedSchema
from schema_radar.parser.universal import extract_from_page

logger = structlog.get_logger(__name__)

SCHEMA_SELECTOR = 'script[type="application/ld+json"]'

RENDER_HEADERS = {
    "Accept-Language": "en-US,en;q=0.9",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8",
    "sec-ch-ua": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"Windows"',
}


@dataclass(frozen=True)
class RenderResult:
    """Outcome of one fetch attempt."""
    html: str | None
    success: bool
    method: str  # "rendered" or "static"
    error: str | None = None
    extracted_schemas: list[ExtractedSchema] = field(default_factory=list)


@contextmanager
def launched_browser(playwright: Playwright) -> Iterator[Browser]:
    """Launch headless Chromium and close it on every exit path."""
    browser = playwright.chromium.launch(headless=True)
    try:
        yield browser
    finally:
        try:
            browser.close()
        except PlaywrightError as exc:
            logger.debug("browser_close_failed", error=str(exc))


def _log_console_error(msg) -> None:
    if msg.type == "error":
        logger.debug("page_console_error", text=msg.text)


def _log_page_error(error) -> None:
    logger.debug("page_javascript_error", error=str(error))


def _wait_for_schema_tags(page: Page, timeout_ms: int) -> bool:
    """Best-effort wait for a JSON-LD script tag; never raises on timeout."""
    try:
        page.wait_for_selector(SCHEMA_SELECTOR, state="attached", timeout=timeout_ms)
        return True
    except PlaywrightTimeoutError:
        return False


def _render_once(playwright: Playwright, url: str, settings: RenderSettings) -> RenderResult:
    with launched_browser(playwright) as browser:
        context = browser.new_context(
            viewport={"width": settings.viewport_width, "height": settings.viewport_height},
            user_agent=settings.user_agent,
            extra_http_headers=RENDER_HEADERS,
        )
        page = context.new_page()
        page.on("console", _log_console_error)
        page.on("pageerror", _log_page_error)

        page.goto(url, wait_until="networkidle", timeout=settings.navigation_timeout_ms)

        found = _wait_for_schema_tags(page, settings.selector_timeout_ms)
        if not found:
            logger.debug("schema_tags_not_found", url=url, waited_ms=settings.selector_timeout_ms)

        # Deferred/async scripts may still be mutating the DOM
        page.wait_for_timeout(settings.settle_delay_ms)

        html = page.content()
        if not html or not html.strip():
            raise RenderError("Rendered page was empty")
        extracted = extract_from_page(page)

    return RenderResult(
        html=html,
        success=True,
        method="rendered",
        extracted_schemas=extracted,
    )


def render_page(url: str, settings: RenderSettings | None = None) -> RenderResult | None:
    """Render a page in a headless browser and snapshot the resulting HTML.

    Returns None when rendering is disabled. Failures (launch, navigation,
    timeout) are returned as an unsuccessful RenderResult; the browser is
    closed before returning in every case.
    """
    settings = settings or RenderSettings()
    if not settings.enabled:
        logger.debug("render_disabled", url=url)
        return None

    logger.info("render_started", url=url, timeout_ms=settings.navigation_timeout_ms)
    try:
        with sync_playwright() as playwright:
            result = _render_once(playwright, url, settings)
    except Exception as exc:
        logger.warning("render_failed", url=url, error=str(exc))
        return RenderResult(html=None, success=False, method="rendered", error=str(exc))

    logger.info(
        "render_complete",
        url=url,
        size=len(result.html or ""),
        schemas=len(result.extracted_schemas),
    )
    return result
