"""Choose between the rendered and static fetch paths."""
from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urlparse

import structlog

from schema_radar.config.settings import Settings
from schema_radar.errors import InvalidURLError
from schema_radar.fetcher.html_fetcher import fetch_static
from schema_radar.fetcher.js_render_fetcher import render_page
from schema_radar.parser.normalizer import ExtractedSchema
from schema_radar.utils.urls import is_absolute_http_url

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FetchedPage:
    """HTML to analyze plus where and how it was obtained."""
    html: str
    final_url: str
    render_method: str  # "rendered" or "static"
    extracted_schemas: list[ExtractedSchema] = field(default_factory=list)
    render_error: str | None = None


def validate_url(url: str) -> str:
    """Reject anything but an absolute http(s) URL before any network activity."""
    candidate = (url or "").strip()
    if not is_absolute_http_url(candidate):
        raise InvalidURLError(f"Invalid URL format: {url!r}")
    hostname = urlparse(candidate).hostname
    if not hostname:
        raise InvalidURLError(f"Invalid URL format: {url!r}")
    try:
        hostname.encode("idna")
    except UnicodeError as exc:
        raise InvalidURLError(f"Invalid URL format: {url!r}") from exc
    return candidate


def fetch_page(url: str, settings: Settings | None = None) -> FetchedPage:
    """Fetch ``url``, rendering it first when rendering is enabled.

    A disabled or failed render falls back to a plain HTTP fetch. Schemas
    extracted in-page by a failed render are never carried over. Static
    path errors propagate as FetchError / InvalidURLError.
    """
    settings = settings or Settings()
    url = validate_url(url)

    render = render_page(url, settings.render)
    if render is not None and render.success and render.html:
        # The browser follows redirects itself; the requested URL is reported
        return FetchedPage(
            html=render.html,
            final_url=url,
            render_method="rendered",
            extracted_schemas=list(render.extracted_schemas),
        )

    render_error = None
    if render is not None:
        render_error = render.error or "Rendered page was empty"
        logger.warning("render_fallback_to_static", url=url, error=render_error)

    page = fetch_static(url, settings.fetcher)
    return FetchedPage(
        html=page.html,
        final_url=page.final_url,
        render_method="static",
        render_error=render_error,
    )
