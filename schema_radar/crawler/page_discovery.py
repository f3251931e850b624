"""Discover the important pages of a site and classify them."""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from urllib.parse import urlparse

import structlog
from bs4 import BeautifulSoup

from schema_radar.config.settings import FetcherSettings
from schema_radar.errors import SchemaRadarError
from schema_radar.fetcher.html_fetcher import fetch_static
from schema_radar.utils.urls import absolutize, deduplicate_urls, get_base_url, is_same_domain

logger = structlog.get_logger(__name__)

HOMEPAGE_WEIGHT = 0.30
DEFAULT_WEIGHT = 0.10

# First match wins. Weights are priors, they are not normalized across a page set.
PAGE_TYPE_RULES: tuple[tuple[str, re.Pattern, float], ...] = (
    ("faq", re.compile(r"faq|frequently-asked|questions", re.IGNORECASE), 0.20),
    ("rooms", re.compile(r"room|suite|accommodations|lodging", re.IGNORECASE), 0.20),
    ("booking", re.compile(r"book|reservation|reserve|availability", re.IGNORECASE), 0.15),
    ("about", re.compile(r"about|our-story|who-we-are", re.IGNORECASE), 0.10),
    ("contact", re.compile(r"contact|get-in-touch|reach-us", re.IGNORECASE), 0.10),
    ("services", re.compile(r"service|amenities|facilities|features", re.IGNORECASE), 0.15),
    ("location", re.compile(r"location|directions|map|find-us", re.IGNORECASE), 0.10),
)


@dataclass(frozen=True)
class PageClassification:
    url: str
    page_type: str
    weight: float

    def to_dict(self) -> dict:
        return {"url": self.url, "page_type": self.page_type, "weight": self.weight}


def classify_page(url: str) -> PageClassification:
    """Assign a page type and scoring weight from the URL path."""
    try:
        path = urlparse(url).path.lower()
    except ValueError:
        return PageClassification(url, "other", DEFAULT_WEIGHT)
    if path in ("", "/"):
        return PageClassification(url, "homepage", HOMEPAGE_WEIGHT)

    for page_type, pattern, weight in PAGE_TYPE_RULES:
        if pattern.search(path):
            return PageClassification(url, page_type, weight)
    return PageClassification(url, "other", DEFAULT_WEIGHT)


def discover_from_sitemap(
    base_url: str,
    max_pages: int = 10,
    settings: FetcherSettings | None = None,
) -> list[str]:
    """Same-host ``<loc>`` entries of ``/sitemap.xml``; empty when unavailable."""
    if max_pages <= 0:
        return []
    origin = get_base_url(base_url)
    if origin is None:
        return []
    settings = settings or FetcherSettings()
    sitemap_url = f"{origin}/sitemap.xml"
    try:
        page = fetch_static(sitemap_url, replace(settings, request_timeout=settings.probe_timeout))
    except SchemaRadarError as exc:
        logger.info("sitemap_unavailable", url=sitemap_url, error=str(exc))
        return []

    soup = BeautifulSoup(page.html, "xml")
    urls = []
    for entry in soup.find_all("url"):
        loc = entry.find("loc")
        if loc is None:
            continue
        url = loc.get_text(strip=True)
        if url and is_same_domain(url, base_url):
            urls.append(url)
        if len(urls) >= max_pages:
            break

    logger.debug("sitemap_discovered", url=sitemap_url, found=len(urls))
    return urls


def discover_from_homepage(
    base_url: str,
    max_pages: int = 10,
    settings: FetcherSettings | None = None,
) -> list[str]:
    """Same-host links found on the homepage; empty when it cannot be fetched."""
    if max_pages <= 0:
        return []
    try:
        page = fetch_static(base_url, settings)
    except SchemaRadarError as exc:
        logger.info("homepage_crawl_failed", url=base_url, error=str(exc))
        return []

    soup = BeautifulSoup(page.html, "lxml")
    urls: list[str] = []
    for link in soup.find_all("a", href=True):
        absolute = absolutize(link["href"], page.final_url)
        if is_same_domain(absolute, base_url) and absolute not in urls:
            urls.append(absolute)

    logger.debug("homepage_links_discovered", url=base_url, found=len(urls))
    return urls[:max_pages]


def discover_pages(
    base_url: str,
    max_pages: int = 10,
    settings: FetcherSettings | None = None,
) -> list[PageClassification]:
    """Homepage plus sitemap pages, topped up with homepage links, classified."""
    urls = [base_url]
    urls.extend(discover_from_sitemap(base_url, max_pages - 1, settings))

    if len(urls) < max_pages:
        urls.extend(discover_from_homepage(base_url, max_pages - len(urls), settings))

    unique = deduplicate_urls(urls)[:max_pages]
    return [classify_page(url) for url in unique]
