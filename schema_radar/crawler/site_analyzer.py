"""Multi-page analysis: discover pages, analyze each one sequentially."""
from __future__ import annotations

import time
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from schema_radar.config.settings import Settings
from schema_radar.crawler.page_discovery import PageClassification, discover_pages
from schema_radar.errors import ErrorCategory, SchemaRadarError, user_message
from schema_radar.fetcher.strategy import validate_url
from schema_radar.pipeline import AnalysisResult, analyze_url
from schema_radar.utils.urls import VisitedTracker

logger = structlog.get_logger(__name__)


@dataclass
class PageAnalysis:
    classification: PageClassification
    result: AnalysisResult | None = None
    error: str | None = None
    error_category: ErrorCategory | None = None

    @property
    def success(self) -> bool:
        return self.result is not None

    def to_dict(self) -> dict:
        data = self.classification.to_dict()
        data["success"] = self.success
        if self.result is not None:
            data["analysis"] = self.result.to_dict()
        else:
            data["error"] = self.error
            data["error_category"] = self.error_category.value if self.error_category else None
        return data


@dataclass
class SiteAnalysis:
    base_url: str
    pages: list[PageAnalysis] = field(default_factory=list)

    @property
    def successful(self) -> list[PageAnalysis]:
        return [p for p in self.pages if p.success]

    @property
    def failed(self) -> list[PageAnalysis]:
        return [p for p in self.pages if not p.success]

    @property
    def schema_types(self) -> dict[str, int]:
        """Occurrences of each ``@type`` string across all analyzed pages."""
        counts: Counter[str] = Counter()
        for page in self.successful:
            counts.update(page.result.schema_types)
        return dict(counts.most_common())

    def to_dict(self) -> dict:
        return {
            "base_url": self.base_url,
            "pages_analyzed": len(self.pages),
            "pages_succeeded": len(self.successful),
            "pages_failed": len(self.failed),
            "schema_types": self.schema_types,
            "pages": [p.to_dict() for p in self.pages],
        }


def analyze_site(
    base_url: str,
    settings: Settings | None = None,
    max_pages: int | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> SiteAnalysis:
    """Discover up to ``max_pages`` pages and analyze each one.

    A page that fails is recorded with its error category; the crawl goes on.

    Raises:
        InvalidURLError: malformed base URL, before any fetch
    """
    settings = settings or Settings()
    base_url = validate_url(base_url)
    max_pages = max_pages or settings.crawler.max_pages

    classifications = discover_pages(base_url, max_pages, settings.fetcher)
    logger.info("site_pages_discovered", base_url=base_url, pages=len(classifications))

    visited = VisitedTracker()
    site = SiteAnalysis(base_url=base_url)

    for classification in classifications:
        if visited.has_visited(classification.url):
            continue
        if visited and settings.crawler.delay_between_requests > 0:
            sleep(settings.crawler.delay_between_requests)
        visited.mark_visited(classification.url)

        try:
            result = analyze_url(classification.url, settings)
        except SchemaRadarError as exc:
            logger.warning("page_analysis_failed", url=classification.url, error=str(exc))
            site.pages.append(PageAnalysis(
                classification=classification,
                error=user_message(exc.category, str(exc), settings.debug),
                error_category=exc.category,
            ))
            continue

        site.pages.append(PageAnalysis(classification=classification, result=result))

    logger.info(
        "site_analysis_complete",
        base_url=base_url,
        succeeded=len(site.successful),
        failed=len(site.failed),
    )
    return site
