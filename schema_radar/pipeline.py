"""Single-page analysis pipeline: fetch, extract, normalize, merge."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from schema_radar.config.settings import Settings
from schema_radar.errors import ErrorCategory, FetchError, SchemaRadarError
from schema_radar.fetcher.html_fetcher import fetch_static
from schema_radar.fetcher.strategy import FetchedPage, fetch_page
from schema_radar.js_dependency import JsDependencyEstimate, estimate
from schema_radar.parser.normalizer import ExtractedSchema
from schema_radar.parser.schema_extractor import (
    extract_all,
    match_target_schemas,
    merge_schemas,
)

logger = structlog.get_logger(__name__)


@dataclass
class AnalysisResult:
    """What downstream scoring consumes for one page."""
    url: str
    final_url: str
    html: str
    render_method: str
    json_ld: list[ExtractedSchema] = field(default_factory=list)
    microdata: list[ExtractedSchema] = field(default_factory=list)
    rdfa: list[ExtractedSchema] = field(default_factory=list)
    rendered: list[ExtractedSchema] = field(default_factory=list)
    schemas: list[ExtractedSchema] = field(default_factory=list)
    matched: list[dict] = field(default_factory=list)
    js_dependency: JsDependencyEstimate | None = None
    render_error: str | None = None

    @property
    def schema_types(self) -> list[str]:
        return [s.get("@type", "") for s in self.schemas if s.get("@type")]

    def to_dict(self, include_html: bool = False) -> dict[str, Any]:
        data: dict[str, Any] = {
            "url": self.url,
            "final_url": self.final_url,
            "render_method": self.render_method,
            "json_ld": self.json_ld,
            "microdata": self.microdata,
            "rdfa": self.rdfa,
            "rendered": self.rendered,
            "schemas": self.schemas,
            "all_schemas_count": len(self.schemas),
            "matched": self.matched,
            "js_dependency": self.js_dependency.to_dict() if self.js_dependency else None,
            "render_error": self.render_error,
        }
        if include_html:
            data["html"] = self.html
        return data


def analyze_page(
    page: FetchedPage,
    url: str | None = None,
    check_non_standard: bool = False,
) -> AnalysisResult:
    """Extract, merge and validate structured data from an already fetched page."""
    if not page.html or not page.html.strip():
        raise FetchError("Invalid HTML content", category=ErrorCategory.INVALID_HTML)

    extraction = extract_all(page.html, page.final_url)
    schemas = merge_schemas(extraction.schemas, page.extracted_schemas)
    rendered_only = schemas[len(extraction.schemas):]

    labelled = [*extraction.labelled(), *(("Rendered", s) for s in rendered_only)]

    return AnalysisResult(
        url=url or page.final_url,
        final_url=page.final_url,
        html=page.html,
        render_method=page.render_method,
        json_ld=extraction.json_ld,
        microdata=extraction.microdata,
        rdfa=extraction.rdfa,
        rendered=rendered_only,
        schemas=schemas,
        matched=match_target_schemas(labelled, check_non_standard),
        render_error=page.render_error,
    )


def _estimate_js_dependency(page: FetchedPage, settings: Settings) -> JsDependencyEstimate | None:
    if page.render_method != "rendered" or not settings.render.compare_static:
        return None
    try:
        static = fetch_static(page.final_url, settings.fetcher)
    except SchemaRadarError as exc:
        logger.warning("static_comparison_failed", url=page.final_url, error=str(exc))
        return None
    return estimate(static.html, page.html)


def analyze_url(url: str, settings: Settings | None = None) -> AnalysisResult:
    """Fetch ``url`` and extract every structured-data candidate from it.

    Raises:
        InvalidURLError: malformed URL, before any fetch
        FetchError: static fetch failure (after any render fallback)
    """
    settings = settings or Settings()
    page = fetch_page(url, settings)
    result = analyze_page(page, url, settings.validation.non_standard_warnings)
    result.js_dependency = _estimate_js_dependency(page, settings)

    logger.info(
        "analysis_complete",
        url=url,
        final_url=result.final_url,
        render_method=result.render_method,
        schemas=len(result.schemas),
        matched=len(result.matched),
    )
    return result
