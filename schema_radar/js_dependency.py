"""Estimate how much of a page only exists after JavaScript runs.

Compares the server-delivered HTML with the browser-rendered HTML. The
length ratio is a coarse proxy: it is not whitespace-normalized and can
be negative when the rendered snapshot is shorter than the static one.
"""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field

import structlog

logger = structlog.get_logger(__name__)

# Pages above this share of JS-only markup are flagged as JS-dependent
JS_DEPENDENT_THRESHOLD = 30

CRITICAL_PATTERNS = {
    "price": re.compile(r"\$\s*\d+|\d+\s*(?:usd|eur|gbp)|price|cost|rate", re.IGNORECASE),
    "contact": re.compile(r"telephone|phone|email|contact", re.IGNORECASE),
    "booking": re.compile(r"book now|reserve|reservation|availability", re.IGNORECASE),
    "address": re.compile(r"address|location|directions", re.IGNORECASE),
    "rating": re.compile(r"rating|review|stars", re.IGNORECASE),
}

_JSON_LD_TAG = re.compile(r"""<script[^>]*type=["']application/ld\+json["']""", re.IGNORECASE)


@dataclass(frozen=True)
class JsDependencyEstimate:
    percent_js_rendered: float
    critical_content_only_in_js: list[str] = field(default_factory=list)
    static_size: int = 0
    rendered_size: int = 0
    content_difference: int = 0
    static_schema_blocks: int = 0
    rendered_schema_blocks: int = 0

    @property
    def is_js_dependent(self) -> bool:
        return self.percent_js_rendered > JS_DEPENDENT_THRESHOLD

    @property
    def schema_js_injected(self) -> bool:
        return self.rendered_schema_blocks > self.static_schema_blocks

    def to_dict(self) -> dict:
        data = asdict(self)
        data["is_js_dependent"] = self.is_js_dependent
        data["schema_js_injected"] = self.schema_js_injected
        return data


def percent_js_rendered(static_html: str, rendered_html: str) -> float:
    """``(len(rendered) - len(static)) / len(rendered) * 100``; 0 when either side is empty."""
    if not static_html or not rendered_html:
        return 0.0
    difference = len(rendered_html) - len(static_html)
    return round(difference / len(rendered_html) * 100, 2)


def critical_content_only_in_js(static_html: str, rendered_html: str) -> list[str]:
    """Categories whose keywords appear in the rendered HTML but not the static HTML."""
    return [
        category
        for category, pattern in CRITICAL_PATTERNS.items()
        if not pattern.search(static_html or "") and pattern.search(rendered_html or "")
    ]


def estimate(static_html: str | None, rendered_html: str | None) -> JsDependencyEstimate | None:
    """Compare static and rendered HTML.

    Returns None unless both inputs are present, i.e. a render actually
    happened and a static copy was fetched alongside it.
    """
    if static_html is None or rendered_html is None:
        return None

    result = JsDependencyEstimate(
        percent_js_rendered=percent_js_rendered(static_html, rendered_html),
        critical_content_only_in_js=critical_content_only_in_js(static_html, rendered_html),
        static_size=len(static_html),
        rendered_size=len(rendered_html),
        content_difference=len(rendered_html) - len(static_html),
        static_schema_blocks=len(_JSON_LD_TAG.findall(static_html)),
        rendered_schema_blocks=len(_JSON_LD_TAG.findall(rendered_html)),
    )
    logger.debug(
        "js_dependency_estimated",
        percent=result.percent_js_rendered,
        critical=result.critical_content_only_in_js,
    )
    return result
