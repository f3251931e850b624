"""Tolerant universal schema extraction.

Finds Schema.org payloads wherever they are embedded: script tags of any
type (or none), ``data-schema`` attributes, hidden divs, and JavaScript
object literals assigned to variables. Used by the rendered path to scan
the live page: main frame, child frames and open shadow roots.
"""
from __future__ import annotations

import html as html_lib
import json
import re
from dataclasses import dataclass
from typing import Any

import structlog
from playwright.sync_api import Error as PlaywrightError

from schema_radar.parser.normalizer import (
    ExtractedSchema,
    normalize_schema,
    schema_key,
)

logger = structlog.get_logger(__name__)

SCHEMA_KEYWORDS = (
    "@type", "@context", "schema.org",
    "FAQPage", "Question", "Answer",
    "Hotel", "Organization", "HowTo",
    "BreadcrumbList", "WebSite", "Product",
    "Review", "AggregateRating", "LocalBusiness",
    "Article", "BlogPosting", "NewsArticle",
    "Event", "Place", "Person", "PostalAddress",
)

_SCRIPT_BLOCK = re.compile(r"<script[^>]*>(.*?)</script>", re.IGNORECASE | re.DOTALL)
_DATA_SCHEMA_ATTR = re.compile(r"""data-schema=(['"])(.*?)\1""", re.IGNORECASE | re.DOTALL)
_HIDDEN_DIV = re.compile(
    r"""<div[^>]*style\s*=\s*["'][^"']*display\s*:\s*none[^"']*["'][^>]*>(.*?)</div>""",
    re.IGNORECASE | re.DOTALL,
)
_JS_VARIABLE = re.compile(r"(?:\b(?:var|let|const)\s+|window\.)\w+\s*=\s*(\{.*?\});", re.DOTALL)

_HTML_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_BR_TAG = re.compile(r"<br\s*/?>", re.IGNORECASE)
_HTML_TAG = re.compile(r"</?[a-z][^>]*>", re.IGNORECASE)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_TRAILING_COMMA_AT_END = re.compile(r",\s*$")
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][A-Za-z0-9_$]*)(\s*:)")
_GRAPH_ARRAY = re.compile(r'"@graph"\s*:\s*(\[.*?\])', re.DOTALL)
_TYPED_FLAT_OBJECT = re.compile(r'\{[^{}]*"@type"[^{}]*\}')


@dataclass(frozen=True)
class RawBlock:
    """A text fragment that may hold a schema payload."""
    raw: str
    source: str  # "script-tag", "data-attribute", "hidden-div", "js-variable"
    location: int


@dataclass(frozen=True)
class ParseOutcome:
    """Result of a tolerant parse attempt."""
    ok: bool
    data: Any = None
    method: str = "all-failed"
    error: str | None = None


def _has_keyword(content: str) -> bool:
    return any(keyword in content for keyword in SCHEMA_KEYWORDS)


def extract_raw_schema_blocks(html: str) -> list[RawBlock]:
    """Collect every fragment of ``html`` that mentions a Schema.org keyword."""
    blocks = []

    for match in _SCRIPT_BLOCK.finditer(html):
        if _has_keyword(match.group(1)):
            blocks.append(RawBlock(match.group(1), "script-tag", match.start()))

    for match in _DATA_SCHEMA_ATTR.finditer(html):
        blocks.append(RawBlock(match.group(2), "data-attribute", match.start()))

    for match in _HIDDEN_DIV.finditer(html):
        if _has_keyword(match.group(1)):
            blocks.append(RawBlock(match.group(1), "hidden-div", match.start()))

    for match in _JS_VARIABLE.finditer(html):
        if _has_keyword(match.group(1)):
            blocks.append(RawBlock(match.group(1), "js-variable", match.start()))

    return blocks


def sanitize_json_ld(content: str) -> str:
    """Strip markup and entity-encoding around a JSON payload, then repair common syntax slips."""
    cleaned = _HTML_COMMENT.sub("", content)
    cleaned = _BR_TAG.sub(" ", cleaned)
    cleaned = _HTML_TAG.sub("", cleaned)
    cleaned = html_lib.unescape(cleaned)
    cleaned = _TRAILING_COMMA.sub(r"\1", cleaned)
    cleaned = _TRAILING_COMMA_AT_END.sub("", cleaned)
    cleaned = _BARE_KEY.sub(r'\1"\2"\3', cleaned)
    return cleaned.strip()


def _loads(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return json.loads(sanitize_json_ld(text))


def tolerant_json_parse(content: str) -> ParseOutcome:
    """Parse ``content`` with progressively looser strategies.

    Order: strict JSON, sanitized JSON, isolated ``@graph`` array, then
    every flat object literal that carries an ``@type``.
    """
    try:
        return ParseOutcome(ok=True, data=json.loads(content), method="native-json")
    except json.JSONDecodeError:
        pass

    try:
        return ParseOutcome(ok=True, data=json.loads(sanitize_json_ld(content)), method="sanitized-json")
    except json.JSONDecodeError:
        pass

    match = _GRAPH_ARRAY.search(content)
    if match:
        try:
            graph = _loads(match.group(1))
        except json.JSONDecodeError:
            graph = None
        if isinstance(graph, list):
            return ParseOutcome(ok=True, data={"@graph": graph}, method="graph-extraction")

    objects = []
    for match in _TYPED_FLAT_OBJECT.finditer(content):
        try:
            objects.append(_loads(match.group(0)))
        except json.JSONDecodeError:
            continue
    if objects:
        data = objects[0] if len(objects) == 1 else objects
        return ParseOutcome(ok=True, data=data, method="regex-object-extraction")

    return ParseOutcome(ok=False, error="Could not parse JSON with any strategy")


def _parse_blocks(html: str, frame: str) -> list[ParseOutcome]:
    outcomes = []
    for block in extract_raw_schema_blocks(html):
        outcome = tolerant_json_parse(block.raw)
        if outcome.ok:
            logger.debug("schema_block_parsed", frame=frame, source=block.source, method=outcome.method)
            outcomes.append(outcome)
        else:
            logger.debug("schema_block_unparsed", frame=frame, source=block.source, location=block.location)
    return outcomes


def normalize_schema_results(outcomes: list[ParseOutcome]) -> list[ExtractedSchema]:
    """Flatten graphs and arrays, keep typed objects, de-duplicate, normalize."""
    candidates = []
    for outcome in outcomes:
        data = outcome.data
        if isinstance(data, dict) and isinstance(data.get("@graph"), list):
            candidates.extend(data["@graph"])
        elif isinstance(data, list):
            candidates.extend(data)
        elif isinstance(data, dict) and data.get("@type"):
            candidates.append(data)

    seen = set()
    results = []
    for candidate in candidates:
        if not isinstance(candidate, dict):
            continue
        schema = normalize_schema(candidate)
        key = schema_key(schema)
        if key in seen:
            continue
        seen.add(key)
        results.append(schema)
    return results


_SHADOW_ROOTS_SCRIPT = """() => {
    const found = [];
    const scan = (root) => {
        root.querySelectorAll('*').forEach((el) => {
            if (el.shadowRoot) {
                const html = el.shadowRoot.innerHTML;
                if (html.includes('@type') || html.includes('schema.org')) {
                    found.push(html);
                }
                scan(el.shadowRoot);
            }
        });
    };
    scan(document);
    return found;
}"""


def extract_from_page(page) -> list[ExtractedSchema]:
    """Run the universal extraction inside a live Playwright page.

    Scans the main frame, every child frame, and open shadow roots.
    Frames or shadow roots that cannot be read are skipped.
    """
    outcomes = _parse_blocks(page.content(), "main")

    for index, frame in enumerate(page.frames):
        if frame == page.main_frame:
            continue
        try:
            outcomes.extend(_parse_blocks(frame.content(), f"iframe-{index}"))
        except PlaywrightError as exc:
            logger.debug("iframe_skipped", frame_index=index, error=str(exc))

    try:
        shadow_html = page.evaluate(_SHADOW_ROOTS_SCRIPT)
    except PlaywrightError as exc:
        logger.debug("shadow_dom_skipped", error=str(exc))
        shadow_html = []
    for fragment in shadow_html or []:
        outcomes.extend(_parse_blocks(fragment, "shadow-dom"))

    results = normalize_schema_results(outcomes)
    logger.debug("page_extraction_complete", blocks=len(outcomes), schemas=len(results))
    return results
