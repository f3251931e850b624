"""JSON-LD extraction from ``<script type="application/ld+json">`` tags."""
from __future__ import annotations

import json
import re
from typing import Any

import structlog
from bs4 import BeautifulSoup

from schema_radar.parser.normalizer import ExtractedSchema, normalize_schema
from schema_radar.parser.string_cleaner import clean_json_like_string

logger = structlog.get_logger(__name__)

JSON_LD_MIME = "application/ld+json"

# Non-greedy: recovers flat graphs only, nested arrays end the match early
_GRAPH_ARRAY = re.compile(r'"@graph"\s*:\s*(\[.*?\])', re.DOTALL)


def _is_json_ld_type(value: str | None) -> bool:
    return bool(value) and value.strip().lower() == JSON_LD_MIME


def parse_json_ld_payload(content: str) -> tuple[Any, str]:
    """Parse one cleaned JSON-LD payload.

    Returns (data, error). On success error is "". When strict parsing
    fails, a ``"@graph": [...]`` array is located by regex and parsed on
    its own; the recovered array is returned wrapped as ``{"@graph": [...]}``.
    When both fail, data is None and error describes the failure.
    """
    try:
        return json.loads(content), ""
    except json.JSONDecodeError as exc:
        strict_error = str(exc)

    match = _GRAPH_ARRAY.search(content)
    if match:
        try:
            graph = json.loads(match.group(1))
        except json.JSONDecodeError:
            graph = None
        if isinstance(graph, list):
            return {"@graph": graph}, ""

    return None, f"Malformed JSON-LD: {strict_error}"


def flatten_candidates(parsed: Any) -> list[dict]:
    """Split a parsed payload into candidate schema objects.

    Top-level arrays are flattened one level; an object carrying an
    ``@graph`` array is replaced by the graph members. Non-object members
    are dropped.
    """
    if isinstance(parsed, list):
        items = parsed
    elif isinstance(parsed, dict):
        graph = parsed.get("@graph")
        items = graph if isinstance(graph, list) else [parsed]
    else:
        items = []
    return [item for item in items if isinstance(item, dict)]


def extract_json_ld(soup: BeautifulSoup) -> list[ExtractedSchema]:
    """Extract normalized JSON-LD candidates in document order.

    Malformed payloads are skipped; they never abort the extraction.
    """
    results: list[ExtractedSchema] = []

    for index, script in enumerate(soup.find_all("script", attrs={"type": _is_json_ld_type})):
        raw = script.string if script.string is not None else script.get_text()
        content = clean_json_like_string(raw)
        if not content:
            continue

        parsed, error = parse_json_ld_payload(content)
        if error:
            logger.debug("json_ld_skipped", script_index=index, error=error)
            continue

        results.extend(normalize_schema(item) for item in flatten_candidates(parsed))

    return results
