"""RDFa extraction (``typeof`` / ``property``).

Unlike Microdata, every ``[property]`` descendant of a ``[typeof]`` element
is attributed to that element, including properties that sit inside a
nested ``[typeof]`` element. Nested typed elements are still emitted as
items of their own.
"""
from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

from schema_radar.parser.dom import (
    group_properties,
    raw_property_value,
    resolve_value,
    strip_schema_org,
)
from schema_radar.parser.normalizer import ExtractedSchema, normalize_schema

DEFAULT_TYPE = "Thing"

_SCHEMA_PREFIX = re.compile(r"^schema:")


def _strip_name(value: str) -> str:
    return strip_schema_org(_SCHEMA_PREFIX.sub("", value.strip()))


def _rdfa_type(element: Tag) -> str:
    typeof = element.get("typeof") or ""
    if isinstance(typeof, list):
        typeof = " ".join(typeof)
    types = [_strip_name(token) for token in typeof.split()]
    return ",".join(t for t in types if t) or DEFAULT_TYPE


def extract_rdfa_item(element: Tag, base_url: str = "") -> ExtractedSchema:
    pairs = []
    for prop in element.find_all(attrs={"property": True}):
        name = _strip_name(prop.get("property") or "")
        value, source = raw_property_value(prop)
        pairs.append((name, resolve_value(value, source, prop, base_url)))

    item = {"@type": _rdfa_type(element)}
    item.update(group_properties(pairs))
    return normalize_schema(item)


def extract_rdfa(soup: BeautifulSoup | Tag, base_url: str = "") -> list[ExtractedSchema]:
    """Extract one schema object per ``[typeof]`` element in document order."""
    return [
        extract_rdfa_item(element, base_url)
        for element in soup.find_all(attrs={"typeof": True})
    ]
