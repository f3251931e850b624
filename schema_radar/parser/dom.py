"""DOM helpers shared by the attribute-based extractors (Microdata, RDFa)."""
from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from bs4 import Tag

from schema_radar.utils.urls import absolutize

_SCHEMA_ORG_URL = re.compile(r"^https?://(?:www\.)?schema\.org/", re.IGNORECASE)

# Attribute order for property values; text content is the last resort
_VALUE_ATTRIBUTES = ("content", "href", "src")


def text_from(element: Tag) -> str:
    """Element text with whitespace runs collapsed to single spaces."""
    return " ".join(element.get_text().split())


def strip_schema_org(value: str) -> str:
    return _SCHEMA_ORG_URL.sub("", value.strip())


def raw_property_value(element: Tag) -> tuple[str, str]:
    """Return (value, source) using content -> href -> src -> text priority."""
    for attribute in _VALUE_ATTRIBUTES:
        value = element.get(attribute)
        if isinstance(value, list):
            value = " ".join(value)
        if value:
            return value, attribute
    return text_from(element), "text"


def is_link_element(element: Tag) -> bool:
    return element.name in ("a", "img") or element.has_attr("href") or element.has_attr("src")


def resolve_value(value: str, source: str, element: Tag, base_url: str) -> str:
    """Absolutize attribute-derived values of link-like elements against ``base_url``."""
    if not base_url or source == "text" or not is_link_element(element):
        return value
    return absolutize(value, base_url)


def group_properties(pairs: Iterable[tuple[str, Any]]) -> dict[str, Any]:
    """Fold (name, value) pairs into a mapping; repeated names become lists."""
    grouped: dict[str, Any] = {}
    for name, value in pairs:
        if not name:
            continue
        if name not in grouped:
            grouped[name] = value
        elif isinstance(grouped[name], list):
            grouped[name] = [*grouped[name], value]
        else:
            grouped[name] = [grouped[name], value]
    return grouped
