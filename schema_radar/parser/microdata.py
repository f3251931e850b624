"""Microdata extraction (``itemscope`` / ``itemtype`` / ``itemprop``)."""
from __future__ import annotations

from typing import Any

from bs4 import BeautifulSoup, Tag

from schema_radar.parser.dom import (
    group_properties,
    raw_property_value,
    resolve_value,
    strip_schema_org,
)
from schema_radar.parser.normalizer import ExtractedSchema, normalize_schema

DEFAULT_TYPE = "Thing"


def _item_type(element: Tag) -> str:
    """Schema.org type names from ``itemtype``; non-schema.org vocabularies fall back to Thing."""
    itemtype = element.get("itemtype") or ""
    if isinstance(itemtype, list):
        itemtype = " ".join(itemtype)
    types = [
        strip_schema_org(token)
        for token in itemtype.split()
        if "schema.org/" in token
    ]
    return ",".join(t for t in types if t) or DEFAULT_TYPE


def _owning_scope(element: Tag) -> Tag | None:
    """Nearest ancestor carrying ``itemscope``; the element itself is not considered."""
    return element.find_parent(attrs={"itemscope": True})


def _property_pairs(scope: Tag, base_url: str) -> list[tuple[str, Any]]:
    pairs = []
    for prop in scope.find_all(attrs={"itemprop": True}):
        # Properties of nested items belong to the nested item only
        if _owning_scope(prop) is not scope:
            continue

        name = (prop.get("itemprop") or "").strip()
        value, source = raw_property_value(prop)
        value = resolve_value(value, source, prop, base_url)

        if prop.has_attr("itemscope"):
            value = extract_item(prop, base_url)

        pairs.append((name, value))
    return pairs


def extract_item(scope: Tag, base_url: str = "") -> ExtractedSchema:
    """Build the schema object for one ``itemscope`` element, recursing into nested items."""
    item = {"@type": _item_type(scope)}
    item.update(group_properties(_property_pairs(scope, base_url)))
    return normalize_schema(item)


def extract_microdata(soup: BeautifulSoup | Tag, base_url: str = "") -> list[ExtractedSchema]:
    """Extract one schema object per ``itemscope`` element, nested ones included, in document order."""
    return [
        extract_item(scope, base_url)
        for scope in soup.find_all(attrs={"itemscope": True})
    ]
