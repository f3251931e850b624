"""Schema object normalization and target-type matching."""
from __future__ import annotations

import copy
import json
from typing import Any

ExtractedSchema = dict[str, Any]

# Schema.org types the analyzer reports as validation candidates
TARGET_SCHEMAS: tuple[str, ...] = (
    "Hotel", "LodgingBusiness", "FAQPage", "Organization", "Review", "AggregateRating",
    "LocalBusiness", "Place", "Product", "Service", "JobPosting", "Restaurant",
    "Event", "BusinessEvent", "HowTo", "Article", "QAPage", "WebSite", "BreadcrumbList",
    "VideoObject", "ImageObject", "ItemList", "PostalAddress", "GeoCoordinates", "Offer",
)


def normalize_type(raw: Any) -> str:
    """Collapse a ``@type`` value into a single comma-joined string."""
    if raw is None or raw == "" or raw == []:
        return ""
    if isinstance(raw, (list, tuple)):
        return ",".join(str(item) for item in raw)
    return str(raw)


def normalize_schema(obj: Any) -> Any:
    """Return a deep copy of ``obj`` with a canonical scalar ``@type``.

    A list ``@type`` is joined with commas. When ``@type`` is missing but
    ``type`` is present, ``type`` is promoted to ``@type`` and removed.
    Non-dict input is returned unchanged. Idempotent.
    """
    if not isinstance(obj, dict):
        return obj
    clone = copy.deepcopy(obj)

    if "@type" in clone:
        clone["@type"] = normalize_type(clone["@type"])
    if not clone.get("@type") and clone.get("type"):
        clone["@type"] = normalize_type(clone.pop("type"))

    return clone


def primary_type(type_str: str) -> str:
    """First type of a comma-joined ``@type`` string."""
    return (type_str or "").split(",")[0].strip()


def matches_target_schemas(schema_type: str) -> bool:
    t = (schema_type or "").lower()
    if not t:
        return False
    return any(
        target.lower() in t or t in target.lower()
        for target in TARGET_SCHEMAS
    )


def schema_key(schema: ExtractedSchema) -> str:
    """Canonical text form used for equality between schema objects."""
    return json.dumps(schema, sort_keys=True, ensure_ascii=False, default=str)
