"""Rule-table validation of candidate schemas against Schema.org target types.

Each target type lists its required and recommended properties and the
expected shape of known properties. Validation reports what is missing or
malformed; it does not score.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlparse

from schema_radar.parser.normalizer import ExtractedSchema, normalize_type, primary_type

SCHEMA_ORG = "https://schema.org/"

_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}([Tt ][\d:.\-+Zz]+)?$")
_TIME_HM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_TIME_HMS = re.compile(r"^\d{2}:\d{2}:\d{2}$")


@dataclass(frozen=True)
class TypeRules:
    required: tuple[str, ...]
    recommended: tuple[str, ...]
    # property -> "string", "url", "number", "object", "array", "boolean", "date" or "time"
    properties: dict[str, str] = field(default_factory=dict)


VALIDATION_RULES: dict[str, TypeRules] = {
    "Hotel": TypeRules(
        required=("name", "address"),
        recommended=("telephone", "description", "image", "priceRange", "amenityFeature", "url"),
        properties={
            "name": "string", "description": "string", "image": "url", "url": "url",
            "telephone": "string", "address": "object", "priceRange": "string",
            "amenityFeature": "array", "checkinTime": "time", "checkoutTime": "time",
        },
    ),
    "LodgingBusiness": TypeRules(
        required=("name", "address"),
        recommended=("telephone", "description", "image", "priceRange", "url"),
        properties={
            "name": "string", "description": "string", "image": "url", "url": "url",
            "telephone": "string", "address": "object", "priceRange": "string",
        },
    ),
    "Organization": TypeRules(
        required=("name",),
        recommended=("url", "description", "image", "address", "telephone", "sameAs", "logo"),
        properties={
            "name": "string", "url": "url", "description": "string", "image": "url",
            "logo": "url", "address": "object", "telephone": "string", "sameAs": "array",
        },
    ),
    "LocalBusiness": TypeRules(
        required=("name", "address"),
        recommended=("telephone", "description", "image", "url", "priceRange", "openingHours", "geo", "sameAs"),
        properties={
            "name": "string", "image": "url", "url": "url", "telephone": "string",
            "address": "object", "priceRange": "string", "openingHours": "string", "geo": "object",
            "sameAs": "array",
        },
    ),
    "FAQPage": TypeRules(
        required=("mainEntity",),
        recommended=("name", "description"),
        properties={"mainEntity": "array", "name": "string", "description": "string"},
    ),
    "HowTo": TypeRules(
        required=("name", "step"),
        recommended=("description", "image", "supply", "tool", "totalTime"),
        properties={
            "name": "string", "step": "array", "description": "string", "image": "url",
            "supply": "array", "tool": "array", "totalTime": "string",
        },
    ),
    "Review": TypeRules(
        required=("reviewRating", "author"),
        recommended=("reviewBody", "datePublished", "itemReviewed"),
        properties={
            "reviewRating": "object", "author": "object", "reviewBody": "string",
            "datePublished": "date", "itemReviewed": "object",
        },
    ),
    "AggregateRating": TypeRules(
        required=("ratingValue", "reviewCount"),
        recommended=("bestRating", "worstRating"),
        properties={
            "ratingValue": "number", "reviewCount": "number",
            "bestRating": "number", "worstRating": "number",
        },
    ),
    "Place": TypeRules(
        required=("name",),
        recommended=("address", "description", "image", "url", "telephone", "geo"),
        properties={
            "name": "string", "address": "object", "description": "string", "image": "url",
            "url": "url", "telephone": "string", "geo": "object",
        },
    ),
    "Product": TypeRules(
        required=("name",),
        recommended=("description", "image", "offers", "category", "brand", "aggregateRating"),
        properties={
            "name": "string", "description": "string", "image": "url", "url": "url",
            "category": "string", "brand": "object", "offers": "object",
            "aggregateRating": "object", "priceRange": "string",
        },
    ),
    "Service": TypeRules(
        required=("name", "provider"),
        recommended=("description", "image", "offers", "serviceType"),
        properties={
            "name": "string", "provider": "object", "description": "string", "image": "url",
            "serviceType": "string", "url": "url", "offers": "object", "areaServed": "object",
        },
    ),
    "JobPosting": TypeRules(
        required=("title", "hiringOrganization"),
        recommended=("description", "datePosted", "employmentType", "jobLocation"),
        properties={
            "title": "string", "hiringOrganization": "object", "description": "string",
            "datePosted": "date", "employmentType": "string", "jobLocation": "object",
            "salaryCurrency": "string",
        },
    ),
    "Restaurant": TypeRules(
        required=("name", "address"),
        recommended=("telephone", "description", "image", "priceRange", "servesCuisine", "menu"),
        properties={
            "name": "string", "address": "object", "telephone": "string", "description": "string",
            "image": "url", "priceRange": "string", "servesCuisine": "string", "menu": "url",
            "acceptsReservations": "boolean",
        },
    ),
    "Event": TypeRules(
        required=("name", "startDate"),
        recommended=("description", "endDate", "location", "offers", "image", "url", "eventStatus"),
        properties={
            "name": "string", "startDate": "date", "endDate": "date", "location": "object",
            "description": "string", "image": "url", "url": "url", "offers": "object",
            "eventStatus": "string",
        },
    ),
    "BusinessEvent": TypeRules(
        required=("name", "startDate"),
        recommended=("description", "endDate", "location", "organizer", "image"),
        properties={
            "name": "string", "startDate": "date", "endDate": "date", "description": "string",
            "location": "object", "organizer": "object", "image": "url",
        },
    ),
    "Article": TypeRules(
        required=("headline", "image", "datePublished", "author"),
        recommended=("dateModified", "publisher", "description"),
        properties={
            "headline": "string", "image": "url", "datePublished": "date", "dateModified": "date",
            "author": "object", "publisher": "object", "description": "string",
        },
    ),
    "QAPage": TypeRules(
        required=("mainEntity",),
        recommended=("name",),
        properties={"mainEntity": "array", "name": "string"},
    ),
    "WebSite": TypeRules(
        required=("name",),
        recommended=("url", "potentialAction"),
        properties={"name": "string", "url": "url", "potentialAction": "object"},
    ),
    "BreadcrumbList": TypeRules(
        required=("itemListElement",),
        recommended=(),
        properties={"itemListElement": "array"},
    ),
    "VideoObject": TypeRules(
        required=("name", "thumbnailUrl", "uploadDate"),
        recommended=("description", "contentUrl", "embedUrl", "duration", "inLanguage"),
        properties={
            "name": "string", "thumbnailUrl": "url", "uploadDate": "date", "description": "string",
            "contentUrl": "url", "embedUrl": "url", "duration": "string", "inLanguage": "string",
        },
    ),
    "ImageObject": TypeRules(
        required=("url",),
        recommended=("width", "height", "caption"),
        properties={"url": "url", "width": "number", "height": "number", "caption": "string"},
    ),
    "ItemList": TypeRules(
        required=("itemListElement",),
        recommended=("name",),
        properties={"itemListElement": "array", "name": "string"},
    ),
    "PostalAddress": TypeRules(
        required=("streetAddress", "postalCode", "addressLocality"),
        recommended=(),
        properties={"streetAddress": "string", "postalCode": "string", "addressLocality": "string"},
    ),
    "GeoCoordinates": TypeRules(
        required=("latitude", "longitude"),
        recommended=(),
        properties={"latitude": "number", "longitude": "number"},
    ),
    "Offer": TypeRules(
        required=("name",),
        recommended=("price", "priceCurrency", "availability", "url"),
        properties={
            "name": "string", "price": "number", "priceCurrency": "string",
            "availability": "string", "url": "url",
        },
    ),
}

# Official property vocabularies used to flag non-standard properties
SCHEMA_ORG_PROPERTIES: dict[str, frozenset[str]] = {
    name: frozenset(props)
    for name, props in {
        "Question": ("acceptedAnswer", "answerCount", "author", "dateCreated", "dateModified",
                     "datePublished", "name", "text", "suggestedAnswer", "upvoteCount", "downvoteCount"),
        "Answer": ("text", "author", "dateCreated", "dateModified", "datePublished",
                   "upvoteCount", "downvoteCount", "url"),
        "FAQPage": ("mainEntity", "name", "description", "url", "breadcrumb", "inLanguage"),
        "Hotel": ("name", "description", "image", "address", "telephone", "email", "url", "priceRange",
                  "starRating", "aggregateRating", "amenityFeature", "checkinTime", "checkoutTime",
                  "petsAllowed", "numberOfRooms", "geo", "sameAs"),
        "PostalAddress": ("streetAddress", "addressLocality", "addressRegion", "postalCode", "addressCountry"),
        "Rating": ("ratingValue", "bestRating", "worstRating", "ratingCount", "reviewCount"),
        "AggregateRating": ("ratingValue", "bestRating", "worstRating", "ratingCount", "reviewCount"),
        "Review": ("author", "datePublished", "reviewBody", "reviewRating", "itemReviewed"),
        "Organization": ("name", "url", "logo", "sameAs", "contactPoint", "address", "telephone", "email"),
        "Person": ("name", "url", "image", "sameAs", "jobTitle", "worksFor"),
        "BreadcrumbList": ("itemListElement",),
        "ListItem": ("position", "name", "item"),
        "WebPage": ("name", "url", "description", "inLanguage", "isPartOf", "breadcrumb",
                    "datePublished", "dateModified"),
        "WebSite": ("name", "url", "description", "potentialAction"),
        "ImageObject": ("url", "width", "height", "caption", "contentUrl"),
        "HowTo": ("name", "description", "image", "step", "totalTime", "tool", "supply"),
        "HowToStep": ("name", "text", "url", "image", "position"),
        "Place": ("name", "address", "geo", "url", "telephone", "image"),
        "GeoCoordinates": ("latitude", "longitude", "elevation"),
    }.items()
}

_KEYWORDS = frozenset({"@context", "@type", "@id"})


@dataclass(frozen=True)
class ValidationIssue:
    property: str
    kind: str  # "required", "recommended", "format", "non-standard" or "unknown-type"
    message: str
    docs: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"property": self.property, "kind": self.kind, "message": self.message, "docs": self.docs}


@dataclass
class SchemaValidation:
    """Outcome of validating one candidate against its type's rules."""
    schema_type: str
    is_valid: bool = True
    issues: list[ValidationIssue] = field(default_factory=list)
    recommendations: list[ValidationIssue] = field(default_factory=list)
    non_standard: list[ValidationIssue] | None = None

    @property
    def docs(self) -> str:
        return f"{SCHEMA_ORG}{self.schema_type}" if self.schema_type in VALIDATION_RULES else ""

    @property
    def missing_required(self) -> list[str]:
        return [i.property for i in self.issues if i.kind == "required"]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "schema_type": self.schema_type,
            "is_valid": self.is_valid,
            "docs": self.docs,
            "issues": [i.to_dict() for i in self.issues],
            "recommendations": [r.to_dict() for r in self.recommendations],
        }
        if self.non_standard is not None:
            data["non_standard"] = [w.to_dict() for w in self.non_standard]
        return data


def _lookup(schema: ExtractedSchema, prop: str) -> Any:
    value = schema.get(prop)
    return schema.get("@" + prop) if value is None else value


def is_valid_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc or parsed.path)


def is_valid_number(value: Any) -> bool:
    if isinstance(value, bool):
        return True
    try:
        return not math.isnan(float(value))
    except (TypeError, ValueError):
        return False


def is_valid_date(value: str) -> bool:
    return bool(_DATE.match(value))


def is_valid_time(value: str) -> bool:
    return bool(_TIME_HM.match(value) or _TIME_HMS.match(value))


def _format_problem(kind: str, value: Any) -> str | None:
    """Name of the violated format, or None when ``value`` fits ``kind``."""
    if isinstance(value, list):
        if not value:
            return None
        value = value[0]
    # Nested objects (ImageObject, Offer, ...) are not checked against scalar formats
    if isinstance(value, dict):
        return None

    if kind == "url" and not is_valid_url(str(value)):
        return "URL"
    if kind == "number" and not is_valid_number(value):
        return "number"
    if kind == "date" and not is_valid_date(str(value)):
        return "date"
    if kind == "time" and not is_valid_time(str(value)):
        return "time"
    return None


def detect_non_standard_properties(schema: ExtractedSchema, schema_type: str) -> list[ValidationIssue]:
    """Flag properties outside the official vocabulary of ``schema_type``, recursing into typed children.

    Types without a known vocabulary are skipped.
    """
    vocabulary = SCHEMA_ORG_PROPERTIES.get(schema_type)
    if vocabulary is None:
        return []

    warnings = []
    for prop, value in schema.items():
        if prop in _KEYWORDS:
            continue
        if prop not in vocabulary:
            warnings.append(ValidationIssue(
                property=prop,
                kind="non-standard",
                message=f'Non-standard property "{prop}" is not in the Schema.org vocabulary for {schema_type}',
            ))

        children = value if isinstance(value, list) else [value]
        for child in children:
            if isinstance(child, dict) and child.get("@type"):
                warnings.extend(detect_non_standard_properties(child, primary_type(normalize_type(child["@type"]))))
    return warnings


def validate_schema(
    schema: ExtractedSchema,
    schema_type: str,
    check_non_standard: bool = False,
) -> SchemaValidation:
    """Validate ``schema`` against the rules of ``schema_type``.

    Missing required properties make the candidate invalid; missing
    recommended properties and format problems are reported without
    changing validity. An unknown type is itself an invalidating issue.
    """
    validation = SchemaValidation(schema_type=schema_type)
    if check_non_standard:
        validation.non_standard = detect_non_standard_properties(schema, schema_type)

    rules = VALIDATION_RULES.get(schema_type)
    if rules is None:
        validation.is_valid = False
        validation.issues.append(ValidationIssue(
            property="@type",
            kind="unknown-type",
            message=f"Unknown schema type: {schema_type}",
        ))
        return validation

    for prop in rules.required:
        if _lookup(schema, prop) is None:
            validation.is_valid = False
            validation.issues.append(ValidationIssue(
                property=prop,
                kind="required",
                message=f"Missing required property: {prop}",
                docs=f"{SCHEMA_ORG}{prop}",
            ))

    for prop in rules.recommended:
        if _lookup(schema, prop) is None:
            validation.recommendations.append(ValidationIssue(
                property=prop,
                kind="recommended",
                message=f"Consider adding recommended property: {prop}",
                docs=f"{SCHEMA_ORG}{prop}",
            ))

    for prop, kind in rules.properties.items():
        value = _lookup(schema, prop)
        if value is None:
            continue
        problem = _format_problem(kind, value)
        if problem:
            validation.issues.append(ValidationIssue(
                property=prop,
                kind="format",
                message=f"Invalid {problem} format for property: {prop}",
                docs=f"{SCHEMA_ORG}{prop}",
            ))

    return validation
