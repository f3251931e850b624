"""Run all structured-data extractors over one HTML document."""
from __future__ import annotations

from dataclasses import dataclass, field

from bs4 import BeautifulSoup

from schema_radar.parser.jsonld import extract_json_ld
from schema_radar.parser.microdata import extract_microdata
from schema_radar.parser.normalizer import (
    ExtractedSchema,
    matches_target_schemas,
    normalize_type,
    primary_type,
    schema_key,
)
from schema_radar.parser.rdfa import extract_rdfa
from schema_radar.parser.validator import validate_schema


@dataclass
class ExtractionResult:
    """Candidates per syntax, in document order."""
    json_ld: list[ExtractedSchema] = field(default_factory=list)
    microdata: list[ExtractedSchema] = field(default_factory=list)
    rdfa: list[ExtractedSchema] = field(default_factory=list)

    @property
    def schemas(self) -> list[ExtractedSchema]:
        """All candidates in (JSON-LD, Microdata, RDFa) order."""
        return [*self.json_ld, *self.microdata, *self.rdfa]

    def labelled(self) -> list[tuple[str, ExtractedSchema]]:
        return [
            *(("JSON-LD", s) for s in self.json_ld),
            *(("Microdata", s) for s in self.microdata),
            *(("RDFa", s) for s in self.rdfa),
        ]


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def extract_all(html: str, base_url: str = "") -> ExtractionResult:
    """Parse ``html`` once and run the JSON-LD, Microdata and RDFa extractors."""
    soup = parse_html(html)
    return ExtractionResult(
        json_ld=extract_json_ld(soup),
        microdata=extract_microdata(soup, base_url),
        rdfa=extract_rdfa(soup, base_url),
    )


def merge_schemas(
    primary: list[ExtractedSchema],
    extra: list[ExtractedSchema],
) -> list[ExtractedSchema]:
    """Append ``extra`` candidates not already present in ``primary``."""
    seen = {schema_key(s) for s in primary}
    merged = list(primary)
    for schema in extra:
        key = schema_key(schema)
        if key not in seen:
            seen.add(key)
            merged.append(schema)
    return merged


def match_target_schemas(
    labelled: list[tuple[str, ExtractedSchema]],
    check_non_standard: bool = False,
) -> list[dict]:
    """Candidates whose ``@type`` matches a target Schema.org type, with their validation.

    A multi-type candidate is validated against its first type.
    """
    matched = []
    for index, (source, schema) in enumerate(labelled):
        schema_type = normalize_type(schema.get("@type"))
        if schema_type and matches_target_schemas(schema_type):
            validation = validate_schema(schema, primary_type(schema_type), check_non_standard)
            matched.append({
                "type": schema_type,
                "source_index": index,
                "source": source,
                "data": schema,
                "validation": validation.to_dict(),
            })
    return matched
