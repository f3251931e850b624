"""Unit tests for JSON-LD extraction."""
from __future__ import annotations

from bs4 import BeautifulSoup

from schema_radar.parser.jsonld import (
    extract_json_ld,
    flatten_candidates,
    parse_json_ld_payload,
)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def _script(payload: str, mime: str = "application/ld+json") -> str:
    return f'<html><head><script type="{mime}">{payload}</script></head><body></body></html>'


class TestExtractJsonLd:
    """Tests for extract_json_ld."""

    def test_graph_flattened(self, hotel_json_ld_html):
        """Each @graph member becomes its own candidate; the broken sibling is skipped."""
        results = extract_json_ld(_soup(hotel_json_ld_html))

        assert [r["@type"] for r in results] == ["Hotel,LodgingBusiness", "FAQPage"]
        assert results[0]["name"] == "Sea View Hotel"

    def test_malformed_block_does_not_abort(self):
        """A malformed block is dropped while its valid neighbours survive."""
        html = (
            '<script type="application/ld+json">{"@type": "Organization", "name": "Acme"</script>'
            '<script type="application/ld+json">{"@type": "WebSite", "name": "Acme"}</script>'
        )
        results = extract_json_ld(_soup(html))
        assert results == [{"@type": "WebSite", "name": "Acme"}]

    def test_empty_type_array_yields_string(self):
        results = extract_json_ld(_soup(_script('{"@type": [], "name": "X"}')))
        assert results == [{"@type": "", "name": "X"}]
        assert isinstance(results[0]["@type"], str)

    def test_comma_word_colon_inside_string_is_lost(self):
        """Key repair runs before the strict parse, so text like ", word:" inside a
        string value is rewritten and the otherwise valid block is dropped.
        """
        payload = '{"@type":"Hotel","description":"Rooms, pools: and more"}'
        assert extract_json_ld(_soup(_script(payload))) == []

    def test_unquoted_keys_and_trailing_comma_recovered(self):
        """Common authoring slips are repaired before parsing."""
        payload = '{"@context": "https://schema.org", "@type": "Hotel", name: "Sea View",}'
        results = extract_json_ld(_soup(_script(payload)))
        assert results == [{"@context": "https://schema.org", "@type": "Hotel", "name": "Sea View"}]

    def test_top_level_array_flattened(self):
        payload = '[{"@type": "Organization"}, {"@type": "WebSite"}]'
        results = extract_json_ld(_soup(_script(payload)))
        assert [r["@type"] for r in results] == ["Organization", "WebSite"]

    def test_mime_type_case_insensitive(self):
        """The script type attribute is compared case-insensitively."""
        results = extract_json_ld(_soup(_script('{"@type": "Event"}', mime=" Application/LD+JSON ")))
        assert results == [{"@type": "Event"}]

    def test_other_script_types_ignored(self):
        html = '<script type="application/json">{"@type": "Event"}</script><script>var a = 1;</script>'
        assert extract_json_ld(_soup(html)) == []

    def test_empty_script_skipped(self):
        assert extract_json_ld(_soup(_script("   "))) == []

    def test_document_order_preserved(self):
        html = (
            '<script type="application/ld+json">{"@type": "B"}</script>'
            '<p>between</p>'
            '<script type="application/ld+json">{"@type": "A"}</script>'
        )
        assert [r["@type"] for r in extract_json_ld(_soup(html))] == ["B", "A"]

    def test_broken_document_with_flat_graph_recovered(self):
        """A flat @graph array is recovered from an otherwise unparseable payload."""
        payload = (
            '{"@context": "https://schema.org", "@graph": '
            '[{"@type": "Organization", "name": "Acme"}, {"@type": "WebSite", "name": "Acme"}], '
            '"publisher": }'
        )
        results = extract_json_ld(_soup(_script(payload)))
        assert [r["@type"] for r in results] == ["Organization", "WebSite"]


class TestParseJsonLdPayload:
    """Tests for parse_json_ld_payload."""

    def test_valid_payload(self):
        assert parse_json_ld_payload('{"@type": "Hotel"}') == ({"@type": "Hotel"}, "")

    def test_garbage_reports_error(self):
        data, error = parse_json_ld_payload("{ nope")
        assert data is None
        assert error.startswith("Malformed JSON-LD")

    def test_graph_recovery_wrapped(self):
        data, error = parse_json_ld_payload('{"@graph": [{"@type": "A"}], oops}')
        assert error == ""
        assert data == {"@graph": [{"@type": "A"}]}


class TestFlattenCandidates:
    """Tests for flatten_candidates."""

    def test_non_objects_dropped(self):
        assert flatten_candidates([1, {"@type": "A"}, "x", None]) == [{"@type": "A"}]

    def test_single_object(self):
        assert flatten_candidates({"@type": "A"}) == [{"@type": "A"}]

    def test_scalar_yields_nothing(self):
        assert flatten_candidates("text") == []
