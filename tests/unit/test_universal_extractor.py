"""Unit tests for the tolerant universal extractor."""
from __future__ import annotations

from unittest.mock import MagicMock

from playwright.sync_api import Error as PlaywrightError

from schema_radar.parser.universal import (
    ParseOutcome,
    extract_from_page,
    extract_raw_schema_blocks,
    normalize_schema_results,
    sanitize_json_ld,
    tolerant_json_parse,
)


class TestRawBlocks:
    """Tests for extract_raw_schema_blocks."""

    def test_script_with_keyword_found(self):
        html = '<script>{"@type": "Hotel"}</script><script>console.log(1)</script>'
        blocks = extract_raw_schema_blocks(html)

        assert len(blocks) == 1
        assert blocks[0].source == "script-tag"
        assert blocks[0].raw == '{"@type": "Hotel"}'
        assert blocks[0].location == 0

    def test_data_schema_attribute_found(self):
        html = """<div data-schema='{"@type": "Product", "name": "Lamp"}'></div>"""
        blocks = extract_raw_schema_blocks(html)

        assert [b.source for b in blocks] == ["data-attribute"]
        assert blocks[0].raw == '{"@type": "Product", "name": "Lamp"}'

    def test_hidden_div_found(self):
        html = '<div style="display: none">{"@type": "Event", "name": "Gala"}</div>'
        assert [b.source for b in extract_raw_schema_blocks(html)] == ["hidden-div"]

    def test_hidden_div_without_keyword_ignored(self):
        assert extract_raw_schema_blocks('<div style="display:none">menu</div>') == []


class TestSanitize:
    """Tests for sanitize_json_ld."""

    def test_entities_decoded(self):
        assert sanitize_json_ld("{&quot;a&quot;: 1}") == '{"a": 1}'

    def test_tags_and_comments_stripped(self):
        assert sanitize_json_ld('<!-- c -->{"a": "x<br/>y<b>z</b>"}') == '{"a": "x yz"}'

    def test_trailing_commas_and_bare_keys(self):
        assert sanitize_json_ld("{a: [1,],}") == '{"a": [1]}'


class TestTolerantJsonParse:
    """Tests for tolerant_json_parse strategy order."""

    def test_native_json(self):
        outcome = tolerant_json_parse('{"@type": "Hotel"}')
        assert outcome.ok is True
        assert outcome.method == "native-json"
        assert outcome.data == {"@type": "Hotel"}

    def test_sanitized_json(self):
        outcome = tolerant_json_parse('{name: "x", "@type": "Thing",}')
        assert outcome.method == "sanitized-json"
        assert outcome.data == {"name": "x", "@type": "Thing"}

    def test_entity_encoded_json(self):
        outcome = tolerant_json_parse("{&quot;@type&quot;: &quot;Hotel&quot;}")
        assert outcome.method == "sanitized-json"
        assert outcome.data == {"@type": "Hotel"}

    def test_graph_extraction(self):
        outcome = tolerant_json_parse('{"@graph": [{"@type": "A"}, {"@type": "B"}], oops}')
        assert outcome.method == "graph-extraction"
        assert outcome.data == {"@graph": [{"@type": "A"}, {"@type": "B"}]}

    def test_regex_object_extraction(self):
        content = 'var a = {"@type": "Product", "name": "Lamp"}; var b = {"@type": "Offer", "price": "9"};'
        outcome = tolerant_json_parse(content)

        assert outcome.method == "regex-object-extraction"
        assert outcome.data == [
            {"@type": "Product", "name": "Lamp"},
            {"@type": "Offer", "price": "9"},
        ]

    def test_single_regex_object_unwrapped(self):
        outcome = tolerant_json_parse('window.x = {"@type": "Product"} + junk(')
        assert outcome.data == {"@type": "Product"}

    def test_all_failed(self):
        outcome = tolerant_json_parse("not json at all")
        assert outcome.ok is False
        assert outcome.method == "all-failed"
        assert outcome.error


class TestNormalizeSchemaResults:
    """Tests for normalize_schema_results."""

    def test_graph_and_arrays_flattened(self):
        outcomes = [
            ParseOutcome(ok=True, data={"@graph": [{"@type": "A"}, {"@type": "B"}]}),
            ParseOutcome(ok=True, data=[{"@type": "C"}]),
        ]
        assert [s["@type"] for s in normalize_schema_results(outcomes)] == ["A", "B", "C"]

    def test_duplicates_dropped(self):
        outcomes = [ParseOutcome(ok=True, data={"@type": "A", "name": "x"})] * 2
        assert normalize_schema_results(outcomes) == [{"@type": "A", "name": "x"}]

    def test_untyped_single_object_dropped(self):
        assert normalize_schema_results([ParseOutcome(ok=True, data={"name": "x"})]) == []

    def test_types_normalized(self):
        outcomes = [ParseOutcome(ok=True, data={"@type": ["Hotel", "LodgingBusiness"]})]
        assert normalize_schema_results(outcomes) == [{"@type": "Hotel,LodgingBusiness"}]


class TestExtractFromPage:
    """Tests for extract_from_page with a mocked Playwright page."""

    def _page(self):
        page = MagicMock()
        main = MagicMock(name="main_frame")
        blocked = MagicMock(name="cross_origin_frame")
        blocked.content.side_effect = PlaywrightError("cross-origin frame")
        child = MagicMock(name="child_frame")
        child.content.return_value = '<script>{"@type": "Event"}</script>'

        page.content.return_value = '<script type="application/ld+json">{"@type": "Hotel"}</script>'
        page.main_frame = main
        page.frames = [main, blocked, child]
        page.evaluate.return_value = ['<script>{"@type": "FAQPage"}</script>']
        return page

    def test_scans_frames_and_shadow_roots(self):
        """Main document, readable child frames and shadow roots all contribute."""
        types = [s["@type"] for s in extract_from_page(self._page())]
        assert types == ["Hotel", "Event", "FAQPage"]

    def test_empty_child_frame_contributes_nothing(self):
        page = self._page()
        page.frames[2].content.return_value = ""

        assert [s["@type"] for s in extract_from_page(page)] == ["Hotel", "FAQPage"]

    def test_main_document_sources_combined(self):
        """Script tags and data-schema attributes in the main document both count."""
        page = MagicMock()
        page.content.return_value = """
        <script type="application/ld+json">{"@type": "Organization", "name": "Acme"}</script>
        <div data-schema='{"@type": "Product", "name": "Lamp"}'></div>
        """
        page.frames = [page.main_frame]
        page.evaluate.return_value = []

        assert [s["@type"] for s in extract_from_page(page)] == ["Organization", "Product"]

    def test_blank_page(self):
        page = MagicMock()
        page.content.return_value = ""
        page.frames = []
        page.evaluate.return_value = None

        assert extract_from_page(page) == []

    def test_shadow_root_failure_skipped(self):
        page = self._page()
        page.evaluate.side_effect = PlaywrightError("evaluate failed")

        assert [s["@type"] for s in extract_from_page(page)] == ["Hotel", "Event"]
