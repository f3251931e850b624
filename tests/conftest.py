"""Shared test fixtures and configuration."""
from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from schema_radar.config.settings import Settings


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def base_url() -> str:
    """Return the URL fixture pages are pretended to live at."""
    return "https://example.com/stay/"


@pytest.fixture
def hotel_json_ld_html() -> str:
    """Return a page with an @graph JSON-LD block and a broken sibling block."""
    return """<!DOCTYPE html>
<html lang="en">
<head>
    <title>Sea View Hotel</title>
    <script type="application/ld+json">
    {
        "@context": "https://schema.org",
        "@graph": [
            {"@type": ["Hotel", "LodgingBusiness"], "name": "Sea View Hotel"},
            {"@type": "FAQPage", "mainEntity": []}
        ]
    }
    </script>
    <script type="application/ld+json">{ this is not json at all</script>
</head>
<body><h1>Sea View Hotel</h1></body>
</html>"""


@pytest.fixture
def microdata_html() -> str:
    """Return a page with a Hotel item containing a nested PostalAddress item."""
    return """<!DOCTYPE html>
<html>
<head><title>Microdata</title></head>
<body>
<div itemscope itemtype="https://schema.org/Hotel">
    <span itemprop="name">  Sea   View
        Hotel </span>
    <div itemprop="address" itemscope itemtype="https://schema.org/PostalAddress">
        <span itemprop="streetAddress">1 Beach Road</span>
        <span itemprop="addressLocality">Brighton</span>
    </div>
    <a itemprop="url" href="/hotel">Website</a>
    <img itemprop="image" src="images/front.jpg" alt="Front">
    <span itemprop="telephone" content="+44 1234 567890">Call us</span>
    <span itemprop="amenityFeature">Pool</span>
    <span itemprop="amenityFeature">Spa</span>
</div>
</body>
</html>"""


@pytest.fixture
def rdfa_html() -> str:
    """Return a page with an RDFa Hotel that contains a nested typed element."""
    return """<!DOCTYPE html>
<html>
<head><title>RDFa</title></head>
<body>
<div vocab="https://schema.org/" typeof="Hotel">
    <span property="name">Sea View Hotel</span>
    <div property="address" typeof="PostalAddress">
        <span property="streetAddress">1 Beach Road</span>
    </div>
</div>
</body>
</html>"""


@pytest.fixture
def mixed_html() -> str:
    """Return a page carrying JSON-LD, Microdata and RDFa together."""
    return """<!DOCTYPE html>
<html>
<head>
    <script type="application/ld+json">{"@context": "https://schema.org", "@type": "Organization", "name": "Acme"}</script>
</head>
<body>
    <div itemscope itemtype="https://schema.org/Product"><span itemprop="name">Lamp</span></div>
    <div typeof="schema:Review"><span property="schema:reviewBody">Bright.</span></div>
</body>
</html>"""


@pytest.fixture
def settings() -> Settings:
    """Return default settings with the inter-request delay disabled."""
    s = Settings()
    s.crawler.delay_between_requests = 0
    return s


@pytest.fixture
def make_response():
    """Return a factory for MagicMocks shaped like a streamed ``requests.Response``."""

    def _make(
        body: bytes = b"",
        status_code: int = 200,
        headers: dict | None = None,
        is_redirect: bool = False,
    ) -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        response.is_redirect = is_redirect
        response.headers = headers or {}
        response.encoding = "utf-8"
        response.iter_content.return_value = iter([body] if body else [])
        response.close = MagicMock()
        return response

    return _make
