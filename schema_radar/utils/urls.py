"""URL helpers shared by the extractors and the crawler."""
from __future__ import annotations

from urllib.parse import urljoin, urlparse, urlunparse


def is_absolute_http_url(url: str) -> bool:
    try:
        parsed = urlparse(url or "")
    except ValueError:
        return False
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def absolutize(url: str, base: str) -> str:
    """Resolve ``url`` against ``base``; return it unchanged if that fails."""
    if not url:
        return url
    try:
        return urljoin(base, url)
    except ValueError:
        return url


def normalize_url(url: str, remove_query: bool = False) -> str:
    """Normalize a URL for comparison.

    Lower-cases the hostname, strips a trailing slash from non-root paths,
    drops the fragment and optionally the query string. Unparseable input
    is returned as-is.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    if not parsed.scheme or not parsed.netloc:
        return url

    path = parsed.path or "/"
    if path != "/" and path.endswith("/"):
        path = path[:-1]

    return urlunparse((
        parsed.scheme.lower(),
        parsed.netloc.lower(),
        path,
        parsed.params,
        "" if remove_query else parsed.query,
        "",
    ))


def deduplicate_urls(urls: list[str], remove_query: bool = False) -> list[str]:
    """Drop URLs whose normalized form was already seen, keeping the first original."""
    seen: dict[str, str] = {}
    for url in urls:
        key = normalize_url(url, remove_query)
        if key not in seen:
            seen[key] = url
    return list(seen.values())


def is_same_domain(url1: str, url2: str) -> bool:
    try:
        host1 = urlparse(url1).hostname
        host2 = urlparse(url2).hostname
    except ValueError:
        return False
    return bool(host1) and host1 == host2


def get_base_url(url: str) -> str | None:
    """Return ``scheme://host[:port]`` for a URL, or None when it has no host."""
    try:
        parsed = urlparse(url)
        port = parsed.port
    except ValueError:
        return None
    if not parsed.scheme or not parsed.hostname:
        return None
    host = f"[{parsed.hostname}]" if ":" in parsed.hostname else parsed.hostname
    return f"{parsed.scheme}://{host}" + (f":{port}" if port else "")


class VisitedTracker:
    """Tracks visited URLs, ignoring query strings, to prevent crawl loops."""

    def __init__(self):
        self._visited: set[str] = set()

    def has_visited(self, url: str) -> bool:
        return normalize_url(url, remove_query=True) in self._visited

    def mark_visited(self, url: str) -> None:
        self._visited.add(normalize_url(url, remove_query=True))

    def __len__(self) -> int:
        return len(self._visited)

    @property
    def visited(self) -> list[str]:
        return sorted(self._visited)

    def clear(self) -> None:
        self._visited.clear()
