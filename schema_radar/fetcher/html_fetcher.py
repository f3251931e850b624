"""Static HTML fetching with SSRF protection, size caps and manual redirects."""
from __future__ import annotations

import socket
from dataclasses import dataclass
from ipaddress import ip_address
from urllib.parse import urljoin, urlparse

import requests
import structlog

from schema_radar.config.settings import DEFAULT_USER_AGENT, FetcherSettings
from schema_radar.errors import (
    ErrorCategory,
    FetchError,
    InvalidURLError,
    categorize_exception,
    category_for_status,
)

logger = structlog.get_logger(__name__)

CHUNK_SIZE = 8192

ENHANCED_HEADERS = {
    "User-Agent": DEFAULT_USER_AGENT,
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,"
        "image/apng,*/*;q=0.8,application/signed-exchange;v=b3;q=0.7"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "sec-ch-ua": '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"Windows"',
    "sec-fetch-site": "none",
    "sec-fetch-mode": "navigate",
    "sec-fetch-user": "?1",
    "sec-fetch-dest": "document",
    "upgrade-insecure-requests": "1",
    "dnt": "1",
    "cache-control": "max-age=0",
}

MINIMAL_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.8",
}


@dataclass(frozen=True)
class StaticPage:
    """Server-delivered markup and the URL it was finally served from."""
    html: str
    final_url: str
    status_code: int
    content_type: str = ""


def build_headers(enhanced: bool) -> dict[str, str]:
    return dict(ENHANCED_HEADERS if enhanced else MINIMAL_HEADERS)


def _is_url(source: str) -> bool:
    try:
        parsed = urlparse(source)
    except ValueError:
        return False
    return parsed.scheme in {"http", "https"}


def _validate_ip(ip_str: str) -> tuple[bool, str]:
    """Check if an IP address is safe (not private/internal)."""
    try:
        ip = ip_address(ip_str)
        if ip.is_private or ip.is_loopback or ip.is_reserved or ip.is_link_local or ip.is_unspecified:
            return False, f"Access to private/internal IP addresses is forbidden: {ip_str}"
        return True, ""
    except ValueError:
        return False, f"Invalid IP address: {ip_str}"


def _resolve_and_validate_url(url: str) -> tuple[str, str]:
    """
    Resolve URL hostname to IP and validate it's safe.
    Returns (resolved_ip, hostname).

    Raises:
        InvalidURLError: malformed URL, bad scheme, missing or unencodable hostname,
            or a private/internal target
        FetchError: the hostname does not resolve (DNS category)
    """
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise InvalidURLError(f"Invalid URL: {exc}") from exc

    if parsed.scheme not in {"http", "https"}:
        raise InvalidURLError("Only http and https schemes are allowed")

    hostname = parsed.hostname
    if not hostname:
        raise InvalidURLError("Invalid URL: hostname not found")

    try:
        resolved_ip = socket.gethostbyname(hostname)
    except socket.gaierror as exc:
        raise FetchError(f"Could not resolve hostname: {hostname}", category=ErrorCategory.DNS) from exc
    except UnicodeError as exc:
        # IDNA encoding rejects empty or oversized labels such as "a..com"
        raise InvalidURLError(f"Invalid URL: hostname {hostname!r} cannot be encoded") from exc

    is_safe, error_msg = _validate_ip(resolved_ip)
    if not is_safe:
        raise InvalidURLError(f"SSRF protection: {error_msg}")

    return resolved_ip, hostname


def _check_declared_size(response: requests.Response, max_size: int) -> None:
    content_length = response.headers.get("Content-Length")
    if content_length and content_length.isdigit() and int(content_length) > max_size:
        response.close()
        raise FetchError(
            f"Response too large: {int(content_length)} bytes (max {max_size})",
            category=ErrorCategory.RESPONSE_TOO_LARGE,
        )


def _read_body(response: requests.Response, max_size: int) -> str:
    """Read content with a size limit (for cases without Content-Length header)."""
    chunks = []
    total_size = 0
    for chunk in response.iter_content(chunk_size=CHUNK_SIZE, decode_unicode=False):
        total_size += len(chunk)
        if total_size > max_size:
            response.close()
            raise FetchError(
                f"Response too large: exceeded {max_size} bytes",
                category=ErrorCategory.RESPONSE_TOO_LARGE,
            )
        chunks.append(chunk)

    content_bytes = b"".join(chunks)
    encoding = response.encoding or "utf-8"
    try:
        return content_bytes.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        return content_bytes.decode("utf-8", errors="replace")


def _get(url: str, headers: dict[str, str], settings: FetcherSettings) -> requests.Response:
    return requests.get(
        url,
        headers=headers,
        timeout=settings.request_timeout,
        allow_redirects=False,  # Redirect targets are validated one by one
        stream=True,
    )


def fetch_static(source: str, settings: FetcherSettings | None = None) -> StaticPage:
    """
    Fetch raw, server-delivered HTML from a URL.

    - Only accepts http/https URLs (no local file paths)
    - Validates resolved IPs are not private/internal unless disabled in settings
    - Follows up to ``max_redirects`` redirects manually, validating each target
    - Limits response size to prevent memory exhaustion

    Raises:
        InvalidURLError: malformed or disallowed URL
        FetchError: transport or upstream HTTP failure, with its ErrorCategory
    """
    settings = settings or FetcherSettings()

    if not _is_url(source):
        raise InvalidURLError("Only http and https URLs are allowed")

    headers = build_headers(settings.enhanced_bot_bypass)
    current_url = source

    try:
        if settings.block_private_networks:
            _resolve_and_validate_url(current_url)

        response = _get(current_url, headers, settings)
        _check_declared_size(response, settings.max_response_size)

        redirect_count = 0
        while response.is_redirect and redirect_count < settings.max_redirects:
            redirect_count += 1
            location = response.headers.get("Location", "")
            if not location:
                break

            redirect_url = urljoin(current_url, location)
            if settings.block_private_networks:
                _resolve_and_validate_url(redirect_url)

            logger.debug("redirect_followed", from_url=current_url, to_url=redirect_url)
            response.close()
            response = _get(redirect_url, headers, settings)
            current_url = redirect_url
            _check_declared_size(response, settings.max_response_size)

        if response.is_redirect and redirect_count >= settings.max_redirects:
            response.close()
            raise FetchError(f"Exceeded {settings.max_redirects} redirects", category=ErrorCategory.OTHER)

        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            response.close()
            status = response.status_code
            raise FetchError(
                f"HTTP {status} for {current_url}",
                category=category_for_status(status),
                status_code=status,
            ) from exc

        content_type = response.headers.get("Content-Type", "")
        html = _read_body(response, settings.max_response_size)
    except requests.RequestException as exc:
        raise FetchError(str(exc), category=categorize_exception(exc)) from exc
    except ValueError as exc:
        # Malformed redirect targets and hostnames the IDNA codec rejects
        raise InvalidURLError(f"Invalid URL: {exc}") from exc

    logger.debug("static_fetch_complete", url=source, final_url=current_url, size=len(html))
    return StaticPage(
        html=html,
        final_url=current_url,
        status_code=response.status_code,
        content_type=content_type,
    )
