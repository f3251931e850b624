"""Schema Radar exception hierarchy and user-facing error categories.

All errors inherit from SchemaRadarError. Transport and upstream failures
carry an ErrorCategory so callers can show a single human-readable message
instead of a raw exception.
"""
from __future__ import annotations

import socket
from enum import Enum

import requests


class ErrorCategory(Enum):
    """User-facing failure categories for a single analysis request."""
    INVALID_URL = "invalid_url"
    DNS = "dns"
    TIMEOUT = "timeout"
    CONNECTION = "connection"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    RESPONSE_TOO_LARGE = "response_too_large"
    INVALID_HTML = "invalid_html"
    OTHER = "other"


_USER_MESSAGES = {
    ErrorCategory.INVALID_URL: "Invalid URL. Please provide an absolute http or https URL.",
    ErrorCategory.DNS: "Unable to reach the URL. Please check the domain name.",
    ErrorCategory.TIMEOUT: "Request timed out. The website may be slow or unreachable.",
    ErrorCategory.CONNECTION: "Could not establish a secure connection to the website.",
    ErrorCategory.FORBIDDEN: "Access forbidden. The website may be blocking automated requests.",
    ErrorCategory.NOT_FOUND: "Page not found. Please check the URL.",
    ErrorCategory.RATE_LIMITED: "Too many requests to the target site. Please try again later.",
    ErrorCategory.SERVER_ERROR: "The target website is experiencing server errors.",
    ErrorCategory.RESPONSE_TOO_LARGE: "The page is too large to analyze.",
    ErrorCategory.INVALID_HTML: "Invalid HTML content.",
    ErrorCategory.OTHER: "An error occurred while analyzing the URL.",
}


class SchemaRadarError(Exception):
    """Base exception for all Schema Radar errors."""

    category = ErrorCategory.OTHER


class InvalidURLError(SchemaRadarError):
    """Malformed or disallowed URL, rejected before any fetch."""

    category = ErrorCategory.INVALID_URL


class FetchError(SchemaRadarError):
    """Transport or upstream HTTP failure on the static path."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.OTHER,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.status_code = status_code


class RenderError(SchemaRadarError):
    """Browser launch, navigation, or snapshot failure on the rendered path."""


def category_for_status(status_code: int) -> ErrorCategory:
    """Map an upstream HTTP status code to an error category."""
    if status_code == 403:
        return ErrorCategory.FORBIDDEN
    if status_code == 404:
        return ErrorCategory.NOT_FOUND
    if status_code == 429:
        return ErrorCategory.RATE_LIMITED
    if status_code >= 500:
        return ErrorCategory.SERVER_ERROR
    return ErrorCategory.OTHER


def _has_dns_cause(exc: BaseException) -> bool:
    seen = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        if "NameResolutionError" in type(current).__name__:
            return True
        if "Name or service not known" in str(current) or "getaddrinfo failed" in str(current):
            return True
        current = current.__cause__ or current.__context__
    return False


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """Map an arbitrary exception raised while fetching to an error category."""
    if isinstance(exc, SchemaRadarError):
        return exc.category
    if isinstance(exc, socket.gaierror):
        return ErrorCategory.DNS
    if isinstance(exc, requests.Timeout):
        return ErrorCategory.TIMEOUT
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return category_for_status(exc.response.status_code)
    if isinstance(exc, requests.exceptions.SSLError):
        return ErrorCategory.CONNECTION
    if isinstance(exc, requests.ConnectionError):
        return ErrorCategory.DNS if _has_dns_cause(exc) else ErrorCategory.CONNECTION
    if isinstance(exc, (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema)):
        return ErrorCategory.INVALID_URL
    return ErrorCategory.OTHER


def user_message(category: ErrorCategory, detail: str | None = None, debug: bool = False) -> str:
    """Return the human-readable message for an error category.

    In debug mode the raw detail of uncategorized errors is included.
    """
    if category is ErrorCategory.OTHER and debug and detail:
        return f"Development error: {detail}"
    return _USER_MESSAGES[category]
