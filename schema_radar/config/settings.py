"""Centralized configuration settings."""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class FetcherSettings:
    """Settings for the static HTML fetcher."""
    request_timeout: int = 15  # seconds
    probe_timeout: int = 6  # seconds, robots/sitemap-style probes
    max_response_size: int = 10 * 1024 * 1024  # 10 MB
    max_redirects: int = 5
    enhanced_bot_bypass: bool = False
    block_private_networks: bool = True


@dataclass
class RenderSettings:
    """Settings for headless-browser rendering."""
    enabled: bool = False
    navigation_timeout_ms: int = 30000
    selector_timeout_ms: int = 5000
    settle_delay_ms: int = 5000
    viewport_width: int = 1920
    viewport_height: int = 1080
    user_agent: str = DEFAULT_USER_AGENT
    # Also fetch the static HTML after a successful render, for JS-dependency estimates
    compare_static: bool = True


@dataclass
class CrawlerSettings:
    """Settings for multi-page discovery and analysis."""
    max_pages: int = 10
    delay_between_requests: float = 1.0  # seconds


@dataclass
class ValidationSettings:
    """Settings for target-type validation."""
    non_standard_warnings: bool = False


@dataclass
class LoggingSettings:
    """Settings for structlog output."""
    level: str = "INFO"
    json_output: bool = False


@dataclass
class Settings:
    """Main application settings container.

    Instances are passed explicitly into the fetchers and the pipeline;
    use ``Settings.from_env()`` to build one from environment variables.
    """
    fetcher: FetcherSettings = field(default_factory=FetcherSettings)
    render: RenderSettings = field(default_factory=RenderSettings)
    crawler: CrawlerSettings = field(default_factory=CrawlerSettings)
    validation: ValidationSettings = field(default_factory=ValidationSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    debug: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``SCHEMA_RADAR_*`` environment variables."""
        env = os.environ if environ is None else environ
        settings = cls()

        settings.debug = _as_bool(env.get("SCHEMA_RADAR_DEBUG"))

        # Fetcher overrides
        if timeout := env.get("SCHEMA_RADAR_TIMEOUT_PAGE"):
            settings.fetcher.request_timeout = int(timeout)
        if probe_timeout := env.get("SCHEMA_RADAR_TIMEOUT_PROBE"):
            settings.fetcher.probe_timeout = int(probe_timeout)
        if max_length := env.get("SCHEMA_RADAR_MAX_CONTENT_LENGTH"):
            settings.fetcher.max_response_size = int(max_length)
        settings.fetcher.enhanced_bot_bypass = _as_bool(env.get("SCHEMA_RADAR_ENHANCED_BOT_BYPASS"))

        # Render overrides
        settings.render.enabled = _as_bool(env.get("SCHEMA_RADAR_ENABLE_JS_RENDERING"))
        if render_timeout := env.get("SCHEMA_RADAR_TIMEOUT_JS_RENDER"):
            settings.render.navigation_timeout_ms = int(render_timeout)

        settings.validation.non_standard_warnings = _as_bool(env.get("SCHEMA_RADAR_ENABLE_NON_STANDARD_WARNINGS"))

        # Logging overrides
        if level := env.get("SCHEMA_RADAR_LOG_LEVEL"):
            settings.logging.level = level.upper()
        settings.logging.json_output = _as_bool(env.get("SCHEMA_RADAR_LOG_JSON"))

        return settings


def _as_bool(value: str | None) -> bool:
    return (value or "").lower() in ("true", "1", "yes")
