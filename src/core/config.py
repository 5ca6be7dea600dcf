"""Core configuration.

- Centralizes environment variables (pydantic-settings) without polluting the CLI.
- Adapters read the same `AppSettings` so every request behaves the same way.

Only environment variables are read (prefix `CHROMIUM_DL_`); there is no
configuration file.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import DownloadTarget
from core.domain.platform import Platform, detect_platform

APP_NAME = "chromium-downloader"
APP_VERSION = "1.0.0"

DEFAULT_BASE_URL = "http://commondatastorage.googleapis.com/chromium-browser-continuous"


class AppSettings(BaseSettings):
    """Application settings.

    Defaults reproduce the fixed behaviour of the tool: official snapshot
    bucket, host platform, platform archive name, no timeout.
    """

    model_config = SettingsConfigDict(
        env_prefix="CHROMIUM_DL_",
        extra="ignore",
        case_sensitive=False,
    )

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        min_length=1,
        description="Root of the snapshot bucket (no trailing slash).",
    )
    platform: Platform | None = Field(
        default=None,
        description="Platform folder to use; detected from the host when unset.",
    )
    output_filename: str | None = Field(
        default=None,
        min_length=1,
        description="Local file name; defaults to the platform archive name.",
    )
    http_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Per-request timeout in seconds. None blocks indefinitely.",
    )
    strict_status: bool = Field(
        default=True,
        description="Treat non-2xx replies as errors instead of saving their body.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Level for the chromium_dl logger (DEBUG, INFO, WARNING, ERROR).",
    )

    @field_validator("platform", mode="before")
    @classmethod
    def _parse_platform(cls, value: object) -> object:
        if isinstance(value, str):
            if not value.strip():
                return None
            try:
                return Platform(value)
            except ValueError as exc:
                raise ValueError(f"unknown platform {value!r} (expected Mac or Linux)") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    def resolve_platform(self) -> Platform:
        """Return the configured platform, detecting the host when unset."""

        return self.platform if self.platform is not None else detect_platform()

    def build_target(self) -> DownloadTarget:
        platform = self.resolve_platform()
        return DownloadTarget(
            base_url=self.base_url,
            platform=platform,
            filename=platform.default_filename,
        )

    def output_path(self, target: DownloadTarget) -> Path:
        """Output file, relative to the current working directory."""

        return Path(self.output_filename or target.filename)
