"""Version Resolver: reads `<base>/<platform>/LAST_CHANGE`.

Implementation:
- One streaming GET, no retries.
- The body is accumulated in a `VersionBuffer` and returned verbatim.

Notes:
- With `strict_status` a non-2xx reply is an error; otherwise any completed
  transfer counts as success and its body becomes the version.
"""

from __future__ import annotations

import logging

import httpx

from adapters.http_client import REQUEST_ERRORS, classify_request_error, is_success_status
from core.config import AppSettings
from core.domain.platform import Platform
from core.domain.urls import build_version_url
from core.errors import (
    AllocationError,
    RequestPhase,
    ResolutionStatusError,
    ResolutionTransportError,
)
from core.interfaces.transfer import VersionResolver
from core.log import get_logger, log_with_data

logger = get_logger("version_resolver")


class VersionBuffer:
    """Growable byte accumulator for the version reply."""

    def __init__(self) -> None:
        self._data = bytearray()

    def append(self, chunk: bytes) -> int:
        try:
            self._data += chunk
        except MemoryError as exc:
            raise AllocationError(
                f"could not grow response buffer past {len(self._data)} bytes"
            ) from exc
        return len(chunk)

    def __len__(self) -> int:
        return len(self._data)

    def getvalue(self) -> bytes:
        return bytes(self._data)

    def text(self) -> str:
        return self._data.decode("utf-8", errors="replace")


class HttpVersionResolver(VersionResolver):
    """Resolves the latest snapshot identifier over HTTP."""

    def __init__(self, client: httpx.Client, settings: AppSettings | None = None) -> None:
        self._client = client
        self._settings = settings or AppSettings()

    def version_url(self, platform: Platform) -> str:
        return build_version_url(self._settings.base_url, platform)

    def resolve(self, platform: Platform) -> str:
        url = self.version_url(platform)
        log_with_data(logger, logging.DEBUG, "Resolving latest version", {"url": url})

        buffer = VersionBuffer()
        try:
            with self._client.stream("GET", url) as response:
                if self._settings.strict_status and not is_success_status(response.status_code):
                    raise ResolutionStatusError(
                        f"{url} answered HTTP {response.status_code}",
                        status_code=response.status_code,
                    )
                for chunk in response.iter_bytes():
                    buffer.append(chunk)
        except ResolutionStatusError as exc:
            log_with_data(logger, logging.ERROR, "Version lookup rejected", {
                "url": url,
                "status": exc.status_code,
            })
            raise
        except REQUEST_ERRORS as exc:
            phase, description = classify_request_error(exc)
            log_with_data(logger, logging.ERROR, "Version lookup failed", {
                "url": url,
                "phase": phase.value,
                "error": description,
            })
            if phase is RequestPhase.START:
                message = f"could not start request to {url}: {description}"
            else:
                message = f"transport error while reading {url}: {description}"
            raise ResolutionTransportError(message, phase=phase) from exc

        version = buffer.text()
        log_with_data(logger, logging.INFO, "Resolved latest version", {
            "platform": platform.value,
            "version": version,
        })
        return version
