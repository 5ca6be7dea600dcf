"""Archive Fetcher: streams `<base>/<platform>/<version>/<filename>` to disk.

Order of operations:
- the output file is opened (truncated) first; if that fails no request is made;
- one streaming GET, each raw chunk written as it arrives;
- a progress tick after the headers and after every chunk.

A transfer that breaks halfway leaves the partial file in place.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from adapters.http_client import REQUEST_ERRORS, classify_request_error, is_success_status
from core.config import AppSettings
from core.domain.models import DownloadResult
from core.domain.platform import Platform
from core.domain.urls import build_download_url
from core.errors import (
    DownloadError,
    DownloadStatusError,
    DownloadTransportError,
    OutputOpenError,
    RequestPhase,
)
from core.interfaces.transfer import ArchiveFetcher, ProgressCallback
from core.log import get_logger, log_with_data

logger = get_logger("archive_fetcher")


def _content_length(response: httpx.Response) -> int | None:
    raw = response.headers.get("content-length")
    if raw is None:
        return None
    try:
        size = int(raw)
    except ValueError:
        return None
    return size if size >= 0 else None


class HttpArchiveFetcher(ArchiveFetcher):
    """Downloads one snapshot archive over HTTP."""

    def __init__(self, client: httpx.Client, settings: AppSettings | None = None) -> None:
        self._client = client
        self._settings = settings or AppSettings()

    def download_url(self, platform: Platform, version: str) -> str:
        return build_download_url(
            self._settings.base_url,
            platform,
            version,
            platform.default_filename,
        )

    def fetch(
        self,
        platform: Platform,
        version: str,
        output_path: Path,
        on_progress: ProgressCallback | None = None,
    ) -> DownloadResult:
        url = self.download_url(platform, version)
        output_path = Path(output_path)

        try:
            handle = open(output_path, "wb")
        except OSError as exc:
            log_with_data(logger, logging.ERROR, "Cannot open output file", {
                "path": str(output_path),
                "error": str(exc),
            })
            raise OutputOpenError(
                f"cannot open {output_path} for writing: {exc.strerror or exc}",
                path=output_path,
            ) from exc

        log_with_data(logger, logging.INFO, "Starting archive download", {
            "url": url,
            "destination": str(output_path),
        })

        written = 0
        expected: int | None = None
        status_code: int | None = None
        with handle:
            try:
                with self._client.stream("GET", url) as response:
                    status_code = response.status_code
                    if self._settings.strict_status and not is_success_status(status_code):
                        log_with_data(logger, logging.ERROR, "Download request rejected", {
                            "url": url,
                            "status": status_code,
                            "reason": response.reason_phrase,
                        })
                        raise DownloadStatusError(
                            f"{url} answered HTTP {status_code}",
                            status_code=status_code,
                        )

                    expected = _content_length(response)
                    total = expected or 0
                    if on_progress is not None:
                        on_progress(0, total)

                    # Raw chunks, as received: nothing held back, nothing decoded.
                    for chunk in response.iter_raw():
                        try:
                            handle.write(chunk)
                        except OSError as exc:
                            log_with_data(logger, logging.ERROR, "Writing archive failed", {
                                "path": str(output_path),
                                "error": str(exc),
                                "bytes_written": written,
                            })
                            raise DownloadError(
                                f"cannot write {output_path}: {exc.strerror or exc}"
                            ) from exc
                        written += len(chunk)
                        if on_progress is not None:
                            on_progress(written, total)
            except REQUEST_ERRORS as exc:
                phase, description = classify_request_error(exc)
                log_with_data(logger, logging.ERROR, "Archive download failed", {
                    "url": url,
                    "phase": phase.value,
                    "error": description,
                    "bytes_written": written,
                    "expected_size": expected,
                })
                if phase is RequestPhase.START:
                    message = f"could not start request to {url}: {description}"
                else:
                    message = f"transport error after {written} bytes from {url}: {description}"
                raise DownloadTransportError(message, phase=phase) from exc

        log_with_data(logger, logging.INFO, "Archive download complete", {
            "url": url,
            "size": written,
            "expected_size": expected,
        })
        return DownloadResult(
            version=version,
            url=url,
            output_path=output_path,
            bytes_written=written,
            expected_size=expected,
            status_code=status_code,
        )
