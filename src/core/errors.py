"""Error taxonomy.

Every failure the tool can report derives from `DownloaderError`. The `step`
attribute names the stage that failed so the CLI can tell the user whether
the version lookup or the archive download went wrong.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path


class RequestPhase(str, Enum):
    """Where a request failed."""

    # The request never left the client (bad URL, unsupported scheme).
    START = "start"
    # The transport reported an error while connecting or transferring.
    TRANSFER = "transfer"


class DownloaderError(Exception):
    """Base class for every error surfaced to the top-level sequencer."""

    step = "run"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ConfigurationError(DownloaderError):
    step = "configuration"


class UnsupportedPlatformError(ConfigurationError):
    pass


class AllocationError(DownloaderError):
    """The response buffer could not grow any further."""

    step = "allocation"


class ResolutionError(DownloaderError):
    step = "resolve"


class ResolutionTransportError(ResolutionError):
    def __init__(self, detail: str, *, phase: RequestPhase) -> None:
        super().__init__(detail)
        self.phase = phase


class ResolutionStatusError(ResolutionError):
    def __init__(self, detail: str, *, status_code: int) -> None:
        super().__init__(detail)
        self.status_code = status_code


class DownloadError(DownloaderError):
    step = "download"


class OutputOpenError(DownloadError):
    def __init__(self, detail: str, *, path: Path) -> None:
        super().__init__(detail)
        self.path = path


class DownloadTransportError(DownloadError):
    def __init__(self, detail: str, *, phase: RequestPhase) -> None:
        super().__init__(detail)
        self.phase = phase


class DownloadStatusError(DownloadError):
    def __init__(self, detail: str, *, status_code: int) -> None:
        super().__init__(detail)
        self.status_code = status_code
