"""Contracts for the two network steps.

The pipeline only knows these Protocols, so tests can hand it recording
doubles instead of real HTTP adapters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Protocol, runtime_checkable

from core.domain.models import DownloadResult
from core.domain.platform import Platform

# (downloaded, total); total is 0 when the server did not announce a size.
ProgressCallback = Callable[[int, int], None]


@runtime_checkable
class VersionResolver(Protocol):
    """Looks up the latest version identifier for a platform."""

    def resolve(self, platform: Platform) -> str:
        ...


@runtime_checkable
class ArchiveFetcher(Protocol):
    """Streams the archive of a given version to disk."""

    def fetch(
        self,
        platform: Platform,
        version: str,
        output_path: Path,
        on_progress: ProgressCallback | None = None,
    ) -> DownloadResult:
        ...
