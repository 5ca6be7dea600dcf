"""Download orchestration.

The pipeline runs the two steps in order and records which state it ended in.
It never prints: UI layers observe it through `PipelineHooks` and read the
final `PipelineResult`. This keeps the sequencing usable from the CLI, the
doctor command and tests alike.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable

from core.domain.models import DownloadResult, DownloadTarget
from core.errors import DownloaderError
from core.interfaces.transfer import ArchiveFetcher, VersionResolver
from core.log import get_logger, log_with_data

logger = get_logger("pipeline")


class PipelineState(str, Enum):
    START = "start"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    RESOLVE_FAILED = "resolve_failed"
    DOWNLOADING = "downloading"
    DONE = "done"
    DOWNLOAD_FAILED = "download_failed"

    @property
    def terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({PipelineState.RESOLVE_FAILED, PipelineState.DONE, PipelineState.DOWNLOAD_FAILED})

_TRANSITIONS: dict[PipelineState, frozenset[PipelineState]] = {
    PipelineState.START: frozenset({PipelineState.RESOLVING}),
    PipelineState.RESOLVING: frozenset({PipelineState.RESOLVED, PipelineState.RESOLVE_FAILED}),
    PipelineState.RESOLVED: frozenset({PipelineState.DOWNLOADING}),
    PipelineState.DOWNLOADING: frozenset({PipelineState.DONE, PipelineState.DOWNLOAD_FAILED}),
}


@dataclass
class DownloadRequest:
    """Parameters for one run."""

    target: DownloadTarget
    output_path: Path


@dataclass
class PipelineHooks:
    """Optional callbacks for UI layers (progress, announcements)."""

    state_changed: Callable[[PipelineState], None] | None = None
    version_resolved: Callable[[str], None] | None = None
    progress: Callable[[int, int], None] | None = None


@dataclass
class PipelineResult:
    """Output of a pipeline invocation."""

    state: PipelineState
    version: str | None = None
    download: DownloadResult | None = None
    error: DownloaderError | None = None
    history: list[PipelineState] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state is PipelineState.DONE


class _StateTracker:
    def __init__(self, hooks: PipelineHooks) -> None:
        self._hooks = hooks
        self.state = PipelineState.START
        self.history = [PipelineState.START]

    def move(self, new_state: PipelineState) -> None:
        allowed = _TRANSITIONS.get(self.state, frozenset())
        if new_state not in allowed:
            raise RuntimeError(f"illegal pipeline transition {self.state.value} -> {new_state.value}")
        logger.debug("State %s -> %s", self.state.value, new_state.value)
        self.state = new_state
        self.history.append(new_state)
        if self._hooks.state_changed:
            self._hooks.state_changed(new_state)


def run_pipeline(
    request: DownloadRequest,
    resolver: VersionResolver,
    fetcher: ArchiveFetcher,
    hooks: PipelineHooks | None = None,
) -> PipelineResult:
    """Resolve the latest version, then download its archive.

    Errors from either step end the run in the matching failed state; the
    fetcher is never called when resolution fails.
    """

    hooks = hooks or PipelineHooks()
    tracker = _StateTracker(hooks)
    platform = request.target.platform

    tracker.move(PipelineState.RESOLVING)
    try:
        version = resolver.resolve(platform)
    except DownloaderError as exc:
        tracker.move(PipelineState.RESOLVE_FAILED)
        log_with_data(logger, logging.WARNING, "Run aborted before download", {"error": exc.detail})
        return PipelineResult(state=tracker.state, error=exc, history=tracker.history)

    tracker.move(PipelineState.RESOLVED)
    if hooks.version_resolved:
        hooks.version_resolved(version)

    tracker.move(PipelineState.DOWNLOADING)
    try:
        download = fetcher.fetch(platform, version, request.output_path, hooks.progress)
    except DownloaderError as exc:
        tracker.move(PipelineState.DOWNLOAD_FAILED)
        log_with_data(logger, logging.WARNING, "Download did not complete", {
            "version": version,
            "error": exc.detail,
        })
        return PipelineResult(state=tracker.state, version=version, error=exc, history=tracker.history)

    tracker.move(PipelineState.DONE)
    return PipelineResult(
        state=tracker.state,
        version=version,
        download=download,
        history=tracker.history,
    )
