"""CLI UI components (Rich).

Keeps command logic apart from what the transcript looks like: banner,
separator rows, the live progress line and failure messages.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from core.config import APP_NAME, APP_VERSION
from core.errors import (
    AllocationError,
    ConfigurationError,
    DownloaderError,
    DownloadError,
    RequestPhase,
    ResolutionError,
)

ROW_LENGTH = 70


def make_console(*, stderr: bool = False) -> Console:
    """Console that never wraps or highlights, so transcripts stay byte-stable."""

    return Console(stderr=stderr, soft_wrap=True, highlight=False)


def print_banner(console: Console) -> None:
    console.print(f"{APP_NAME} (version {APP_VERSION})", markup=False)


def print_separator(console: Console) -> None:
    console.print("*" * ROW_LENGTH, markup=False)


def print_version_announcement(console: Console, version: str) -> None:
    console.print(f"Chromium latest version for your platform is: {version}", markup=False)


def print_success(console: Console, version: str) -> None:
    console.print(f"Chromium version {version} has been successfully downloaded.", markup=False)


def format_progress(downloaded: int, total: int) -> str | None:
    """Render one progress tick, or None when the total size is unknown."""

    if not total:
        return None
    ratio = downloaded / total
    return f"Downloading Chromium... Total progress: {100 * ratio:.1f}%"


class ProgressLine:
    """Single stdout line rewritten in place with a carriage return."""

    def __init__(self, console: Console, *, enabled: bool = True) -> None:
        self._console = console
        self._enabled = enabled
        self.rendered = 0

    def __call__(self, downloaded: int, total: int) -> None:
        if not self._enabled:
            return
        text = format_progress(downloaded, total)
        if text is None:
            return
        self._console.file.write(text + "\r")
        self._console.file.flush()
        self.rendered += 1

    def finish(self) -> None:
        """Move off the progress line if anything was drawn on it."""

        if self.rendered:
            self._console.file.write("\n")
            self._console.file.flush()


def describe_failure(error: DownloaderError) -> str:
    """User-facing message naming the failed step and the underlying error."""

    if isinstance(error, ResolutionError):
        if getattr(error, "phase", None) is RequestPhase.START:
            return f"Error: could not start the version lookup: {error.detail}"
        return f"Error: could not resolve the latest Chromium version: {error.detail}"
    if isinstance(error, DownloadError):
        if getattr(error, "phase", None) is RequestPhase.START:
            return f"Error: could not start the Chromium download: {error.detail}"
        return f"Error: Chromium download failed: {error.detail}"
    if isinstance(error, AllocationError):
        return f"Error: out of memory: {error.detail}"
    if isinstance(error, ConfigurationError):
        return f"Error: invalid configuration: {error.detail}"
    return f"Error: {error.detail}"


def print_failure(console: Console, error: DownloaderError) -> None:
    console.print(f"[red]{escape(describe_failure(error))}[/red]")


def build_doctor_table() -> Table:
    table = Table(title="chromium-downloader doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    return table
