"""Command line entry point.

Running the tool without arguments resolves the latest snapshot for the host
platform and downloads it into the current directory. Options override the
matching `CHROMIUM_DL_*` environment variables for a single run.
"""

from __future__ import annotations

from typing import Callable

import httpx
import typer
from pydantic import ValidationError
from rich.markup import escape

from adapters.archive_fetcher import HttpArchiveFetcher
from adapters.http_client import build_client
from adapters.version_resolver import HttpVersionResolver
from cli import doctor
from cli.ui_components import (
    ProgressLine,
    make_console,
    print_banner,
    print_failure,
    print_separator,
    print_success,
    print_version_announcement,
)
from core.config import AppSettings
from core.errors import ConfigurationError, DownloaderError
from core.log import configure_logging, get_logger
from core.services.download_pipeline import DownloadRequest, PipelineHooks, run_pipeline

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2

app = typer.Typer(
    add_completion=False,
    help="Download the latest Chromium snapshot build for this platform.",
)
app.add_typer(doctor.app, name="doctor")

_console = make_console()
_err_console = make_console(stderr=True)

logger = get_logger("cli")


def load_settings(**overrides: object) -> AppSettings:
    """Build settings from the environment plus the non-None CLI overrides."""

    return AppSettings(**{key: value for key, value in overrides.items() if value is not None})


def run_download(
    settings: AppSettings,
    *,
    quiet: bool = False,
    client_factory: Callable[[AppSettings], httpx.Client] | None = None,
) -> int:
    """Run the whole transcript and return the process exit status."""

    client_factory = client_factory or build_client
    try:
        target = settings.build_target()
    except ConfigurationError as exc:
        print_failure(_err_console, exc)
        return EXIT_CONFIG
    output_path = settings.output_path(target)

    print_banner(_console)
    print_separator(_console)

    progress = ProgressLine(_console, enabled=not quiet)

    def _announce(version: str) -> None:
        print_version_announcement(_console, version)
        print_separator(_console)

    hooks = PipelineHooks(version_resolved=_announce, progress=progress)
    request = DownloadRequest(target=target, output_path=output_path)

    with client_factory(settings) as client:
        result = run_pipeline(
            request,
            HttpVersionResolver(client, settings),
            HttpArchiveFetcher(client, settings),
            hooks,
        )
    progress.finish()

    if result.ok:
        print_success(_console, result.version or "")
        return EXIT_OK

    error = result.error or DownloaderError(f"run stopped in state {result.state.value}")
    print_failure(_err_console, error)
    return EXIT_FAILURE


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    base_url: str | None = typer.Option(None, "--base-url", help="Root URL of the snapshot bucket."),
    platform: str | None = typer.Option(None, "--platform", help="Platform folder: Mac or Linux."),
    output: str | None = typer.Option(None, "--output", "-o", help="Local file name for the archive."),
    lenient_status: bool = typer.Option(
        False,
        "--lenient-status",
        help="Save any completed reply, even non-2xx ones.",
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not render the progress line."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug details to stderr."),
) -> None:
    """Download the latest Chromium snapshot into the current directory."""

    try:
        settings = load_settings(
            base_url=base_url,
            platform=platform,
            output_filename=output,
            strict_status=False if lenient_status else None,
        )
    except ValidationError as exc:
        _err_console.print(f"[red]Error: invalid configuration:[/red] {escape(str(exc))}")
        raise typer.Exit(code=EXIT_CONFIG)

    configure_logging("DEBUG" if verbose else settings.log_level)
    logger.debug("Effective settings: %s", settings.model_dump(mode="json"))
    ctx.obj = settings

    if ctx.invoked_subcommand is not None:
        return

    raise typer.Exit(code=run_download(settings, quiet=quiet))


def run() -> None:
    app()
