"""Doctor command for environment diagnostics."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import httpx
import typer
from rich.markup import escape

from adapters.http_client import build_client
from adapters.version_resolver import HttpVersionResolver
from cli.ui_components import build_doctor_table, make_console
from core.config import AppSettings
from core.domain.platform import Platform
from core.domain.urls import build_version_url
from core.errors import DownloaderError

app = typer.Typer(help="Environment diagnostics and configuration checks.")

_console = make_console()


def _check_platform(settings: AppSettings) -> tuple[bool, str, Platform | None]:
    try:
        platform = settings.resolve_platform()
    except DownloaderError as exc:
        return False, exc.detail, None
    source = "configured" if settings.platform is not None else "detected"
    return True, f"{platform.value} ({source}), archive {platform.default_filename}", platform


def _check_version_endpoint(
    settings: AppSettings,
    platform: Platform,
    client_factory: Callable[[AppSettings], httpx.Client],
) -> tuple[bool, str]:
    try:
        with client_factory(settings) as client:
            version = HttpVersionResolver(client, settings).resolve(platform)
    except DownloaderError as exc:
        return False, exc.detail
    return True, f"latest version {version}"


def _check_output_writable(path: Path) -> tuple[bool, str]:
    """Check the output file could be created without touching it."""

    resolved = path.resolve()
    if resolved.exists():
        if resolved.is_dir():
            return False, f"{resolved} is a directory"
        if not os.access(resolved, os.W_OK):
            return False, f"{resolved} is not writable"
        return True, f"{resolved} (will be overwritten)"
    if not os.access(resolved.parent, os.W_OK):
        return False, f"{resolved.parent} is not writable"
    return True, str(resolved)


def run_checks(
    settings: AppSettings,
    client_factory: Callable[[AppSettings], httpx.Client] | None = None,
) -> bool:
    """Print the diagnostics table and return True when every check passed."""

    client_factory = client_factory or build_client

    table = build_doctor_table()
    all_ok = True

    def _row(name: str, ok: bool, detail: str) -> None:
        nonlocal all_ok
        all_ok = all_ok and ok
        table.add_row(name, "OK" if ok else "FAIL", escape(detail))

    ok_platform, detail_platform, platform = _check_platform(settings)
    _row("Platform", ok_platform, detail_platform)
    table.add_row("Base URL", "OK", escape(settings.base_url))

    if platform is not None:
        table.add_row("Version URL", "OK", escape(build_version_url(settings.base_url, platform)))
        ok_http, detail_http = _check_version_endpoint(settings, platform, client_factory)
        _row("Version endpoint", ok_http, detail_http)
        target = settings.build_target()
        ok_out, detail_out = _check_output_writable(settings.output_path(target))
        _row("Output file", ok_out, detail_out)

    _console.print(table)
    return all_ok


@app.callback(invoke_without_command=True)
def run(ctx: typer.Context) -> None:
    """Run baseline diagnostics (performs one version lookup, no download)."""

    settings = ctx.obj if isinstance(ctx.obj, AppSettings) else AppSettings()
    if not run_checks(settings):
        raise typer.Exit(code=1)
