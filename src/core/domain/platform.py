"""Supported platforms.

The remote bucket publishes one folder per platform. The folder name is also
the value used in every URL, so the enum value is the path segment itself.
"""

from __future__ import annotations

import sys
from enum import Enum

from core.errors import UnsupportedPlatformError


_ALIASES: dict[str, str] = {
    "mac": "Mac",
    "macos": "Mac",
    "darwin": "Mac",
    "osx": "Mac",
    "linux": "Linux",
}

_DEFAULT_FILENAMES: dict[str, str] = {
    "Mac": "chrome-mac.zip",
    "Linux": "chrome-linux.zip",
}


class Platform(str, Enum):
    """Platform folders available on the snapshot bucket."""

    MAC = "Mac"
    LINUX = "Linux"

    @classmethod
    def _missing_(cls, value: object) -> "Platform | None":
        if isinstance(value, str):
            canonical = _ALIASES.get(value.strip().lower())
            if canonical is not None:
                return cls(canonical)
        return None

    @property
    def path_segment(self) -> str:
        return self.value

    @property
    def default_filename(self) -> str:
        """Archive name published for this platform (also the local file name)."""

        return _DEFAULT_FILENAMES[self.value]


def detect_platform(system: str | None = None) -> Platform:
    """Resolve the platform of the running host.

    `system` defaults to `sys.platform`; passing it explicitly is meant for tests.
    """

    system = system if system is not None else sys.platform
    if system == "darwin":
        return Platform.MAC
    if system.startswith("linux"):
        return Platform.LINUX
    raise UnsupportedPlatformError(
        f"Unsupported platform: {system!r} (set CHROMIUM_DL_PLATFORM to Mac or Linux)"
    )
