"""URL construction for the snapshot bucket.

Both builders are plain string concatenation: no quoting, no slash
normalization. The version string is inserted exactly as the server sent it.
"""

from __future__ import annotations

from core.domain.platform import Platform

LAST_CHANGE = "LAST_CHANGE"


def build_version_url(base_url: str, platform: Platform) -> str:
    return base_url + "/" + platform.path_segment + "/" + LAST_CHANGE


def build_download_url(base_url: str, platform: Platform, version: str, filename: str) -> str:
    return base_url + "/" + platform.path_segment + "/" + version + "/" + filename
