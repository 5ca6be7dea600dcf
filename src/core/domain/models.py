"""Domain models (Pydantic v2).

These describe *what* a run produced, not *how* it was fetched. They carry no
httpx objects so the CLI and tests can inspect them freely.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from core.domain.platform import Platform


class DownloadTarget(BaseModel):
    """Everything needed to locate one archive."""

    base_url: str = Field(..., min_length=1, description="Root of the snapshot bucket.")
    platform: Platform = Field(..., description="Platform folder on the bucket.")
    filename: str = Field(..., min_length=1, description="Archive name published on the bucket.")


class DownloadResult(BaseModel):
    """Outcome of a completed archive transfer."""

    version: str = Field(..., description="Version identifier the archive belongs to.")
    url: str = Field(..., description="URL the archive was fetched from.")
    output_path: Path = Field(..., description="Local file the body was written to.")
    bytes_written: int = Field(default=0, ge=0, description="Body bytes written to disk.")
    expected_size: int | None = Field(
        default=None,
        ge=0,
        description="Content-Length announced by the server, if any.",
    )
    status_code: int | None = Field(default=None, description="HTTP status of the reply.")

    @property
    def complete(self) -> bool:
        """True when the announced size (if any) was fully received."""

        return self.expected_size is None or self.bytes_written == self.expected_size
