"""httpx wrapper.

- Standardizes timeout and redirect policy for both network steps.
- Classifies httpx failures into "could not start" and "transport error".
- Accepts an injected transport so tests can swap in `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings
from core.errors import RequestPhase

# Raised before any byte leaves the client.
_START_ERRORS: tuple[type[Exception], ...] = (
    httpx.InvalidURL,
    httpx.UnsupportedProtocol,
)


def build_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create the `httpx.Client` used for one run.

    Callers own the client and must close it (`with build_client() as client:`).
    A `None` timeout means a request may block indefinitely. Compression is
    not negotiated so the archive on disk is byte-for-byte what was sent.
    """

    settings = settings or AppSettings()
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers={"Accept-Encoding": "identity"},
        transport=transport,
    )


# Everything the two network steps translate into a transport error.
REQUEST_ERRORS: tuple[type[Exception], ...] = (httpx.InvalidURL, httpx.RequestError)


def classify_request_error(exc: BaseException) -> tuple[RequestPhase, str]:
    """Map an httpx exception to a phase and a human-readable description."""

    phase = RequestPhase.START if isinstance(exc, _START_ERRORS) else RequestPhase.TRANSFER
    message = str(exc).strip()
    description = f"{type(exc).__name__}: {message}" if message else type(exc).__name__
    return phase, description


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300
