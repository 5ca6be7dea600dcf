import logging
import os
from typing import Callable, Iterable, Union

import httpx
import pytest

from adapters.http_client import build_client
from core.config import AppSettings
from core.domain.platform import Platform
from core.log import LOGGER_NAME

BASE_URL = "http://snapshots.test/chromium-browser-continuous"
VERSION_URL = f"{BASE_URL}/Linux/LAST_CHANGE"


def archive_url(version: str, platform: Platform = Platform.LINUX) -> str:
    return f"{BASE_URL}/{platform.value}/{version}/{platform.default_filename}"


class ChunkedStream(httpx.SyncByteStream):
    """Body delivered in fixed chunks, optionally failing after the last one."""

    def __init__(self, chunks: Iterable[bytes], error: Exception | None = None):
        self._chunks = list(chunks)
        self._error = error

    def __iter__(self):
        yield from self._chunks
        if self._error is not None:
            raise self._error


def _on_the_wire(response: httpx.Response) -> httpx.Response:
    """Serve `Response(content=...)` as an unread stream, like a real connection.

    httpx reads such bodies eagerly, which leaves nothing for `iter_raw()`.
    """
    if not response.is_stream_consumed:
        return response
    return httpx.Response(
        response.status_code,
        headers=response.headers,
        stream=ChunkedStream([response.content]),
    )


Route = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class FakeBucket:
    """Stand-in for the snapshot bucket that records every request."""

    def __init__(self):
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, route: Route) -> "FakeBucket":
        self.routes[url] = route
        return self

    def urls(self) -> list[str]:
        return [str(request.url) for request in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(str(request.url))
        if route is None:
            return _on_the_wire(httpx.Response(404, content=b"NoSuchKey"))
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return _on_the_wire(route)
        return _on_the_wire(route(request))

    def client_factory(self) -> Callable[[AppSettings], httpx.Client]:
        def _factory(settings: AppSettings) -> httpx.Client:
            return build_client(settings, transport=httpx.MockTransport(self))

        return _factory

    def client(self, settings: AppSettings) -> httpx.Client:
        return self.client_factory()(settings)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch):
    """Keep CHROMIUM_DL_* variables from the developer shell out of tests."""
    for key in list(os.environ):
        if key.upper().startswith("CHROMIUM_DL_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_app_logger():
    """configure_logging() mutates the app logger; restore it after each test."""
    app_logger = logging.getLogger(LOGGER_NAME)
    handlers = list(app_logger.handlers)
    level = app_logger.level
    propagate = app_logger.propagate
    try:
        yield
    finally:
        app_logger.handlers = handlers
        app_logger.setLevel(level)
        app_logger.propagate = propagate


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(base_url=BASE_URL, platform=Platform.LINUX)


@pytest.fixture
def bucket() -> FakeBucket:
    return FakeBucket()
