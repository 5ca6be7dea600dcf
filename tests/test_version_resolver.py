import httpx
import pytest

from adapters.http_client import classify_request_error
from adapters.version_resolver import HttpVersionResolver, VersionBuffer
from core.config import AppSettings
from core.domain.platform import Platform
from core.errors import (
    AllocationError,
    RequestPhase,
    ResolutionStatusError,
    ResolutionTransportError,
)

from conftest import BASE_URL, VERSION_URL, ChunkedStream


def _resolve(bucket, settings, platform=Platform.LINUX):
    with bucket.client(settings) as client:
        return HttpVersionResolver(client, settings).resolve(platform)


def test_resolve_returns_body(bucket, settings):
    bucket.add(VERSION_URL, httpx.Response(200, content=b"12345"))

    assert _resolve(bucket, settings) == "12345"
    assert bucket.urls() == [VERSION_URL]
    assert bucket.requests[0].method == "GET"


def test_resolve_uses_platform_folder(bucket, settings):
    bucket.add(f"{BASE_URL}/Mac/LAST_CHANGE", httpx.Response(200, content=b"777"))

    assert _resolve(bucket, settings, Platform.MAC) == "777"


def test_resolve_keeps_body_verbatim(bucket, settings):
    bucket.add(VERSION_URL, httpx.Response(200, content=b"12345\n"))

    assert _resolve(bucket, settings) == "12345\n"


def test_resolve_concatenates_chunks_in_order(bucket, settings):
    bucket.add(VERSION_URL, httpx.Response(200, stream=ChunkedStream([b"12", b"3", b"", b"45"])))

    assert _resolve(bucket, settings) == "12345"


def test_empty_body_gives_empty_version(bucket, settings):
    bucket.add(VERSION_URL, httpx.Response(200, content=b""))

    assert _resolve(bucket, settings) == ""


def test_connection_refused_is_transport_error(bucket, settings):
    bucket.add(VERSION_URL, httpx.ConnectError("[Errno 111] Connection refused"))

    with pytest.raises(ResolutionTransportError) as excinfo:
        _resolve(bucket, settings)

    assert excinfo.value.phase is RequestPhase.TRANSFER
    assert "Connection refused" in excinfo.value.detail
    assert excinfo.value.step == "resolve"


def test_unsupported_protocol_is_start_error(bucket, settings):
    bucket.add(VERSION_URL, httpx.UnsupportedProtocol("Request URL has an unsupported protocol 'ftp://'."))

    with pytest.raises(ResolutionTransportError) as excinfo:
        _resolve(bucket, settings)

    assert excinfo.value.phase is RequestPhase.START
    assert "could not start" in excinfo.value.detail


def test_reset_while_reading_is_transport_error(bucket, settings):
    bucket.add(
        VERSION_URL,
        httpx.Response(200, stream=ChunkedStream([b"12"], error=httpx.ReadError("Connection reset by peer"))),
    )

    with pytest.raises(ResolutionTransportError) as excinfo:
        _resolve(bucket, settings)

    assert excinfo.value.phase is RequestPhase.TRANSFER


def test_single_attempt_only(bucket, settings):
    bucket.add(VERSION_URL, httpx.ConnectTimeout("timed out"))

    with pytest.raises(ResolutionTransportError):
        _resolve(bucket, settings)

    assert len(bucket.requests) == 1


def test_non_success_status_is_rejected_by_default(bucket, settings):
    bucket.add(VERSION_URL, httpx.Response(404, content=b"NoSuchKey"))

    with pytest.raises(ResolutionStatusError) as excinfo:
        _resolve(bucket, settings)

    assert excinfo.value.status_code == 404


def test_lenient_status_returns_any_body(bucket):
    settings = AppSettings(base_url=BASE_URL, platform=Platform.LINUX, strict_status=False)
    bucket.add(VERSION_URL, httpx.Response(500, content=b"oops"))

    assert _resolve(bucket, settings) == "oops"


@pytest.mark.parametrize(
    "exc,phase",
    [
        (httpx.InvalidURL("bad url"), RequestPhase.START),
        (httpx.UnsupportedProtocol("no scheme"), RequestPhase.START),
        (httpx.ConnectError("refused"), RequestPhase.TRANSFER),
        (httpx.RemoteProtocolError("peer closed"), RequestPhase.TRANSFER),
        (httpx.ReadTimeout("slow"), RequestPhase.TRANSFER),
    ],
)
def test_classify_request_error(exc, phase):
    got_phase, description = classify_request_error(exc)

    assert got_phase is phase
    assert description.startswith(type(exc).__name__)


def test_classify_request_error_without_message():
    _, description = classify_request_error(httpx.ReadError(""))

    assert description == "ReadError"


class TestVersionBuffer:
    def test_accumulates_in_arrival_order(self):
        buffer = VersionBuffer()
        for chunk in (b"ab", b"", b"cd", b"e"):
            buffer.append(chunk)

        assert buffer.getvalue() == b"abcde"
        assert len(buffer) == 5
        assert buffer.text() == "abcde"

    def test_empty_buffer(self):
        buffer = VersionBuffer()

        assert buffer.getvalue() == b""
        assert buffer.text() == ""

    def test_undecodable_bytes_are_replaced(self):
        buffer = VersionBuffer()
        buffer.append(b"12\xff")

        assert buffer.text() == "12�"

    def test_growth_failure_becomes_allocation_error(self):
        class _Exhausted(bytearray):
            def __iadd__(self, other):
                raise MemoryError

        buffer = VersionBuffer()
        buffer._data = _Exhausted(b"123")

        with pytest.raises(AllocationError) as excinfo:
            buffer.append(b"4")

        assert "3 bytes" in excinfo.value.detail
