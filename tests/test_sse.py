"""Tests for the SSE transport, using httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from paystream.controller import SessionController
from paystream.exceptions import TransportError
from paystream.models.config import SessionConfig
from paystream.models.session import ErrorKind, Phase
from paystream.stream.sse import HttpEventSource, iter_sse_data

from tests.scenarios import REPO, fetch_frames, full_run_frames


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _lines(*lines: str):
    for line in lines:
        yield line


async def _collect(lines) -> list[str]:
    return [payload async for payload in iter_sse_data(lines)]


def _sse_body(frames: list[dict]) -> bytes:
    return "".join(f"data: {json.dumps(f)}\n\n" for f in frames).encode()


CONFIG = SessionConfig(server_url="http://paystream.test")


# ---------------------------------------------------------------------------
# iter_sse_data
# ---------------------------------------------------------------------------

class TestIterSseData:
    async def test_single_events(self):
        out = await _collect(_lines("data: one", "", "data: two", ""))
        assert out == ["one", "two"]

    async def test_multiline_data_is_joined(self):
        out = await _collect(_lines("data: a", "data: b", ""))
        assert out == ["a\nb"]

    async def test_comments_and_other_fields_skipped(self):
        out = await _collect(
            _lines(": keep-alive", "event: message", "id: 7", "data:x", "")
        )
        assert out == ["x"]

    async def test_trailing_event_without_blank_line(self):
        assert await _collect(_lines("data: last")) == ["last"]

    async def test_blank_lines_without_data(self):
        assert await _collect(_lines("", "", "\r\n")) == []


# ---------------------------------------------------------------------------
# HttpEventSource
# ---------------------------------------------------------------------------

class TestHttpEventSource:
    async def test_request_shape_and_frames(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                headers={"Content-Type": "text/event-stream"},
                content=_sse_body(fetch_frames()),
            )

        source = HttpEventSource(CONFIG, transport=httpx.MockTransport(handler))
        sub = source.subscribe(REPO, 1.5)
        await sub.open()
        frames = [f async for f in sub.frames()]
        await sub.close()

        request = seen[0]
        assert request.url.path == "/api/analyze"
        assert request.url.params["repo"] == REPO
        assert request.url.params["budget"] == "1.5"
        assert request.headers["Accept"] == "text/event-stream"
        assert [json.loads(f)["type"] for f in frames] == [
            "subject-fetch-begun",
            "subject-fetched",
        ]
        assert sub.closed

    async def test_connect_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        sub = HttpEventSource(CONFIG, transport=httpx.MockTransport(handler)).subscribe(REPO, 1.0)
        with pytest.raises(TransportError, match="Could not connect"):
            await sub.open()
        assert sub.closed

    async def test_http_error_status(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(503))
        sub = HttpEventSource(CONFIG, transport=transport).subscribe(REPO, 1.0)
        with pytest.raises(TransportError, match="HTTP 503"):
            await sub.open()

    async def test_frames_before_open(self):
        sub = HttpEventSource(CONFIG).subscribe(REPO, 1.0)
        with pytest.raises(TransportError):
            async for _ in sub.frames():
                pass

    async def test_close_is_idempotent(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=b""))
        sub = HttpEventSource(CONFIG, transport=transport).subscribe(REPO, 1.0)
        await sub.open()
        await sub.close()
        await sub.close()
        assert sub.closed


# ---------------------------------------------------------------------------
# End to end through the controller
# ---------------------------------------------------------------------------

class TestControllerOverHttp:
    async def test_full_run(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, content=_sse_body(full_run_frames()))
        )
        controller = SessionController(HttpEventSource(CONFIG, transport=transport), CONFIG)
        await controller.start(REPO, 1.5)
        session = await controller.wait()
        assert session.phase is Phase.COMPLETE
        assert session.refund is not None

    async def test_dropped_connection(self):
        async def body():
            yield _sse_body(fetch_frames())
            raise httpx.ReadError("connection reset")

        transport = httpx.MockTransport(lambda request: httpx.Response(200, content=body()))
        controller = SessionController(HttpEventSource(CONFIG, transport=transport), CONFIG)
        await controller.start(REPO, 1.5)
        session = await controller.wait()
        assert session.error == "Lost connection to the PayStream server."
        assert session.error_kind is ErrorKind.TRANSPORT
        assert session.subject_meta is not None

    async def test_server_unreachable(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        controller = SessionController(
            HttpEventSource(CONFIG, transport=httpx.MockTransport(handler)), CONFIG
        )
        session = await controller.start(REPO, 1.5)
        assert session.phase is Phase.IDLE
        assert session.error.startswith("Could not connect")
