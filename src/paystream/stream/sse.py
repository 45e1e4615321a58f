"""Server-Sent Events subscription over httpx.

HttpEventSource opens ``GET <server>/api/analyze?repo=...&budget=...``
with ``Accept: text/event-stream`` and yields the ``data`` payload of
each event. No retry happens here; a failed or dropped connection is
reported as TransportError and the caller decides whether to start again.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import httpx

from paystream.exceptions import TransportError
from paystream.models.config import SessionConfig

logger = logging.getLogger(__name__)


async def iter_sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """Group SSE lines into event payloads.

    Multiple ``data:`` lines of one event are joined with newlines.
    Comments and fields other than ``data`` are skipped. A final event
    without a terminating blank line is still delivered.
    """
    data: list[str] = []
    async for raw in lines:
        line = raw.rstrip("\r\n")
        if not line:
            if data:
                yield "\n".join(data)
                data = []
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "data":
            data.append(value)
    if data:
        yield "\n".join(data)


class SseSubscription:
    """One SSE connection to the analysis service."""

    def __init__(
        self,
        url: str,
        params: dict[str, str],
        *,
        timeout: httpx.Timeout,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._params = params
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._response: httpx.Response | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def open(self) -> None:
        self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        request = self._client.build_request(
            "GET",
            self._url,
            params=self._params,
            headers={"Accept": "text/event-stream", "Cache-Control": "no-cache"},
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            await self.close()
            raise TransportError(
                f"Could not connect to the PayStream server at {self._url}."
            ) from exc

        self._response = response
        if response.status_code != 200:
            await self.close()
            raise TransportError(
                f"PayStream server rejected the analysis request: HTTP {response.status_code}"
            )
        logger.debug("Opened event stream %s", response.url)

    async def frames(self) -> AsyncIterator[str]:
        if self._response is None or self._closed:
            raise TransportError("Event stream is not open")
        try:
            async for payload in iter_sse_data(self._response.aiter_lines()):
                yield payload
        except httpx.HTTPError as exc:
            raise TransportError("Lost connection to the PayStream server.") from exc

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._response is not None:
            await self._response.aclose()
        if self._client is not None:
            await self._client.aclose()


class HttpEventSource:
    """EventSource backed by the analysis service's SSE endpoint.

    Usage::

        source = HttpEventSource(SessionConfig.from_env())
        controller = SessionController(source)
        await controller.start("https://github.com/owner/repo", 1.5)
    """

    def __init__(
        self,
        config: SessionConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or SessionConfig()
        self._transport = transport

    def subscribe(self, subject_ref: str, budget: float) -> SseSubscription:
        timeout = httpx.Timeout(
            self._config.connect_timeout,
            read=self._config.read_timeout,
        )
        return SseSubscription(
            self._config.analyze_url,
            {"repo": subject_ref, "budget": f"{budget:g}"},
            timeout=timeout,
            transport=self._transport,
        )
