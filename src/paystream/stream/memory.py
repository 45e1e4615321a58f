"""In-process event sources.

MemoryEventSource replays a scripted list of frames, which makes the
session controller testable without any transport. FileEventSource
replays a recorded stream stored as JSON lines.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Iterable, Sequence
from pathlib import Path
from typing import Any

from paystream.exceptions import TransportError


def _as_frame(item: str | dict[str, Any]) -> str:
    return item if isinstance(item, str) else json.dumps(item)


class MemorySubscription:
    """Subscription that yields a fixed sequence of frames.

    Attributes:
        subject_ref: Subject the subscription was created for.
        budget: Budget the subscription was created for.
        delivered: Number of frames handed to the consumer so far.
    """

    def __init__(
        self,
        frames: Sequence[str],
        subject_ref: str,
        budget: float,
        *,
        open_error: TransportError | None = None,
        drop_error: TransportError | None = None,
        hold_open: bool = False,
        delay: float = 0.0,
    ) -> None:
        self.subject_ref = subject_ref
        self.budget = budget
        self.delivered = 0
        self._frames = list(frames)
        self._open_error = open_error
        self._drop_error = drop_error
        self._hold_open = hold_open
        self._delay = delay
        self._opened = False
        self._closed = asyncio.Event()

    @property
    def opened(self) -> bool:
        return self._opened

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    async def open(self) -> None:
        if self._open_error is not None:
            raise self._open_error
        self._opened = True

    async def frames(self) -> AsyncIterator[str]:
        for frame in self._frames:
            if self.closed:
                return
            if self._delay:
                await asyncio.sleep(self._delay)
            else:
                await asyncio.sleep(0)
            self.delivered += 1
            yield frame
        if self._drop_error is not None:
            raise self._drop_error
        if self._hold_open:
            await self._closed.wait()

    async def close(self) -> None:
        self._closed.set()


class MemoryEventSource:
    """EventSource that hands out scripted subscriptions.

    Frames may be given as raw strings or as dicts (encoded as JSON).
    Every subscription created is kept in ``subscriptions`` so tests can
    inspect what was opened and closed.

    Usage::

        source = MemoryEventSource([{"type": "subject-fetch-begun"}, ...])
        controller = SessionController(source)
        await controller.start("https://github.com/owner/repo", 1.5)
        await controller.wait()
    """

    def __init__(
        self,
        frames: Iterable[str | dict[str, Any]] = (),
        *,
        open_error: TransportError | None = None,
        drop_error: TransportError | None = None,
        hold_open: bool = False,
        delay: float = 0.0,
    ) -> None:
        self._frames = [_as_frame(f) for f in frames]
        self._open_error = open_error
        self._drop_error = drop_error
        self._hold_open = hold_open
        self._delay = delay
        self.subscriptions: list[MemorySubscription] = []

    def subscribe(self, subject_ref: str, budget: float) -> MemorySubscription:
        sub = MemorySubscription(
            self._frames,
            subject_ref,
            budget,
            open_error=self._open_error,
            drop_error=self._drop_error,
            hold_open=self._hold_open,
            delay=self._delay,
        )
        self.subscriptions.append(sub)
        return sub


class FileEventSource:
    """EventSource that replays a JSON-lines recording.

    Each non-blank line of the file is one frame. The subject and budget
    passed to ``subscribe`` are not sent anywhere.
    """

    def __init__(self, path: str | Path, *, delay: float = 0.0) -> None:
        self._path = Path(path)
        self._delay = delay

    def subscribe(self, subject_ref: str, budget: float) -> MemorySubscription:
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            return MemorySubscription(
                [],
                subject_ref,
                budget,
                open_error=TransportError(f"Cannot read recording {self._path}: {exc}"),
            )
        frames = [line for line in text.splitlines() if line.strip()]
        return MemorySubscription(frames, subject_ref, budget, delay=self._delay)
