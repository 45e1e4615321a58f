"""Event source protocols.

An EventSource hands out one Subscription per session start. A
subscription is opened once, yields raw text frames in arrival order,
and is closed exactly when its consumer is done with it.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable


@runtime_checkable
class Subscription(Protocol):
    """One live connection to the analysis event stream."""

    async def open(self) -> None:
        """Open the connection.

        Raises:
            TransportError: If the connection cannot be established.
        """
        ...

    def frames(self) -> AsyncIterator[str]:
        """Yield raw frame payloads in arrival order.

        Raises:
            TransportError: If the connection drops mid-stream.
        """
        ...

    async def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        ...


@runtime_checkable
class EventSource(Protocol):
    """Factory for subscriptions to the analysis event stream."""

    def subscribe(self, subject_ref: str, budget: float) -> Subscription:
        """Create (but do not open) a subscription for one analysis run."""
        ...
