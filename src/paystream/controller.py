"""Session controller -- owns one session and its event subscription.

The controller validates a start request, installs a fresh Session,
opens a subscription through an EventSource and runs a single consumer
task that parses frames and dispatches them in arrival order. Every
dispatch replaces the snapshot through the pure reducer; listeners are
told about each new snapshot.

Transport and protocol failures never escape the consumer: they end the
session with a user-visible message and phase ``idle``.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable
from typing import Any

from paystream.exceptions import (
    ApplicationError,
    InputValidationError,
    InvalidStateError,
    PayStreamError,
    ProtocolError,
    TransportError,
)
from paystream.models.config import SessionConfig
from paystream.models.roster import DEFAULT_ROSTER, Roster
from paystream.models.session import ErrorKind
from paystream.reducer import fail, reduce
from paystream.session import Session
from paystream.stream.parser import parse_frame
from paystream.stream.protocols import EventSource, Subscription

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[Session], None]

MALFORMED_FRAME_MESSAGE = "Received a malformed update from the PayStream server."
STREAM_CLOSED_MESSAGE = "Connection to the PayStream server closed before the analysis finished."

_ERROR_CLASSES: dict[ErrorKind | None, type[PayStreamError]] = {
    ErrorKind.TRANSPORT: TransportError,
    ErrorKind.PROTOCOL: ProtocolError,
    ErrorKind.APPLICATION: ApplicationError,
    ErrorKind.STATE: InvalidStateError,
}


class SessionController:
    """Drives one analysis session from an event stream.

    Only one subscription is live at a time; starting again discards the
    previous session. ``dispatch`` calls never overlap: frames are
    consumed by a single task and applied one at a time.

    Usage::

        controller = SessionController(HttpEventSource(config), config)
        controller.add_listener(render_snapshot)
        await controller.start("https://github.com/owner/repo", 1.5)
        await controller.wait()
        print(controller.snapshot.refund)
    """

    def __init__(
        self,
        source: EventSource,
        config: SessionConfig | None = None,
        *,
        roster: Roster = DEFAULT_ROSTER,
    ) -> None:
        self._source = source
        self._config = config or SessionConfig()
        self._roster = roster
        self._session = Session.idle(roster)
        self._subscription: Subscription | None = None
        self._consumer: asyncio.Task[None] | None = None
        self._listeners: list[SnapshotListener] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> Session:
        """Return the current immutable session snapshot."""
        return self._session

    @property
    def is_subscribed(self) -> bool:
        return self._subscription is not None

    def add_listener(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register *listener* for new snapshots; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def validate(self, subject_ref: str, budget: float | None = None) -> tuple[str, float]:
        """Check a start request without touching the network.

        Returns:
            The normalized ``(subject_ref, budget)`` pair.

        Raises:
            InputValidationError: If the subject or budget is unacceptable.
        """
        ref = (subject_ref or "").strip()
        if not ref:
            raise InputValidationError("subject_ref", "Please enter a GitHub repo URL.")
        hosts = self._config.allowed_hosts
        if hosts and not any(host in ref for host in hosts):
            raise InputValidationError(
                "subject_ref", "Only GitHub repos are supported right now."
            )

        value = self._config.default_budget if budget is None else budget
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InputValidationError("budget", f"Budget must be a number, got {value!r}")
        value = float(value)
        if not math.isfinite(value) or not (
            self._config.min_budget <= value <= self._config.max_budget
        ):
            raise InputValidationError(
                "budget",
                f"Budget must be between {self._config.min_budget:g} "
                f"and {self._config.max_budget:g}",
            )
        return ref, value

    async def start(self, subject_ref: str, budget: float | None = None) -> Session:
        """Start a new session and open its event subscription.

        Any previous subscription is stopped first. A subscription that
        fails to open ends the new session with the transport error's
        message instead of raising.

        Raises:
            InputValidationError: If the request is rejected by ``validate``.
        """
        ref, value = self.validate(subject_ref, budget)
        await self.stop()

        self._install(Session.begin(ref, value, roster=self._roster))
        logger.info("Starting analysis of %s with budget %g", ref, value)

        subscription = self._source.subscribe(ref, value)
        self._subscription = subscription
        try:
            await subscription.open()
        except TransportError as exc:
            logger.warning("Could not open event stream: %s", exc)
            await subscription.close()
            if self._subscription is subscription:
                self._subscription = None
                self._install(fail(self._session, str(exc), ErrorKind.TRANSPORT))
            return self._session

        if self._subscription is not subscription:
            # stopped while the connection was opening
            await subscription.close()
            return self._session

        self._consumer = asyncio.create_task(
            self._consume(subscription), name=f"paystream-consumer:{ref}"
        )
        return self._session

    def dispatch(self, event: Any) -> Session:
        """Apply one parsed event and return the resulting snapshot.

        Closes the subscription once the session has finished.
        """
        previous = self._session
        session = reduce(previous, event)
        if session is not previous:
            if session.phase is not previous.phase:
                logger.info(
                    "Session phase %s -> %s", previous.phase.value, session.phase.value
                )
            self._install(session)
        if session.is_finished and self._subscription is not None:
            self._detach()
        return session

    async def stop(self) -> None:
        """Close the subscription.

        Safe from any phase. Once this returns no further event is
        dispatched, even if frames were already in flight.
        """
        consumer = self._consumer
        self._detach()
        if consumer is not None and consumer is not asyncio.current_task():
            await asyncio.wait({consumer})

    def reset(self) -> Session:
        """Discard the session and return to a fresh idle one.

        Call ``stop`` first if a subscription may still be live.
        """
        self._detach()
        self._install(Session.idle(self._roster))
        return self._session

    async def wait(self) -> Session:
        """Wait until the consumer task finishes and return the final snapshot."""
        consumer = self._consumer
        if consumer is not None and consumer is not asyncio.current_task():
            await asyncio.wait({consumer})
        return self._session

    def raise_for_error(self) -> None:
        """Raise the exception matching the error that ended the session, if any.

        Raises:
            TransportError: The stream could not open or dropped.
            ProtocolError: A frame could not be parsed.
            ApplicationError: The service reported a fatal error.
            InvalidStateError: The stream violated session ordering.
        """
        session = self._session
        if session.error is None:
            return
        error_cls = _ERROR_CLASSES.get(session.error_kind, ApplicationError)
        raise error_cls(session.error)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _install(self, session: Session) -> None:
        self._session = session
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                logger.warning("Snapshot listener failed", exc_info=True)

    def _detach(self) -> None:
        self._subscription = None
        consumer = self._consumer
        if (
            consumer is not None
            and not consumer.done()
            and consumer is not asyncio.current_task()
        ):
            consumer.cancel()

    def _terminate(self, message: str, kind: ErrorKind) -> None:
        self._install(fail(self._session, message, kind))
        self._detach()

    async def _consume(self, subscription: Subscription) -> None:
        try:
            async for frame in subscription.frames():
                if self._subscription is not subscription:
                    return
                try:
                    event = parse_frame(frame)
                except ProtocolError as exc:
                    logger.warning("Dropping session on malformed frame: %s", exc)
                    self._terminate(MALFORMED_FRAME_MESSAGE, ErrorKind.PROTOCOL)
                    return
                if event is None:
                    continue
                self.dispatch(event)
                if self._subscription is not subscription:
                    return
            if self._subscription is subscription:
                logger.warning("Event stream ended before the session finished")
                self._terminate(STREAM_CLOSED_MESSAGE, ErrorKind.TRANSPORT)
        except TransportError as exc:
            if self._subscription is subscription:
                logger.warning("Event stream dropped: %s", exc)
                self._terminate(str(exc), ErrorKind.TRANSPORT)
        finally:
            await subscription.close()
