"""Pure session reducer.

``reduce(session, event)`` returns the session that results from
applying one stream event. It never mutates its input, never raises, and
returns the *same* session object when the event does not change
anything, so callers can detect no-ops by identity.

Events whose phase precondition does not hold are ignored. Once a session
has finished (complete or errored) every further event is ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from paystream.exceptions import InvalidStateError
from paystream.models.events import (
    AnalysisComplete,
    FatalError,
    RefundIssued,
    ReportReady,
    SubjectFetchBegun,
    SubjectFetched,
    WorkerCompleted,
    WorkerFailed,
    WorkerStarted,
)
from paystream.models.session import ErrorKind, Phase
from paystream.session import Session

logger = logging.getLogger(__name__)


def fail(
    session: Session, message: str, kind: ErrorKind = ErrorKind.APPLICATION
) -> Session:
    """Return *session* terminated with a user-visible error message."""
    return replace(session, phase=Phase.IDLE, error=message, error_kind=kind)


def reduce(session: Session, event: Any) -> Session:
    """Apply one event to *session* and return the resulting session."""
    handler = _HANDLERS.get(type(event))
    if handler is None:
        logger.debug("Ignoring unsupported event %r", event)
        return session
    if session.error is not None or session.phase is Phase.COMPLETE:
        logger.debug(
            "Ignoring %s: session already finished", getattr(event, "type", event)
        )
        return session
    return handler(session, event)


def _skip(session: Session, event: Any) -> Session:
    logger.debug("Ignoring %s in phase %s", event.type, session.phase.value)
    return session


def _on_fetch_begun(session: Session, event: SubjectFetchBegun) -> Session:
    if session.phase is Phase.FETCHING:
        return session
    if session.phase is not Phase.IDLE:
        return _skip(session, event)
    return replace(session, phase=Phase.FETCHING)


def _on_subject_fetched(session: Session, event: SubjectFetched) -> Session:
    if session.phase is not Phase.FETCHING:
        return _skip(session, event)
    return replace(session, subject_meta=event.meta, phase=Phase.ANALYZING)


def _on_worker_started(session: Session, event: WorkerStarted) -> Session:
    if session.phase is not Phase.ANALYZING:
        return _skip(session, event)
    registry = session.registry.on_start(event.agent, event.payment, event.allocation)
    if registry is session.registry:
        return session
    return replace(session, registry=registry)


def _on_worker_completed(session: Session, event: WorkerCompleted) -> Session:
    if session.phase is not Phase.ANALYZING:
        return _skip(session, event)
    registry = session.registry.on_complete(
        event.agent, event.payment, event.receipt_id
    )
    if registry is session.registry:
        return session

    results = session.results
    task = registry.get(event.agent)
    key = event.key or (task.key if task is not None else "")
    if key and event.result is not None:
        results = {**results, key: event.result}

    return replace(
        session,
        registry=registry,
        ledger=session.ledger.apply_completion(event.remaining_budget),
        results=results,
    )


def _on_worker_failed(session: Session, event: WorkerFailed) -> Session:
    if session.phase is not Phase.ANALYZING:
        return _skip(session, event)
    registry = session.registry.on_error(event.agent)
    if registry is session.registry:
        return session
    return replace(session, registry=registry)


def _on_report_ready(session: Session, event: ReportReady) -> Session:
    if session.share_id is not None:
        return session
    return replace(session, share_id=event.share_id)


def _on_analysis_complete(session: Session, event: AnalysisComplete) -> Session:
    if session.phase is Phase.IDLE:
        return _skip(session, event)
    return replace(session, results=event.data)


def _on_refund_issued(session: Session, event: RefundIssued) -> Session:
    try:
        ledger = session.ledger.apply_refund(
            event.amount,
            event.receipt_id,
            slots_terminal=session.registry.all_terminal(),
        )
    except InvalidStateError as exc:
        unfinished = [
            name
            for name in session.roster.names
            if not session.registry.status_of(name).is_terminal
        ]
        logger.warning(
            "Refund %s arrived with unfinished workers %s",
            event.receipt_id,
            unfinished,
        )
        return fail(session, str(exc), ErrorKind.STATE)
    return replace(session, ledger=ledger, phase=Phase.COMPLETE)


def _on_fatal_error(session: Session, event: FatalError) -> Session:
    return fail(session, event.message)


_HANDLERS: dict[type, Callable[[Session, Any], Session]] = {
    SubjectFetchBegun: _on_fetch_begun,
    SubjectFetched: _on_subject_fetched,
    WorkerStarted: _on_worker_started,
    WorkerCompleted: _on_worker_completed,
    WorkerFailed: _on_worker_failed,
    ReportReady: _on_report_ready,
    AnalysisComplete: _on_analysis_complete,
    RefundIssued: _on_refund_issued,
    FatalError: _on_fatal_error,
}
