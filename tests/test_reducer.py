"""Tests for the pure session reducer.

Covers the phase lifecycle, worker and budget updates, the terminal
refund rule, fatal errors, and property tests over random event streams.
"""

from __future__ import annotations

import pytest
from hypothesis import given, settings

from paystream.models.events import (
    AnalysisComplete,
    FatalError,
    RefundIssued,
    ReportReady,
    SubjectFetchBegun,
    SubjectFetched,
    SubjectMeta,
    WorkerCompleted,
    WorkerFailed,
    WorkerStarted,
)
from paystream.models.roster import DEFAULT_ROSTER
from paystream.models.session import AgentStatus, ErrorKind, Phase
from paystream.reducer import fail, reduce
from paystream.session import Session

from tests.scenarios import ANALOGY, CODE_READER, INSIGHT, SIMPLIFIER
from tests.strategies import event_streams


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _apply(session: Session, *events) -> Session:
    for event in events:
        session = reduce(session, event)
    return session


def _start(agent: str) -> WorkerStarted:
    return WorkerStarted(agent=agent, payment=0.375, allocation=25)


def _complete(agent: str, remaining: float, receipt: str = "tx") -> WorkerCompleted:
    return WorkerCompleted(
        agent=agent, receipt_id=receipt, payment=0.375, remaining_budget=remaining
    )


_META = SubjectFetched(meta=SubjectMeta(name="repo-A", unit_count=12, tags=("Rust",)))


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

class TestScenarios:
    def test_full_run_completes_with_refund(self):
        """Four workers complete, the budget drains to zero, the refund lands."""
        session = Session.begin("repo-A", 1.5)
        session = _apply(
            session,
            _META,
            *[_start(name) for name in DEFAULT_ROSTER.names],
            _complete(CODE_READER, 1.05, "tx1"),
            _complete(SIMPLIFIER, 0.70, "tx2"),
            _complete(ANALOGY, 0.32, "tx3"),
            _complete(INSIGHT, 0.0, "tx4"),
            RefundIssued(amount=0.10, receipt_id="tx5"),
        )
        assert session.phase is Phase.COMPLETE
        assert session.remaining_budget == 0.0
        assert session.refund.amount == 0.10
        assert session.refund.receipt_id == "tx5"
        assert [t.status for t in session.agents] == [AgentStatus.COMPLETE] * 4
        assert session.error is None

    def test_failure_for_unstarted_worker_is_noop(self, analyzing):
        session = reduce(analyzing, _start(CODE_READER))
        after = reduce(session, WorkerFailed(agent=INSIGHT))
        assert after is session
        assert [t.name for t in after.agents] == [CODE_READER]

    def test_fatal_error_resets_to_idle_and_next_start_is_clean(self, analyzing):
        session = _apply(
            analyzing,
            _start(CODE_READER),
            _complete(CODE_READER, 1.2),
            FatalError(message="rate limited"),
        )
        assert session.phase is Phase.IDLE
        assert session.error == "rate limited"
        assert session.error_kind is ErrorKind.APPLICATION
        assert len(session.agents) == 1

        fresh = Session.begin("repo-B", 1.0)
        assert fresh.agents == ()
        assert fresh.refund is None
        assert fresh.error is None


# ---------------------------------------------------------------------------
# Phase transitions
# ---------------------------------------------------------------------------

class TestPhases:
    def test_begin_is_fetching(self):
        session = Session.begin("repo-A", 1.5)
        assert session.phase is Phase.FETCHING
        assert session.budget == session.remaining_budget == 1.5

    def test_fetch_begun_while_fetching_is_noop(self):
        session = Session.begin("repo-A", 1.5)
        assert reduce(session, SubjectFetchBegun()) is session

    def test_fetch_begun_from_idle(self):
        session = reduce(Session.idle(), SubjectFetchBegun())
        assert session.phase is Phase.FETCHING

    def test_subject_fetched_moves_to_analyzing(self):
        session = reduce(Session.begin("repo-A", 1.5), _META)
        assert session.phase is Phase.ANALYZING
        assert session.subject_meta.unit_count == 12
        assert session.subject_meta.tags == ("Rust",)

    def test_subject_fetched_records_event_meta(self):
        session = reduce(Session.begin("repo-A", 1.5), _META)
        assert session.subject_meta is _META.meta

    def test_second_subject_fetched_is_ignored(self, analyzing):
        assert reduce(analyzing, _META) is analyzing

    def test_worker_events_before_analyzing_are_ignored(self):
        session = Session.begin("repo-A", 1.5)
        assert reduce(session, _start(CODE_READER)) is session
        assert reduce(session, _complete(CODE_READER, 1.0)) is session

    def test_events_after_complete_are_ignored(self, analyzing):
        session = _apply(
            analyzing,
            *[_start(name) for name in DEFAULT_ROSTER.names],
            *[_complete(name, 0.5) for name in DEFAULT_ROSTER.names],
            RefundIssued(amount=0.5, receipt_id="r"),
        )
        assert session.phase is Phase.COMPLETE
        assert reduce(session, FatalError(message="late")) is session
        assert reduce(session, ReportReady(share_id="late")) is session

    def test_events_after_error_are_ignored(self, analyzing):
        session = reduce(analyzing, FatalError(message="boom"))
        assert reduce(session, _start(CODE_READER)) is session
        assert reduce(session, FatalError(message="again")).error == "boom"

    def test_unsupported_event_is_noop(self, analyzing):
        assert reduce(analyzing, object()) is analyzing

    def test_fail_helper(self, analyzing):
        session = fail(analyzing, "Lost connection", ErrorKind.TRANSPORT)
        assert session.phase is Phase.IDLE
        assert session.error_kind is ErrorKind.TRANSPORT
        assert session.is_finished


# ---------------------------------------------------------------------------
# Workers, budget and results
# ---------------------------------------------------------------------------

class TestWorkers:
    def test_completion_updates_remaining_budget(self, analyzing):
        session = _apply(analyzing, _start(CODE_READER), _complete(CODE_READER, 1.1))
        assert session.remaining_budget == 1.1
        assert session.spent == pytest.approx(0.4)

    def test_completion_of_unstarted_worker_leaves_budget(self, analyzing):
        session = reduce(analyzing, _complete(CODE_READER, 0.2))
        assert session is analyzing
        assert session.remaining_budget == 1.5

    def test_negative_remaining_budget_clamped(self, analyzing):
        session = _apply(analyzing, _start(CODE_READER), _complete(CODE_READER, -3.0))
        assert session.remaining_budget == 0.0

    def test_completion_stores_result_under_roster_key(self, analyzing):
        event = WorkerCompleted(
            agent=INSIGHT,
            receipt_id="tx",
            payment=0.3,
            remaining_budget=1.2,
            result={"redFlags": ["no tests"]},
        )
        session = _apply(analyzing, _start(INSIGHT), event)
        assert session.results["insight"] == {"redFlags": ["no tests"]}

    def test_analysis_complete_replaces_results(self, analyzing):
        session = reduce(analyzing, AnalysisComplete(data={"codeReader": {"a": 1}}))
        assert dict(session.results) == {"codeReader": {"a": 1}}

    def test_analysis_complete_while_idle_is_ignored(self):
        session = Session.idle()
        assert reduce(session, AnalysisComplete(data={"x": 1})) is session

    def test_report_ready_sets_share_id_once(self, analyzing):
        session = reduce(analyzing, ReportReady(share_id="first"))
        assert session.share_id == "first"
        assert reduce(session, ReportReady(share_id="second")) is session

    def test_input_session_is_not_mutated(self, analyzing):
        reduce(analyzing, _start(CODE_READER))
        assert analyzing.agents == ()


# ---------------------------------------------------------------------------
# Refund
# ---------------------------------------------------------------------------

class TestRefund:
    def test_refund_before_all_terminal_fails_session(self, analyzing):
        session = _apply(
            analyzing, _start(CODE_READER), _complete(CODE_READER, 1.1)
        )
        after = reduce(session, RefundIssued(amount=1.1, receipt_id="r"))
        assert after.phase is Phase.IDLE
        assert after.error_kind is ErrorKind.STATE
        assert after.refund is None

    def test_refund_with_failed_workers_completes(self, analyzing):
        session = _apply(
            analyzing,
            *[_start(name) for name in DEFAULT_ROSTER.names],
            _complete(CODE_READER, 1.1),
            *[WorkerFailed(agent=name) for name in DEFAULT_ROSTER.names[1:]],
            RefundIssued(amount=1.1, receipt_id="r"),
        )
        assert session.phase is Phase.COMPLETE
        assert session.refund.amount == 1.1


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

_ORDER = {AgentStatus.PENDING: 0, AgentStatus.WORKING: 1, AgentStatus.COMPLETE: 2, AgentStatus.ERROR: 2}


class TestProperties:
    @given(events=event_streams)
    @settings(max_examples=200)
    def test_invariants_hold_for_any_stream(self, events):
        session = Session.begin("repo-A", 1.5)
        for event in events:
            before = session
            session = reduce(session, event)

            assert len(session.agents) <= len(session.roster)
            assert 0.0 <= session.remaining_budget <= before.remaining_budget

            for name in session.roster.names:
                old = before.registry.status_of(name)
                new = session.registry.status_of(name)
                if old.is_terminal:
                    assert new is old
                else:
                    assert _ORDER[new] >= _ORDER[old]

            if before.refund is not None:
                assert session.refund == before.refund
            elif session.refund is not None:
                assert session.registry.all_terminal()
