"""Data models: session records, wire events, roster, and configuration."""

from paystream.models.config import SessionConfig
from paystream.models.events import (
    AnalysisComplete,
    Event,
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
from paystream.models.roster import DEFAULT_ROSTER, Roster, RosterSlot
from paystream.models.session import AgentStatus, AgentTask, ErrorKind, Phase, Refund

__all__ = [
    "SessionConfig",
    "Event",
    "SubjectMeta",
    "SubjectFetchBegun",
    "SubjectFetched",
    "WorkerStarted",
    "WorkerCompleted",
    "WorkerFailed",
    "ReportReady",
    "AnalysisComplete",
    "RefundIssued",
    "FatalError",
    "DEFAULT_ROSTER",
    "Roster",
    "RosterSlot",
    "AgentStatus",
    "AgentTask",
    "ErrorKind",
    "Phase",
    "Refund",
]
