"""PayStream: live session state for budgeted multi-agent codebase analysis.

A SessionController consumes the analysis service's event stream and
keeps an immutable Session snapshot of phase, workers, budget and refund.
The diagram package turns model-generated Mermaid text into SVG, or into
its sanitized source when the engine rejects it.
"""

from paystream._version import __version__

# Session core
from paystream.controller import SessionController
from paystream.session import Session
from paystream.registry import AgentRegistry
from paystream.ledger import BudgetLedger
from paystream.reducer import reduce

# Models
from paystream.models.config import SessionConfig
from paystream.models.roster import DEFAULT_ROSTER, Roster, RosterSlot
from paystream.models.session import AgentStatus, AgentTask, ErrorKind, Phase, Refund
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

# Event sources
from paystream.stream import (
    EventSource,
    FileEventSource,
    HttpEventSource,
    MemoryEventSource,
    Subscription,
    parse_frame,
)

# Diagrams
from paystream.diagram import (
    DiagramRenderer,
    DiagramView,
    FallbackRender,
    RenderConfig,
    RenderOptions,
    RenderResult,
    SvgRender,
    configure_once,
    sanitize,
)

# Shared reports
from paystream.reports import ReportClient, SharedReport, share_url

# Exceptions
from paystream.exceptions import (
    ApplicationError,
    InputValidationError,
    InvalidStateError,
    PayStreamError,
    ProtocolError,
    RenderError,
    ReportNotFoundError,
    TransportError,
)

__all__ = [
    "__version__",
    # Session core
    "SessionController",
    "Session",
    "AgentRegistry",
    "BudgetLedger",
    "reduce",
    # Models
    "SessionConfig",
    "DEFAULT_ROSTER",
    "Roster",
    "RosterSlot",
    "AgentStatus",
    "AgentTask",
    "ErrorKind",
    "Phase",
    "Refund",
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
    # Event sources
    "EventSource",
    "Subscription",
    "HttpEventSource",
    "MemoryEventSource",
    "FileEventSource",
    "parse_frame",
    # Diagrams
    "sanitize",
    "DiagramRenderer",
    "DiagramView",
    "RenderResult",
    "SvgRender",
    "FallbackRender",
    "RenderConfig",
    "RenderOptions",
    "configure_once",
    # Shared reports
    "ReportClient",
    "SharedReport",
    "share_url",
    # Exceptions
    "PayStreamError",
    "InputValidationError",
    "TransportError",
    "ProtocolError",
    "ApplicationError",
    "RenderError",
    "InvalidStateError",
    "ReportNotFoundError",
]
