"""Record types for session state.

Phase and AgentStatus enumerate the session and worker lifecycles.
AgentTask and Refund are frozen records; updates produce new instances.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class Phase(str, enum.Enum):
    """Lifecycle phase of an analysis session.

    Phases only move forward (idle -> fetching -> analyzing -> complete);
    a fatal error forces the session back to idle.
    """

    IDLE = "idle"
    FETCHING = "fetching"
    ANALYZING = "analyzing"
    COMPLETE = "complete"


class AgentStatus(str, enum.Enum):
    """Status of one roster slot.

    PENDING is implicit: a slot that has not been started has no
    AgentTask at all.
    """

    PENDING = "pending"
    WORKING = "working"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (AgentStatus.COMPLETE, AgentStatus.ERROR)


class ErrorKind(str, enum.Enum):
    """What ended a session with an error."""

    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    APPLICATION = "application"
    STATE = "state"


@dataclass(frozen=True)
class AgentTask:
    """Observed state of one worker.

    Attributes:
        name: Roster name of the worker.
        status: WORKING, COMPLETE or ERROR.
        key: Roster key that the worker's result is stored under.
        payment: Provisional estimate while working, final value once complete.
        receipt_id: Payment receipt identifier, set on completion.
        allocation_percent: Share of the budget allocated to this worker.
    """

    name: str
    status: AgentStatus
    key: str = ""
    payment: float = 0.0
    receipt_id: str = ""
    allocation_percent: float = 0.0

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal


@dataclass(frozen=True)
class Refund:
    """Terminal refund of the unspent budget."""

    amount: float
    receipt_id: str
