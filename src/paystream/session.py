"""Session -- the root state aggregate of one analysis run.

A Session is an immutable snapshot. It is created fresh for each run and
replaced (never mutated) by the reducer as events arrive.
"""

from __future__ import annotations

import types
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from paystream.ledger import BudgetLedger
from paystream.models.events import SubjectMeta
from paystream.models.roster import DEFAULT_ROSTER, Roster
from paystream.models.session import AgentTask, ErrorKind, Phase, Refund
from paystream.registry import AgentRegistry


@dataclass(frozen=True, eq=False)
class Session:
    """Snapshot of one analysis run.

    Attributes:
        subject_ref: Reference of the analysed subject (a repository URL).
        phase: Current lifecycle phase.
        subject_meta: Subject metadata, set once when the subject is fetched.
        registry: Per-worker status records.
        ledger: Remaining budget and refund.
        share_id: Identifier of the persisted shareable report, set once.
        error: User-visible message of the error that ended the run.
        error_kind: Which kind of failure set ``error``.
        results: Worker result payloads keyed by roster key.
    """

    subject_ref: str = ""
    phase: Phase = Phase.IDLE
    subject_meta: SubjectMeta | None = None
    registry: AgentRegistry = field(default_factory=AgentRegistry)
    ledger: BudgetLedger = field(default_factory=BudgetLedger)
    share_id: str | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    results: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", types.MappingProxyType(dict(self.results)))

    @classmethod
    def idle(cls, roster: Roster = DEFAULT_ROSTER) -> Session:
        """Return an empty session waiting for a start."""
        return cls(registry=AgentRegistry(roster=roster))

    @classmethod
    def begin(
        cls, subject_ref: str, budget: float, roster: Roster = DEFAULT_ROSTER
    ) -> Session:
        """Return a fresh session for a run that is fetching its subject."""
        return cls(
            subject_ref=subject_ref,
            phase=Phase.FETCHING,
            registry=AgentRegistry(roster=roster),
            ledger=BudgetLedger.open(budget),
        )

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def roster(self) -> Roster:
        return self.registry.roster

    @property
    def agents(self) -> tuple[AgentTask, ...]:
        return self.registry.ordered()

    @property
    def budget(self) -> float:
        return self.ledger.initial_budget

    @property
    def remaining_budget(self) -> float:
        return self.ledger.remaining_budget

    @property
    def spent(self) -> float:
        return self.ledger.spent

    @property
    def refund(self) -> Refund | None:
        return self.ledger.refund

    @property
    def is_finished(self) -> bool:
        """True once the run completed or was terminated by an error."""
        return self.phase is Phase.COMPLETE or self.error is not None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable summary of the snapshot."""
        return {
            "subjectRef": self.subject_ref,
            "phase": self.phase.value,
            "meta": (
                {
                    "name": self.subject_meta.name,
                    "unitCount": self.subject_meta.unit_count,
                    "tags": list(self.subject_meta.tags),
                }
                if self.subject_meta is not None
                else None
            ),
            "agents": [
                {
                    "name": a.name,
                    "key": a.key,
                    "status": a.status.value,
                    "payment": a.payment,
                    "receiptId": a.receipt_id,
                    "allocation": a.allocation_percent,
                }
                for a in self.agents
            ],
            "budget": self.budget,
            "remainingBudget": self.remaining_budget,
            "refund": (
                {"amount": self.refund.amount, "receiptId": self.refund.receipt_id}
                if self.refund is not None
                else None
            ),
            "shareId": self.share_id,
            "error": self.error,
            "errorKind": self.error_kind.value if self.error_kind is not None else None,
            "data": dict(self.results),
        }
