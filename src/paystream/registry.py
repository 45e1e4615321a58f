"""Roster-keyed worker status registry.

AgentRegistry reduces worker start/complete/error events into one
AgentTask per roster slot. It is an immutable value: every update
returns a new registry, or the same instance when the update is a no-op.

Tasks are keyed by roster name, so a repeated start for a worker that is
still working replaces its record instead of appending a second one.
Display order always follows the roster, not arrival order.
"""

from __future__ import annotations

import logging
import types
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

from paystream.models.roster import DEFAULT_ROSTER, Roster
from paystream.models.session import AgentStatus, AgentTask

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class AgentRegistry:
    """Per-slot worker records for one session.

    Attributes:
        roster: The fixed roster this registry accepts names from.
        tasks: Observed tasks keyed by roster name. Slots with no entry
            are pending.
    """

    roster: Roster = DEFAULT_ROSTER
    tasks: Mapping[str, AgentTask] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tasks", types.MappingProxyType(dict(self.tasks)))

    def __len__(self) -> int:
        return len(self.tasks)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AgentRegistry):
            return NotImplemented
        return self.roster == other.roster and dict(self.tasks) == dict(other.tasks)

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def on_start(
        self, name: str, payment: float, allocation_percent: float
    ) -> AgentRegistry:
        """Mark *name* as working.

        Unknown names are rejected. A start for a worker that already
        finished is a late redelivery and is ignored; a start for a
        worker that is still working replaces its record.
        """
        slot = self.roster.slot(name)
        if slot is None:
            logger.warning("Ignoring start for worker not on roster: %r", name)
            return self

        current = self.tasks.get(name)
        if current is not None and current.is_terminal:
            logger.debug(
                "Ignoring start for %r: already %s", name, current.status.value
            )
            return self
        if current is not None:
            logger.info("Worker %r restarted; replacing its working record", name)

        task = AgentTask(
            name=name,
            status=AgentStatus.WORKING,
            key=slot.key,
            payment=payment,
            allocation_percent=allocation_percent,
        )
        return self._with(task)

    def on_complete(self, name: str, payment: float, receipt_id: str) -> AgentRegistry:
        """Upgrade the working record of *name* to complete.

        No-op when *name* is not currently working.
        """
        current = self._working(name, "complete")
        if current is None:
            return self
        return self._with(
            replace(
                current,
                status=AgentStatus.COMPLETE,
                payment=payment,
                receipt_id=receipt_id,
            )
        )

    def on_error(self, name: str) -> AgentRegistry:
        """Upgrade the working record of *name* to error.

        No-op when *name* is not currently working.
        """
        current = self._working(name, "error")
        if current is None:
            return self
        return self._with(replace(current, status=AgentStatus.ERROR))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, name: str) -> AgentTask | None:
        return self.tasks.get(name)

    def status_of(self, name: str) -> AgentStatus:
        """Return the status of *name*, PENDING when it has not started."""
        task = self.tasks.get(name)
        return task.status if task is not None else AgentStatus.PENDING

    def ordered(self) -> tuple[AgentTask, ...]:
        """Return observed tasks in roster order."""
        return tuple(
            self.tasks[slot.name] for slot in self.roster if slot.name in self.tasks
        )

    def working_count(self) -> int:
        return sum(1 for t in self.tasks.values() if t.status is AgentStatus.WORKING)

    def pending_names(self) -> tuple[str, ...]:
        return tuple(name for name in self.roster.names if name not in self.tasks)

    def all_terminal(self) -> bool:
        """True when every roster slot is complete or error."""
        return all(
            name in self.tasks and self.tasks[name].is_terminal
            for name in self.roster.names
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _working(self, name: str, outcome: str) -> AgentTask | None:
        current = self.tasks.get(name)
        if current is None or current.status is not AgentStatus.WORKING:
            logger.debug(
                "Ignoring %s for %r: not working (status=%s)",
                outcome,
                name,
                self.status_of(name).value,
            )
            return None
        return current

    def _with(self, task: AgentTask) -> AgentRegistry:
        tasks = dict(self.tasks)
        tasks[task.name] = task
        return AgentRegistry(roster=self.roster, tasks=tasks)
