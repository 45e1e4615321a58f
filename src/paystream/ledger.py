"""Budget ledger for a session.

The analysis service is the single source of truth for the remaining
budget: the ledger records the value reported with each completion and
never recomputes it from payments.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from paystream.exceptions import InvalidStateError
from paystream.models.session import Refund

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BudgetLedger:
    """Remaining budget and terminal refund of one session.

    Attributes:
        initial_budget: Budget the session was started with.
        remaining_budget: Last remaining budget reported by the stream.
        refund: Terminal refund, recorded at most once.
    """

    initial_budget: float = 0.0
    remaining_budget: float = 0.0
    refund: Refund | None = None

    @classmethod
    def open(cls, budget: float) -> BudgetLedger:
        """Create a ledger for a session started with *budget*."""
        return cls(initial_budget=budget, remaining_budget=budget)

    @property
    def spent(self) -> float:
        return max(0.0, self.initial_budget - self.remaining_budget)

    def apply_completion(self, remaining_budget: float) -> BudgetLedger:
        """Record the remaining budget reported with a worker completion.

        The remaining budget never grows and never goes below zero: a
        negative value is clamped, a larger value is ignored.
        """
        if remaining_budget < 0:
            logger.warning(
                "Clamping negative remaining budget %s to 0", remaining_budget
            )
            remaining_budget = 0.0
        if remaining_budget > self.remaining_budget:
            logger.warning(
                "Ignoring remaining budget increase %s -> %s",
                self.remaining_budget,
                remaining_budget,
            )
            return self
        return replace(self, remaining_budget=remaining_budget)

    def apply_refund(
        self, amount: float, receipt_id: str, *, slots_terminal: bool
    ) -> BudgetLedger:
        """Record the terminal refund.

        Args:
            amount: Refunded amount.
            receipt_id: Receipt identifier of the refund transfer.
            slots_terminal: Whether every roster slot has finished.

        Raises:
            InvalidStateError: If a roster slot has not finished yet.
        """
        if self.refund is not None:
            logger.debug("Ignoring repeated refund %s", receipt_id)
            return self
        if not slots_terminal:
            raise InvalidStateError(
                "Refund issued before every worker reached a terminal state"
            )
        return replace(self, refund=Refund(amount=amount, receipt_id=receipt_id))
