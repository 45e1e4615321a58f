"""Worker roster definitions.

The roster is the fixed, externally-defined set of workers a session
expects to hear from. Slots are matched by exact name; order is the
display order.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class RosterSlot:
    """One named worker in the roster.

    Attributes:
        name: Exact worker name used on the wire (``agent`` field).
        key: Result key the worker's payload is stored under.
        role: Short human-readable description of what the worker produces.
    """

    name: str
    key: str
    role: str = ""


@dataclass(frozen=True)
class Roster:
    """Ordered, fixed-size collection of roster slots."""

    slots: tuple[RosterSlot, ...]

    def __post_init__(self) -> None:
        names = [s.name for s in self.slots]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicate roster names: {names}")
        if not isinstance(self.slots, tuple):
            object.__setattr__(self, "slots", tuple(self.slots))

    def __len__(self) -> int:
        return len(self.slots)

    def __iter__(self) -> Iterator[RosterSlot]:
        return iter(self.slots)

    def __contains__(self, name: object) -> bool:
        return any(s.name == name for s in self.slots)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(s.name for s in self.slots)

    def slot(self, name: str) -> RosterSlot | None:
        """Return the slot for *name*, or None if it is not on the roster."""
        for s in self.slots:
            if s.name == name:
                return s
        return None

    def position(self, name: str) -> int:
        """Return the display position of *name*.

        Raises:
            KeyError: If *name* is not on the roster.
        """
        for i, s in enumerate(self.slots):
            if s.name == name:
                return i
        raise KeyError(name)


DEFAULT_ROSTER = Roster(
    slots=(
        RosterSlot("Code Reader Agent", "codeReader", "Architecture · Map"),
        RosterSlot("Simplifier Agent", "simplifier", "Flow · Docs · Glossary"),
        RosterSlot("Analogy Agent", "analogy", "CEO Deck · Analogies"),
        RosterSlot("Insight Agent", "insight", "Red Flags · Complexity"),
    )
)
