"""Pure projections of a session snapshot for display.

Nothing here holds state: labels, tab availability and the animated
payment counter are recomputed from the snapshot (and elapsed time) on
every tick.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from paystream.session import Session

COUNTER_DURATION = 7.0

# tab id -> result key that must be present for the tab to be shown
TAB_SOURCES: dict[str, str] = {
    "architecture": "codeReader",
    "techstack": "codeReader",
    "insights": "insight",
    "ceodeck": "analogy",
    "devdocs": "simplifier",
}

TAB_LABELS: dict[str, str] = {
    "architecture": "Architecture",
    "techstack": "Tech Stack",
    "insights": "Insights",
    "ceodeck": "CEO Deck",
    "devdocs": "Dev Docs",
}


def orchestrator_status(session: Session) -> str:
    """Headline label for the orchestrator panel."""
    working = session.registry.working_count()
    if working > 1:
        return "PHASE 2 · PARALLEL DISPATCH"
    if working == 1:
        return "PHASE 1 · BOOT SEQUENCE"
    if len(session.registry) > 0:
        return "ALL AGENTS COMPLETE"
    return "INITIALIZING..."


def available_tabs(results: Mapping[str, Any]) -> dict[str, bool]:
    """Return which result tabs have data to show."""
    return {tab: bool(results.get(key)) for tab, key in TAB_SOURCES.items()}


def counter_value(
    target: float,
    elapsed: float,
    *,
    running: bool = True,
    duration: float = COUNTER_DURATION,
) -> float:
    """Value of the animated payment counter after *elapsed* seconds.

    Counts from 0 up to *target* over *duration* seconds with an
    ease-out-quad curve. A stopped counter or a zero target reads 0.
    """
    if not running or not target:
        return 0.0
    if duration <= 0:
        return target
    progress = min(max(elapsed, 0.0) / duration, 1.0)
    return target * (1 - (1 - progress) ** 2)
