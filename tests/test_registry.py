"""Tests for AgentRegistry: roster-keyed worker records."""

from __future__ import annotations

import pytest

from paystream.models.roster import DEFAULT_ROSTER, Roster, RosterSlot
from paystream.models.session import AgentStatus
from paystream.registry import AgentRegistry

from tests.scenarios import ANALOGY, CODE_READER, INSIGHT, SIMPLIFIER


@pytest.fixture
def registry() -> AgentRegistry:
    return AgentRegistry()


class TestOnStart:
    def test_start_creates_working_task(self, registry):
        reg = registry.on_start(CODE_READER, 0.3, 20)
        task = reg.get(CODE_READER)
        assert task.status is AgentStatus.WORKING
        assert task.key == "codeReader"
        assert task.payment == 0.3
        assert task.allocation_percent == 20
        assert task.receipt_id == ""

    def test_start_does_not_mutate_original(self, registry):
        registry.on_start(CODE_READER, 0.3, 20)
        assert len(registry) == 0

    def test_unknown_name_is_noop(self, registry):
        assert registry.on_start("Rogue Agent", 0.3, 20) is registry

    def test_duplicate_start_replaces_working_entry(self, registry):
        reg = registry.on_start(CODE_READER, 0.3, 20).on_start(CODE_READER, 0.4, 25)
        assert len(reg) == 1
        assert reg.get(CODE_READER).payment == 0.4
        assert reg.get(CODE_READER).allocation_percent == 25

    def test_start_after_complete_is_ignored(self, registry):
        reg = registry.on_start(CODE_READER, 0.3, 20).on_complete(CODE_READER, 0.3, "tx1")
        assert reg.on_start(CODE_READER, 0.3, 20) is reg
        assert reg.status_of(CODE_READER) is AgentStatus.COMPLETE

    def test_start_after_error_is_ignored(self, registry):
        reg = registry.on_start(INSIGHT, 0.3, 20).on_error(INSIGHT)
        assert reg.on_start(INSIGHT, 0.3, 20) is reg


class TestOnCompleteAndError:
    def test_complete_upgrades_working(self, registry):
        reg = registry.on_start(ANALOGY, 0.3, 20).on_complete(ANALOGY, 0.25, "0.0.1@9")
        task = reg.get(ANALOGY)
        assert task.status is AgentStatus.COMPLETE
        assert task.payment == 0.25
        assert task.receipt_id == "0.0.1@9"
        assert task.allocation_percent == 20

    def test_complete_for_unstarted_is_noop(self, registry):
        assert registry.on_complete(ANALOGY, 0.3, "tx") is registry

    def test_second_complete_is_noop(self, registry):
        reg = registry.on_start(ANALOGY, 0.3, 20).on_complete(ANALOGY, 0.3, "tx1")
        assert reg.on_complete(ANALOGY, 0.9, "tx2") is reg
        assert reg.get(ANALOGY).receipt_id == "tx1"

    def test_error_upgrades_working(self, registry):
        reg = registry.on_start(SIMPLIFIER, 0.3, 20).on_error(SIMPLIFIER)
        assert reg.status_of(SIMPLIFIER) is AgentStatus.ERROR
        assert reg.get(SIMPLIFIER).is_terminal

    def test_error_for_completed_is_noop(self, registry):
        reg = registry.on_start(SIMPLIFIER, 0.3, 20).on_complete(SIMPLIFIER, 0.3, "tx")
        assert reg.on_error(SIMPLIFIER) is reg

    def test_error_for_unknown_is_noop(self, registry):
        assert registry.on_error("Rogue Agent") is registry


class TestQueries:
    def test_ordered_follows_roster_not_arrival(self, registry):
        reg = (
            registry.on_start(INSIGHT, 0.3, 20)
            .on_start(CODE_READER, 0.3, 20)
            .on_start(ANALOGY, 0.3, 20)
        )
        assert [t.name for t in reg.ordered()] == [CODE_READER, ANALOGY, INSIGHT]

    def test_status_of_unstarted_is_pending(self, registry):
        assert registry.status_of(CODE_READER) is AgentStatus.PENDING

    def test_pending_names(self, registry):
        reg = registry.on_start(SIMPLIFIER, 0.3, 20)
        assert reg.pending_names() == (CODE_READER, ANALOGY, INSIGHT)

    def test_working_count(self, registry):
        reg = registry.on_start(SIMPLIFIER, 0.3, 20).on_start(ANALOGY, 0.3, 20)
        assert reg.working_count() == 2
        assert reg.on_error(ANALOGY).working_count() == 1

    def test_all_terminal(self, registry):
        reg = registry
        for name in DEFAULT_ROSTER.names:
            assert not reg.all_terminal()
            reg = reg.on_start(name, 0.3, 20)
        assert not reg.all_terminal()
        for name in DEFAULT_ROSTER.names[:-1]:
            reg = reg.on_complete(name, 0.3, f"tx-{name}")
        assert not reg.all_terminal()
        assert reg.on_error(DEFAULT_ROSTER.names[-1]).all_terminal()

    def test_tasks_mapping_is_read_only(self, registry):
        reg = registry.on_start(CODE_READER, 0.3, 20)
        with pytest.raises(TypeError):
            reg.tasks["x"] = None  # type: ignore[index]

    def test_equality_by_value(self, registry):
        a = registry.on_start(CODE_READER, 0.3, 20)
        b = AgentRegistry().on_start(CODE_READER, 0.3, 20)
        assert a == b
        assert a != registry


class TestCustomRoster:
    def test_custom_roster_names(self):
        roster = Roster(slots=(RosterSlot("Solo", "solo"),))
        reg = AgentRegistry(roster=roster).on_start("Solo", 1.0, 100)
        assert reg.on_complete("Solo", 1.0, "tx").all_terminal()
        assert reg.on_start(CODE_READER, 0.3, 20) is reg

    def test_duplicate_roster_names_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            Roster(slots=(RosterSlot("A", "a"), RosterSlot("A", "b")))

    def test_roster_position(self):
        assert DEFAULT_ROSTER.position(ANALOGY) == 2
        with pytest.raises(KeyError):
            DEFAULT_ROSTER.position("Rogue Agent")
        assert ANALOGY in DEFAULT_ROSTER
        assert "Rogue Agent" not in DEFAULT_ROSTER
