"""Tests for the clash state machine."""

from __future__ import annotations

import pytest

from clashkeeper.core.exceptions import NotActiveError
from clashkeeper.engine.encounter import EncounterSnapshot, EncounterState


@pytest.fixture
def encounter() -> EncounterState:
    """Provide an active clash with two combatants."""
    state = EncounterState()
    state.start()
    state.enroll("a")
    state.enroll("b")
    return state


class TestLifecycle:
    """Tests for start and end."""

    def test_initially_inactive(self) -> None:
        """Test a new state has no clash."""
        state = EncounterState()
        assert state.active is False
        assert state.round_number == 0
        assert state.combatants == []

    def test_start_resets(self, encounter: EncounterState) -> None:
        """Test starting again discards the roster."""
        encounter.mark_turn_done("a")
        encounter.new_round()

        encounter.start()

        assert encounter.active is True
        assert encounter.round_number == 1
        assert encounter.combatants == []
        assert encounter.turns_taken == set()

    def test_end_clears(self, encounter: EncounterState) -> None:
        """Test ending clears both collections."""
        encounter.mark_turn_done("a")
        encounter.end()

        assert encounter.active is False
        assert encounter.round_number == 0
        assert encounter.combatants == []
        assert encounter.turns_taken == set()


class TestRoster:
    """Tests for enroll and unenroll."""

    def test_join_order(self, encounter: EncounterState) -> None:
        """Test combatants are kept in join order."""
        encounter.enroll("c")
        assert encounter.combatants == ["a", "b", "c"]

    def test_duplicate_enroll_is_noop(self, encounter: EncounterState) -> None:
        """Test enrolling twice keeps one entry."""
        assert encounter.enroll("a") is False
        assert encounter.combatants == ["a", "b"]

    def test_enroll_requires_active(self) -> None:
        """Test enrolling without a clash fails."""
        with pytest.raises(NotActiveError):
            EncounterState().enroll("a")

    def test_unenroll(self, encounter: EncounterState) -> None:
        """Test removing a combatant also forgets their turn."""
        encounter.mark_turn_done("a")

        assert encounter.unenroll("a") is True
        assert encounter.combatants == ["b"]
        assert "a" not in encounter.turns_taken

    def test_unenroll_absent_is_noop(self, encounter: EncounterState) -> None:
        """Test removing an unknown id does nothing."""
        assert encounter.unenroll("zzz") is False

    def test_unenroll_without_clash(self) -> None:
        """Test unenroll never requires an active clash."""
        assert EncounterState().unenroll("a") is False

    def test_collections_are_copies(self, encounter: EncounterState) -> None:
        """Test callers cannot mutate internal state."""
        encounter.combatants.append("x")
        encounter.turns_taken.add("x")
        assert encounter.combatants == ["a", "b"]
        assert encounter.turns_taken == set()


class TestTurns:
    """Tests for turn tracking and rounds."""

    def test_mark_turn_done(self, encounter: EncounterState) -> None:
        """Test marking records the combatant."""
        encounter.mark_turn_done("a")
        assert encounter.has_acted("a") is True
        assert encounter.pending() == ["b"]

    def test_mark_unenrolled_id(self, encounter: EncounterState) -> None:
        """Test marking does not check membership."""
        encounter.mark_turn_done("ghost")
        assert encounter.has_acted("ghost") is True
        assert encounter.is_enrolled("ghost") is False

    def test_mark_requires_active(self) -> None:
        """Test marking without a clash fails."""
        with pytest.raises(NotActiveError):
            EncounterState().mark_turn_done("a")

    def test_new_round(self, encounter: EncounterState) -> None:
        """Test a new round forgets who acted and keeps the roster."""
        encounter.mark_turn_done("a")
        encounter.mark_turn_done("b")

        assert encounter.new_round() == 2
        assert encounter.turns_taken == set()
        assert encounter.combatants == ["a", "b"]

    def test_new_round_requires_active(self) -> None:
        """Test a new round without a clash fails."""
        with pytest.raises(NotActiveError):
            EncounterState().new_round()

    def test_snapshot(self, encounter: EncounterState) -> None:
        """Test the snapshot is an immutable copy."""
        encounter.mark_turn_done("b")
        snapshot = encounter.snapshot()

        assert snapshot == EncounterSnapshot(
            active=True,
            round_number=1,
            combatants=("a", "b"),
            turns_taken=frozenset({"b"}),
        )
