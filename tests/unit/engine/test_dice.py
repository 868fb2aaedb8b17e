"""Tests for dice rolling and two-die resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from clashkeeper.core.exceptions import DiceRollError
from clashkeeper.engine.dice import DiceRoller, RandomRoller, RollResolver
from clashkeeper.models.enums import RollVerdict


if TYPE_CHECKING:
    from conftest import ScriptedRoller


class TestDiceRoller:
    """Tests for the d20-backed DiceRoller."""

    def test_faces_in_range(self) -> None:
        """Test every face lands in [1, sides]."""
        roller = DiceRoller()
        for sides in (1, 4, 6, 12, 20):
            for _ in range(25):
                assert 1 <= roller.roll_die(sides) <= sides

    def test_one_sided_die(self) -> None:
        """Test a d1 always shows 1."""
        assert DiceRoller().roll_die(1) == 1

    def test_seed_reproducible(self) -> None:
        """Test seeding gives repeatable sequences."""
        first = DiceRoller(seed=42).roll_die(20)
        second = DiceRoller(seed=42).roll_die(20)
        assert first == second

    @pytest.mark.parametrize("sides", [0, -6])
    def test_invalid_sides(self, sides: int) -> None:
        """Test non-positive sizes are rejected."""
        with pytest.raises(DiceRollError):
            DiceRoller().roll_die(sides)

    def test_satisfies_protocol(self) -> None:
        """Test DiceRoller is a RandomRoller."""
        assert isinstance(DiceRoller(), RandomRoller)


class TestRollResolver:
    """Tests for outcome classification."""

    def test_fumble_always_misses(self, roller: ScriptedRoller) -> None:
        """Test double ones fumble regardless of gate and modifier."""
        roller.queue(1, 1)
        outcome = RollResolver(roller).resolve(10, 10, modifier=50, gate=-5)

        assert outcome.fumble is True
        assert outcome.critical is False
        assert outcome.hit is False
        assert outcome.verdict is RollVerdict.FUMBLE

    def test_double_six_is_critical(self, roller: ScriptedRoller) -> None:
        """Test a pair of sixes hits regardless of gate."""
        roller.queue(6, 6)
        outcome = RollResolver(roller).resolve(6, 6, modifier=0, gate=10)

        assert outcome.critical is True
        assert outcome.hit is True
        assert outcome.verdict is RollVerdict.CRITICAL

    def test_low_pair_is_not_critical(self, roller: ScriptedRoller) -> None:
        """Test a matching pair below six is an ordinary roll."""
        roller.queue(5, 5)
        outcome = RollResolver(roller).resolve(10, 10, modifier=0, gate=5)

        assert outcome.critical is False
        assert outcome.hit is False

    def test_gate_must_be_exceeded_by_both(self, roller: ScriptedRoller) -> None:
        """Test 3 and 2 against gate 4 miss."""
        roller.queue(3, 2)
        outcome = RollResolver(roller).resolve(6, 6, modifier=0, gate=4)

        assert outcome.hit is False
        assert outcome.fumble is False
        assert outcome.critical is False
        assert outcome.verdict is RollVerdict.MISS

    def test_one_die_on_gate_misses(self, roller: ScriptedRoller) -> None:
        """Test a face equal to the gate does not clear it."""
        roller.queue(8, 4)
        assert RollResolver(roller).resolve(10, 10, gate=4).hit is False

    def test_hit_damage(self, roller: ScriptedRoller) -> None:
        """Test damage is the high roll plus modifier."""
        roller.queue(7, 9)
        outcome = RollResolver(roller).resolve(10, 12, modifier=3, gate=4)

        assert outcome.hit is True
        assert outcome.high_roll == 9
        assert outcome.damage == 12
        assert outcome.total == 16
        assert outcome.verdict is RollVerdict.HIT

    def test_negative_modifier_can_make_negative_damage(self, roller: ScriptedRoller) -> None:
        """Test damage is reported as computed, without clamping."""
        roller.queue(3, 2)
        assert RollResolver(roller).resolve(4, 4, modifier=-5).damage == -2

    def test_rolls_each_die_once_in_order(self, roller: ScriptedRoller) -> None:
        """Test die sizes are passed through in order."""
        roller.queue(2, 3)
        RollResolver(roller).resolve(8, 12)
        assert roller.calls == [8, 12]

    @pytest.mark.parametrize(("d1", "d2"), [(0, 6), (6, 0), (-1, 6)])
    def test_invalid_sizes_roll_nothing(self, roller: ScriptedRoller, d1: int, d2: int) -> None:
        """Test bad sizes are rejected before any die is thrown."""
        with pytest.raises(DiceRollError):
            RollResolver(roller).resolve(d1, d2)
        assert roller.call_count == 0

    def test_default_roller(self) -> None:
        """Test the resolver falls back to a DiceRoller."""
        resolver = RollResolver()
        assert isinstance(resolver.roller, DiceRoller)
        outcome = resolver.resolve(6, 8)
        assert 1 <= outcome.die1 <= 6
        assert 1 <= outcome.die2 <= 8
