"""Tests for the per-combatant resource ledger."""

from __future__ import annotations

import itertools

import pytest

from clashkeeper.core.exceptions import ValidationError
from clashkeeper.engine.pool import ResourcePool
from clashkeeper.models.combatant import Baseline, CombatantIdentity
from clashkeeper.models.enums import DamageKind, Resource
from clashkeeper.models.results import Delta, SetFull, SetZero


DEFAULT_MAXIMA = {
    Resource.HP: 100,
    Resource.MP: 50,
    Resource.IP: 100,
    Resource.ARMOR: 20,
    Resource.BARRIER: 15,
}


@pytest.fixture
def pool() -> ResourcePool:
    """Provide a pool with default maxima."""
    return ResourcePool(CombatantIdentity.fresh("42", "Mira"), dict(DEFAULT_MAXIMA))


class TestCreation:
    """Tests for pool construction."""

    def test_fresh_pool(self, pool: ResourcePool) -> None:
        """Test HP/MP/IP start full and defenses start empty."""
        assert pool.current(Resource.HP) == 100
        assert pool.current(Resource.MP) == 50
        assert pool.current(Resource.IP) == 100
        assert pool.current(Resource.ARMOR) == 0
        assert pool.current(Resource.BARRIER) == 0
        assert pool.maximum(Resource.ARMOR) == 20
        assert pool.seeded_from_baseline is False

    def test_missing_maximum(self) -> None:
        """Test every resource needs a maximum."""
        maxima = dict(DEFAULT_MAXIMA)
        del maxima[Resource.IP]
        with pytest.raises(ValidationError):
            ResourcePool(CombatantIdentity.fresh("1"), maxima)

    def test_negative_maximum(self) -> None:
        """Test negative maxima are rejected."""
        with pytest.raises(ValidationError):
            ResourcePool(CombatantIdentity.fresh("1"), {**DEFAULT_MAXIMA, Resource.HP: -1})

    def test_from_baseline(self, sample_baseline: Baseline) -> None:
        """Test a pool seeded from a sheet takes its name and maxima."""
        pool = ResourcePool.from_baseline(CombatantIdentity.fresh("7", "user"), sample_baseline)

        assert pool.identity.character_name == "Gandalf"
        assert pool.current(Resource.HP) == sample_baseline.max_hp
        assert pool.current(Resource.ARMOR) == 0
        assert pool.seeded_from_baseline is True


class TestAdjustments:
    """Tests for delta, full and zero adjustments."""

    def test_delta_floors_at_zero(self, pool: ResourcePool) -> None:
        """Test a large negative delta stops at zero."""
        change = pool.apply_delta(Resource.MP, -80)

        assert change.old == 50
        assert change.new == 0
        assert change.delta == -50
        assert pool.current(Resource.MP) == 0

    @pytest.mark.parametrize("resource", list(Resource))
    def test_delta_may_exceed_maximum(self, pool: ResourcePool, resource: Resource) -> None:
        """Test positive deltas are not clamped to the maximum."""
        pool.set_full(resource)
        pool.apply_delta(resource, 30)
        assert pool.current(resource) == pool.maximum(resource) + 30

    def test_set_full_and_zero(self, pool: ResourcePool) -> None:
        """Test full restores the maximum and zero empties."""
        pool.set_zero(Resource.HP)
        assert pool.current(Resource.HP) == 0
        pool.set_full(Resource.HP)
        assert pool.current(Resource.HP) == 100

    def test_apply_dispatches_adjustments(self, pool: ResourcePool) -> None:
        """Test the tagged variant routes to the right operation."""
        assert pool.apply(Resource.ARMOR, SetFull()).new == 20
        assert pool.apply(Resource.ARMOR, Delta(amount=-5)).new == 15
        assert pool.apply(Resource.ARMOR, SetZero()).new == 0

    def test_floor_holds_for_any_sequence(self, pool: ResourcePool) -> None:
        """Test no sequence of adjustments leaves a pool negative."""
        steps = [Delta(amount=-70), SetFull(), Delta(amount=25), SetZero(), Delta(amount=-1)]
        for resource, adjustment in itertools.product(Resource, steps):
            pool.apply(resource, adjustment)
            assert all(pool.current(r) >= 0 for r in Resource)


class TestDamage:
    """Tests for absorption and true damage."""

    def test_absorption_overflow(self, pool: ResourcePool) -> None:
        """Test 15 damage against 10 Armor overflows 5 into HP."""
        pool.apply_delta(Resource.ARMOR, 10)
        pool.apply_delta(Resource.HP, -50)

        overflow = pool.apply_absorbed_damage(Resource.ARMOR, 15)
        assert pool.current(Resource.ARMOR) == 0
        assert overflow == 5

        pool.apply_true_damage(overflow)
        assert pool.current(Resource.HP) == 45

    def test_exact_depletion_has_no_overflow(self, pool: ResourcePool) -> None:
        """Test damage equal to the pool leaves zero overflow."""
        pool.apply_delta(Resource.BARRIER, 12)
        assert pool.apply_absorbed_damage(Resource.BARRIER, 12) == 0
        assert pool.current(Resource.BARRIER) == 0
        assert pool.current(Resource.HP) == 100

    def test_partial_absorption(self, pool: ResourcePool) -> None:
        """Test damage below the pool only drains it."""
        pool.apply_delta(Resource.ARMOR, 20)
        assert pool.apply_absorbed_damage(Resource.ARMOR, 8) == 0
        assert pool.current(Resource.ARMOR) == 12

    @pytest.mark.parametrize("resource", [Resource.HP, Resource.MP, Resource.IP])
    def test_non_absorbing_resource(self, pool: ResourcePool, resource: Resource) -> None:
        """Test only Armor and Barrier absorb."""
        with pytest.raises(ValidationError):
            pool.apply_absorbed_damage(resource, 5)

    def test_negative_damage_rejected(self, pool: ResourcePool) -> None:
        """Test negative damage amounts are contract violations."""
        with pytest.raises(ValidationError):
            pool.apply_absorbed_damage(Resource.ARMOR, -1)
        with pytest.raises(ValidationError):
            pool.apply_true_damage(-1)

    def test_true_damage_bypasses_defenses(self, pool: ResourcePool) -> None:
        """Test true damage ignores Armor and Barrier."""
        pool.defend()
        pool.apply_true_damage(30)

        assert pool.current(Resource.HP) == 70
        assert pool.current(Resource.ARMOR) == 20
        assert pool.current(Resource.BARRIER) == 15

    def test_true_damage_floors_hp(self, pool: ResourcePool) -> None:
        """Test HP never drops below zero."""
        assert pool.apply_true_damage(500).new == 0

    def test_take_damage_cascades(self, pool: ResourcePool) -> None:
        """Test the combined operation reports both steps in order."""
        pool.apply_delta(Resource.ARMOR, 5)

        report = pool.take_damage(DamageKind.ARMOR, 15)

        assert report.overflow == 10
        assert [c.resource for c in report.changes] == [Resource.ARMOR, Resource.HP]
        assert pool.current(Resource.HP) == 90

    def test_take_damage_without_overflow_skips_hp(self, pool: ResourcePool) -> None:
        """Test HP is untouched when the absorbing pool holds."""
        pool.defend()
        report = pool.take_damage(DamageKind.BARRIER, 10)

        assert [c.resource for c in report.changes] == [Resource.BARRIER]
        assert pool.current(Resource.BARRIER) == 5

    def test_take_damage_defend_first(self, pool: ResourcePool) -> None:
        """Test a defending target raises defenses before absorbing."""
        report = pool.take_damage(DamageKind.ARMOR, 25, defend_first=True)

        assert report.defended is True
        assert report.overflow == 5
        assert pool.current(Resource.ARMOR) == 0
        assert pool.current(Resource.BARRIER) == 15
        assert pool.current(Resource.HP) == 95

    def test_take_true_damage(self, pool: ResourcePool) -> None:
        """Test true damage through the combined operation."""
        report = pool.take_damage(DamageKind.TRUE, 12)
        assert report.overflow == 0
        assert pool.current(Resource.HP) == 88


class TestTurnLifecycle:
    """Tests for defend, end of turn, rest and new sheets."""

    def test_defend_is_additive(self, pool: ResourcePool) -> None:
        """Test repeated defends stack past the maximum."""
        pool.defend()
        pool.defend()
        assert pool.current(Resource.ARMOR) == 40
        assert pool.current(Resource.BARRIER) == 30

    @pytest.mark.parametrize("armor_before", [0, 3, 57])
    def test_defend_then_end_turn(self, pool: ResourcePool, armor_before: int) -> None:
        """Test defend followed by end of turn always leaves zero defenses."""
        pool.apply_delta(Resource.ARMOR, armor_before)
        pool.defend()
        pool.end_turn()
        assert pool.current(Resource.ARMOR) == 0
        assert pool.current(Resource.BARRIER) == 0

    def test_rest_keeps_defenses(self, pool: ResourcePool) -> None:
        """Test rest refills HP and MP only."""
        pool.apply_delta(Resource.HP, -60)
        pool.apply_delta(Resource.MP, -50)
        pool.apply_delta(Resource.IP, -10)
        pool.defend()

        pool.rest()

        assert pool.current(Resource.HP) == 100
        assert pool.current(Resource.MP) == 50
        assert pool.current(Resource.IP) == 90
        assert pool.current(Resource.ARMOR) == 20

    def test_apply_baseline_resets(self, pool: ResourcePool, sample_baseline: Baseline) -> None:
        """Test a new sheet refills pools and drops defenses."""
        pool.defend()
        pool.apply_delta(Resource.HP, -40)
        sheet = sample_baseline.model_copy(update={"max_hp": 140, "character_name": "Radagast"})

        pool.apply_baseline(sheet)

        assert pool.identity.character_name == "Radagast"
        assert pool.current(Resource.HP) == 140
        assert pool.maximum(Resource.HP) == 140
        assert pool.current(Resource.ARMOR) == 0
        assert pool.seeded_from_baseline is True

    def test_snapshot_is_a_copy(self, pool: ResourcePool) -> None:
        """Test snapshots do not follow later mutations."""
        snapshot = pool.snapshot()
        pool.apply_delta(Resource.HP, -10)

        assert snapshot.current(Resource.HP) == 100
        assert snapshot.maximum(Resource.HP) == 100
        assert snapshot.character_name == "Mira"
