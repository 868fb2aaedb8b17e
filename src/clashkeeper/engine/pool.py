"""Per-combatant resource ledger.

A ResourcePool tracks current and maximum values for HP, MP, IP, Armor
and Barrier. Every mutation floors at zero; nothing is clamped to the
maximum except the explicit "full" operation, so healing, buffs and
stacked defends can overshoot.

Damage against Armor or Barrier is absorbed first and the overflow is
then applied to HP as true damage. ``take_damage`` runs both steps under
the pool's lock so no reader ever sees the absorbing pool drained without
the matching HP loss.
"""

from __future__ import annotations

import threading

from clashkeeper.core.exceptions import ValidationError
from clashkeeper.core.logging import get_logger
from clashkeeper.models.combatant import Baseline, CombatantIdentity
from clashkeeper.models.enums import DamageKind, Resource
from clashkeeper.models.results import (
    Adjustment,
    Delta,
    PoolSnapshot,
    ResourceChange,
    ResourceLevel,
    SetFull,
    SetZero,
    TargetDamage,
)


logger = get_logger(__name__)

# Pools that start full; Armor and Barrier start empty until a defend.
_FILLED_ON_RESET = (Resource.HP, Resource.MP, Resource.IP)


def _require_non_negative(amount: int, field_name: str) -> None:
    if amount < 0:
        raise ValidationError(
            f"{field_name} must not be negative",
            field_name=field_name,
            invalid_value=amount,
        )


class ResourcePool:
    """Mutable ledger of one combatant's pools.

    Attributes:
        identity: Who owns the pool.
        lock: Re-entrant lock guarding multi-step mutations.
        seeded_from_baseline: True once a sheet (stored, set or imported)
            has supplied the maxima.
    """

    def __init__(self, identity: CombatantIdentity, maxima: dict[Resource, int]) -> None:
        """Initialize a pool with HP/MP/IP full and Armor/Barrier empty.

        Args:
            identity: Owner of the pool.
            maxima: Maximum for every resource.

        Raises:
            ValidationError: If a resource is missing or a maximum is negative.
        """
        missing = [r for r in Resource if r not in maxima]
        if missing:
            raise ValidationError(
                "Every resource needs a maximum",
                field_name="maxima",
                invalid_value=[str(r) for r in missing],
            )
        for resource, value in maxima.items():
            _require_non_negative(value, f"max {resource}")

        self.identity = identity
        self.lock = threading.RLock()
        self.seeded_from_baseline = False
        self._maximum: dict[Resource, int] = dict(maxima)
        self._current: dict[Resource, int] = {}
        self._refill()

    @classmethod
    def from_baseline(cls, identity: CombatantIdentity, baseline: Baseline) -> ResourcePool:
        """Create a pool seeded from a stored sheet."""
        identity.character_name = baseline.character_name
        pool = cls(identity, baseline.maxima())
        pool.seeded_from_baseline = True
        return pool

    def _refill(self) -> None:
        for resource in Resource:
            self._current[resource] = (
                self._maximum[resource] if resource in _FILLED_ON_RESET else 0
            )

    # ---------------------------------------------------------------------
    # Queries
    # ---------------------------------------------------------------------

    @property
    def combatant_id(self) -> str:
        """Id of the owning combatant."""
        return self.identity.combatant_id

    def current(self, resource: Resource) -> int:
        """Current value of ``resource``."""
        return self._current[resource]

    def maximum(self, resource: Resource) -> int:
        """Maximum value of ``resource``."""
        return self._maximum[resource]

    def snapshot(self) -> PoolSnapshot:
        """Immutable copy of every pool for presentation."""
        with self.lock:
            return PoolSnapshot(
                combatant_id=self.identity.combatant_id,
                display_name=self.identity.display_name,
                character_name=self.identity.character_name,
                levels={
                    r: ResourceLevel(current=self._current[r], maximum=self._maximum[r])
                    for r in Resource
                },
            )

    def _change(self, resource: Resource, old: int) -> ResourceChange:
        return ResourceChange(
            resource=resource,
            old=old,
            new=self._current[resource],
            maximum=self._maximum[resource],
        )

    # ---------------------------------------------------------------------
    # Adjustments
    # ---------------------------------------------------------------------

    def apply_delta(self, resource: Resource, amount: int) -> ResourceChange:
        """Add a signed amount, flooring at zero with no upper clamp."""
        with self.lock:
            old = self._current[resource]
            self._current[resource] = max(0, old + amount)
            return self._change(resource, old)

    def set_full(self, resource: Resource) -> ResourceChange:
        """Set ``resource`` to its maximum."""
        with self.lock:
            old = self._current[resource]
            self._current[resource] = self._maximum[resource]
            return self._change(resource, old)

    def set_zero(self, resource: Resource) -> ResourceChange:
        """Empty ``resource``."""
        with self.lock:
            old = self._current[resource]
            self._current[resource] = 0
            return self._change(resource, old)

    def apply(self, resource: Resource, adjustment: Adjustment) -> ResourceChange:
        """Apply a parsed full/zero/delta adjustment."""
        match adjustment:
            case SetFull():
                return self.set_full(resource)
            case SetZero():
                return self.set_zero(resource)
            case Delta(amount=amount):
                return self.apply_delta(resource, amount)
        raise ValidationError(
            "Unsupported adjustment",
            field_name="adjustment",
            invalid_value=repr(adjustment),
        )

    # ---------------------------------------------------------------------
    # Damage
    # ---------------------------------------------------------------------

    def apply_absorbed_damage(self, resource: Resource, amount: int) -> int:
        """Soak damage with Armor or Barrier.

        The caller must apply the returned overflow to HP with
        ``apply_true_damage``; ``take_damage`` does both.

        Args:
            resource: Armor or Barrier.
            amount: Incoming damage, not negative.

        Returns:
            Damage left over after the pool is exhausted.

        Raises:
            ValidationError: If ``resource`` cannot absorb or ``amount`` is negative.
        """
        if not resource.is_absorption:
            raise ValidationError(
                "Only Armor and Barrier absorb damage",
                field_name="resource",
                invalid_value=str(resource),
            )
        _require_non_negative(amount, "damage")
        with self.lock:
            current = self._current[resource]
            overflow = max(0, amount - current)
            self._current[resource] = max(0, current - amount)
            return overflow

    def apply_true_damage(self, amount: int) -> ResourceChange:
        """Reduce HP directly, bypassing Armor and Barrier."""
        _require_non_negative(amount, "damage")
        with self.lock:
            old = self._current[Resource.HP]
            self._current[Resource.HP] = max(0, old - amount)
            return self._change(Resource.HP, old)

    def take_damage(
        self,
        kind: DamageKind,
        amount: int,
        *,
        defend_first: bool = False,
    ) -> TargetDamage:
        """Resolve incoming damage of ``kind`` against this pool.

        Args:
            kind: Armor or Barrier damage cascades overflow to HP; true damage hits HP.
            amount: Incoming damage, not negative.
            defend_first: Raise defenses before absorbing.

        Returns:
            TargetDamage with the ordered pool changes and overflow.
        """
        _require_non_negative(amount, "damage")
        with self.lock:
            changes: list[ResourceChange] = []
            if defend_first:
                changes.extend(self.defend())

            overflow = 0
            absorbing = kind.absorbing_resource
            if absorbing is None:
                changes.append(self.apply_true_damage(amount))
            else:
                old = self._current[absorbing]
                overflow = self.apply_absorbed_damage(absorbing, amount)
                changes.append(self._change(absorbing, old))
                if overflow > 0:
                    changes.append(self.apply_true_damage(overflow))

            logger.info(
                "Damage applied",
                combatant_id=self.combatant_id,
                kind=kind,
                damage=amount,
                overflow=overflow,
                hp=self._current[Resource.HP],
            )
            return TargetDamage(
                combatant_id=self.combatant_id,
                character_name=self.identity.character_name,
                kind=kind,
                damage=amount,
                defended=defend_first,
                changes=changes,
                overflow=overflow,
            )

    # ---------------------------------------------------------------------
    # Turn lifecycle
    # ---------------------------------------------------------------------

    def defend(self) -> list[ResourceChange]:
        """Add max Armor and max Barrier on top of whatever is left."""
        with self.lock:
            return [
                self.apply_delta(Resource.ARMOR, self._maximum[Resource.ARMOR]),
                self.apply_delta(Resource.BARRIER, self._maximum[Resource.BARRIER]),
            ]

    def end_turn(self) -> list[ResourceChange]:
        """Drop Armor and Barrier to zero."""
        with self.lock:
            return [self.set_zero(Resource.ARMOR), self.set_zero(Resource.BARRIER)]

    def rest(self) -> list[ResourceChange]:
        """Refill HP and MP; Armor and Barrier are left as they are."""
        with self.lock:
            return [self.set_full(Resource.HP), self.set_full(Resource.MP)]

    def apply_baseline(self, baseline: Baseline) -> None:
        """Replace the maxima and reset current values as a fresh sheet."""
        with self.lock:
            self.identity.character_name = baseline.character_name
            self._maximum = baseline.maxima()
            self._refill()
            self.seeded_from_baseline = True


__all__ = [
    "ResourcePool",
]
