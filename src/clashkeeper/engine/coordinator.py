"""Top-level orchestration of rolls, damage and clash bookkeeping.

The ActionCoordinator is what the command dispatcher calls. It looks up
(or lazily creates) pools through the CombatantRegistry, rolls through
the RollResolver, mutates pools and the EncounterState, and returns the
structured result records from ``clashkeeper.models.results``.

Failures are raised before anything is mutated wherever the action allows
it. Multi-target damage is applied target by target with no rollback: if
a later target fails, earlier targets keep their damage.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from clashkeeper.core.config import GameSettings
from clashkeeper.core.exceptions import (
    InsufficientResourceError,
    NoTargetsError,
    NotActiveError,
    ValidationError,
)
from clashkeeper.core.logging import get_logger
from clashkeeper.engine.dice import RollResolver
from clashkeeper.engine.encounter import EncounterState
from clashkeeper.engine.pending import PendingActionStore
from clashkeeper.engine.pool import ResourcePool
from clashkeeper.engine.registry import CombatantRegistry
from clashkeeper.models.combatant import Baseline
from clashkeeper.models.enums import DamageKind, FollowUpChoice, Resource
from clashkeeper.models.results import (
    Adjustment,
    ClashEntry,
    ClashResult,
    DirectedDamageResult,
    FollowUpResult,
    LedgerResult,
    PendingAttackResult,
    PoolSnapshot,
    SelfRollResult,
    SheetResult,
    TargetDamage,
)


if TYPE_CHECKING:
    from clashkeeper.importers.sheets import SheetImporter

logger = get_logger(__name__)


@dataclass(frozen=True)
class Participant:
    """A combatant reference as delivered by the transport.

    Attributes:
        combatant_id: Opaque transport id.
        display_name: Transport display name, if known.
    """

    combatant_id: str
    display_name: str | None = None


class ActionCoordinator:
    """Runs every externally visible action against the engine state."""

    def __init__(
        self,
        registry: CombatantRegistry,
        encounter: EncounterState,
        resolver: RollResolver,
        pending: PendingActionStore,
        *,
        game_settings: GameSettings | None = None,
        importer: SheetImporter | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            registry: Owner of all resource pools.
            encounter: The clash state machine.
            resolver: Two-die roll resolver.
            pending: Store for deferred GM attacks.
            game_settings: Defaults for cast cost and damage kind.
            importer: Optional external sheet importer.
        """
        self.registry = registry
        self.encounter = encounter
        self.resolver = resolver
        self.pending = pending
        self._settings = game_settings or GameSettings()
        self._importer = importer

    @property
    def default_damage_kind(self) -> DamageKind:
        """Damage kind used when a command does not name one."""
        return DamageKind(self._settings.default_damage_kind)

    def _pool(self, who: Participant, *, load_baseline: bool = False) -> ResourcePool:
        return self.registry.get_or_create(
            who.combatant_id,
            who.display_name,
            load_baseline=load_baseline,
        )

    # =========================================================================
    # Sheets and views
    # =========================================================================

    def view(self, who: Participant) -> PoolSnapshot:
        """Current pools of ``who``."""
        return self._pool(who).snapshot()

    def rename(self, who: Participant, character_name: str) -> PoolSnapshot:
        """Change the character name of ``who``."""
        name = character_name.strip()
        if not name:
            raise ValidationError("Character name must not be empty", field_name="character_name")
        self._pool(who)
        return self.registry.rename(who.combatant_id, name).snapshot()

    def set_sheet(
        self,
        who: Participant,
        baseline: Baseline,
        *,
        source: str = "command",
    ) -> SheetResult:
        """Install a character sheet and save it when a store is configured.

        HP, MP and IP are refilled to the new maxima; Armor and Barrier drop to 0.
        """
        pool = self.registry.apply_baseline(who.combatant_id, baseline, who.display_name)

        persisted = False
        store = self.registry.store
        if store is not None:
            store.save_baseline(pool.identity, baseline)
            persisted = True

        logger.info(
            "Character sheet set",
            combatant_id=who.combatant_id,
            source=source,
            persisted=persisted,
        )
        return SheetResult(
            combatant_id=who.combatant_id,
            baseline=baseline,
            pool=pool.snapshot(),
            source=source,
            persisted=persisted,
        )

    def import_sheet(self, who: Participant, reference: str) -> SheetResult:
        """Fetch a sheet through the external importer and install it.

        Raises:
            ValidationError: If no importer is configured.
            SheetImportError: Propagated from the importer; nothing is mutated.
        """
        if self._importer is None:
            raise ValidationError("Sheet import is not configured", field_name="importer")
        current_name = self._pool(who).identity.character_name
        baseline = self._importer.fetch_baseline(reference, fallback_name=current_name)
        return self.set_sheet(who, baseline, source="import")

    # =========================================================================
    # Pool actions
    # =========================================================================

    def adjust(self, who: Participant, resource: Resource, adjustment: Adjustment) -> LedgerResult:
        """Apply a full/zero/delta adjustment to one pool."""
        pool = self._pool(who)
        change = pool.apply(resource, adjustment)
        return LedgerResult(
            combatant_id=pool.combatant_id,
            character_name=pool.identity.character_name,
            action=f"adjust_{resource.value.lower()}",
            changes=[change],
        )

    def defend(self, who: Participant) -> LedgerResult:
        """Raise Armor and Barrier by their maxima."""
        pool = self._pool(who)
        return LedgerResult(
            combatant_id=pool.combatant_id,
            character_name=pool.identity.character_name,
            action="defend",
            changes=pool.defend(),
        )

    def end_turn(self, who: Participant) -> LedgerResult:
        """Drop Armor and Barrier to zero.

        When a clash is active and ``who`` is enrolled, their turn is also
        marked as done.
        """
        pool = self._pool(who)
        changes = pool.end_turn()
        marked = False
        if self.encounter.active and self.encounter.is_enrolled(who.combatant_id):
            self.encounter.mark_turn_done(who.combatant_id)
            marked = True
        return LedgerResult(
            combatant_id=pool.combatant_id,
            character_name=pool.identity.character_name,
            action="end_turn",
            changes=changes,
            turn_marked=marked,
        )

    def rest(self, who: Participant) -> LedgerResult:
        """Refill HP and MP."""
        pool = self._pool(who)
        return LedgerResult(
            combatant_id=pool.combatant_id,
            character_name=pool.identity.character_name,
            action="rest",
            changes=pool.rest(),
        )

    # =========================================================================
    # Rolls
    # =========================================================================

    def attack(
        self,
        who: Participant,
        die1_size: int,
        die2_size: int,
        modifier: int,
        gate: int,
    ) -> SelfRollResult:
        """Roll an attack for ``who``."""
        pool = self._pool(who)
        outcome = self.resolver.resolve(die1_size, die2_size, modifier, gate)
        return SelfRollResult(
            combatant_id=pool.combatant_id,
            character_name=pool.identity.character_name,
            action="attack",
            outcome=outcome,
        )

    def cast(
        self,
        who: Participant,
        die1_size: int,
        die2_size: int,
        modifier: int,
        gate: int,
        cost: int | None = None,
    ) -> SelfRollResult:
        """Spend MP and roll a cast for ``who``.

        Raises:
            InsufficientResourceError: If current MP is below ``cost``;
                no MP is spent and no dice are rolled.
        """
        cost = self._settings.default_cast_cost if cost is None else cost
        if cost < 0:
            raise ValidationError("Cast cost must not be negative", field_name="cost", invalid_value=cost)
        self.resolver.validate_sizes(die1_size, die2_size)

        pool = self._pool(who)
        with pool.lock:
            available = pool.current(Resource.MP)
            if available < cost:
                raise InsufficientResourceError(
                    f"Not enough MP: need {cost}, have {available}",
                    resource=Resource.MP.value,
                    required=cost,
                    available=available,
                )
            mp_change = pool.apply_delta(Resource.MP, -cost)

        outcome = self.resolver.resolve(die1_size, die2_size, modifier, gate)
        return SelfRollResult(
            combatant_id=pool.combatant_id,
            character_name=pool.identity.character_name,
            action="cast",
            outcome=outcome,
            mp_change=mp_change,
        )

    @staticmethod
    def _require_targets(targets: Sequence[Participant]) -> list[Participant]:
        unique = list({t.combatant_id: t for t in targets}.values())
        if not unique:
            raise NoTargetsError("No targets: mention at least one combatant")
        return unique

    def directed_damage(
        self,
        targets: Sequence[Participant],
        die1_size: int,
        die2_size: int,
        modifier: int,
        gate: int,
        kind: DamageKind | None = None,
    ) -> DirectedDamageResult:
        """Roll once and apply the damage to every target on a hit.

        Raises:
            NoTargetsError: If ``targets`` is empty; nothing is rolled.
        """
        unique = self._require_targets(targets)
        kind = kind or self.default_damage_kind
        outcome = self.resolver.resolve(die1_size, die2_size, modifier, gate)

        if not outcome.hit:
            return DirectedDamageResult(outcome=outcome, kind=kind, applied=False)

        reports: list[TargetDamage] = []
        for target in unique:
            pool = self._pool(target)
            reports.append(pool.take_damage(kind, max(0, outcome.damage)))
        return DirectedDamageResult(outcome=outcome, kind=kind, applied=True, targets=reports)

    def gm_attack(
        self,
        targets: Sequence[Participant],
        die1_size: int,
        die2_size: int,
        modifier: int,
        gate: int,
        kind: DamageKind | None = None,
    ) -> PendingAttackResult:
        """Roll once; on a hit, hold the damage until each target answers.

        Raises:
            NoTargetsError: If ``targets`` is empty; nothing is rolled.
        """
        unique = self._require_targets(targets)
        kind = kind or self.default_damage_kind
        outcome = self.resolver.resolve(die1_size, die2_size, modifier, gate)
        target_ids = [t.combatant_id for t in unique]

        for target in unique:
            self._pool(target)

        if not outcome.hit:
            return PendingAttackResult(outcome=outcome, kind=kind, target_ids=target_ids)

        action = self.pending.create(outcome, kind, target_ids)
        return PendingAttackResult(
            outcome=outcome,
            kind=kind,
            target_ids=target_ids,
            token=action.token,
            expires_at=action.expires_at,
        )

    def respond(self, who: Participant, token: str, choice: FollowUpChoice) -> FollowUpResult:
        """Apply a deferred GM attack to ``who`` using the stored damage.

        Raises:
            PendingActionError: If the token is unknown, expired, or ``who``
                is not an outstanding target.
        """
        action = self.pending.claim(token, who.combatant_id)
        pool = self._pool(who)
        report = pool.take_damage(
            action.kind,
            max(0, action.damage),
            defend_first=choice is FollowUpChoice.DEFEND,
        )
        return FollowUpResult(
            token=token,
            choice=choice,
            target=report,
            remaining_target_ids=list(action.remaining),
        )

    # =========================================================================
    # Clash lifecycle
    # =========================================================================

    def _clash_result(self, action: str, **changes: list[str]) -> ClashResult:
        entries = []
        for combatant_id in self.encounter.combatants:
            pool = self.registry.get(combatant_id)
            entries.append(
                ClashEntry(
                    combatant_id=combatant_id,
                    has_acted=self.encounter.has_acted(combatant_id),
                    pool=pool.snapshot() if pool is not None else None,
                )
            )
        return ClashResult(
            action=action,
            active=self.encounter.active,
            round_number=self.encounter.round_number,
            entries=entries,
            **changes,
        )

    def clash_start(self) -> ClashResult:
        """Start a new clash, discarding any previous roster."""
        self.encounter.start()
        return self._clash_result("start")

    def clash_end(self) -> ClashResult:
        """End the clash."""
        self.encounter.end()
        return self._clash_result("end")

    def clash_enroll(self, participants: Sequence[Participant]) -> ClashResult:
        """Add participants, loading stored sheets for combatants without one.

        Raises:
            NotActiveError: If no clash is active.
            NoTargetsError: If nobody was mentioned.
        """
        if not self.encounter.active:
            raise NotActiveError("No clash is active", details={"action": "enroll"})
        unique = self._require_targets(participants)
        added: list[str] = []
        for who in unique:
            if self.encounter.is_enrolled(who.combatant_id):
                continue
            self._pool(who, load_baseline=True)
            if self.encounter.enroll(who.combatant_id):
                added.append(who.combatant_id)
        return self._clash_result("add", added=added)

    def clash_unenroll(self, participants: Sequence[Participant]) -> ClashResult:
        """Remove participants from the roster."""
        unique = self._require_targets(participants)
        removed = [who.combatant_id for who in unique if self.encounter.unenroll(who.combatant_id)]
        return self._clash_result("remove", removed=removed)

    def clash_list(self) -> ClashResult:
        """Roster with pools and who has acted.

        Raises:
            NotActiveError: If no clash is active.
        """
        if not self.encounter.active:
            raise NotActiveError("No clash is active", details={"action": "list"})
        return self._clash_result("list")

    def mark_turn_done(self, participants: Sequence[Participant]) -> ClashResult:
        """Mark participants as having acted this round.

        Raises:
            NotActiveError: If no clash is active.
        """
        if not self.encounter.active:
            raise NotActiveError("No clash is active", details={"action": "done"})
        unique = self._require_targets(participants)
        for who in unique:
            self.encounter.mark_turn_done(who.combatant_id)
        return self._clash_result("done", marked=[who.combatant_id for who in unique])

    def new_round(self) -> ClashResult:
        """Clear who has acted; defenses are left untouched.

        Raises:
            NotActiveError: If no clash is active.
        """
        self.encounter.new_round()
        return self._clash_result("round")


__all__ = [
    "Participant",
    "ActionCoordinator",
]
