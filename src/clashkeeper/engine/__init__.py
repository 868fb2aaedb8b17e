"""Combat resource and encounter engine.

Submodules:
    dice: Die rolling (d20 library) and two-die roll resolution
    pool: Per-combatant resource ledger with absorption cascade
    registry: Lazily created pools keyed by transport id
    encounter: Clash state machine (roster, turns taken, rounds)
    pending: Server-held deferred GM attacks
    coordinator: Actions consumed by the command dispatcher
    session: Composition root wiring the above together

Example:
    >>> from clashkeeper.engine import ClashSession, Participant
    >>> session = ClashSession.create()
    >>> result = session.coordinator.attack(Participant("42", "Mira"), 10, 10, 2, 4)
    >>> result.outcome.damage >= 3
    True
"""

from __future__ import annotations

from clashkeeper.engine.coordinator import ActionCoordinator, Participant
from clashkeeper.engine.dice import DiceRoller, RandomRoller, RollResolver
from clashkeeper.engine.encounter import EncounterSnapshot, EncounterState
from clashkeeper.engine.pending import PendingAction, PendingActionStore
from clashkeeper.engine.pool import ResourcePool
from clashkeeper.engine.registry import CombatantRegistry
from clashkeeper.engine.session import ClashSession


__all__ = [
    # Dice
    "RandomRoller",
    "DiceRoller",
    "RollResolver",
    # Ledger
    "ResourcePool",
    "CombatantRegistry",
    # Clash
    "EncounterState",
    "EncounterSnapshot",
    "PendingAction",
    "PendingActionStore",
    # Orchestration
    "Participant",
    "ActionCoordinator",
    "ClashSession",
]
