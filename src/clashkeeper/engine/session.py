"""Composition root for one engine instance.

A ClashSession owns the registry, clash state, resolver and pending store
and wires them into an ActionCoordinator. Nothing in the engine is a
module-level global; hosts that need several independent clashes (one per
channel, say) simply build several sessions.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from clashkeeper.core.config import Settings, get_settings
from clashkeeper.core.logging import get_logger
from clashkeeper.engine.coordinator import ActionCoordinator
from clashkeeper.engine.dice import RandomRoller, RollResolver
from clashkeeper.engine.encounter import EncounterState
from clashkeeper.engine.pending import PendingActionStore
from clashkeeper.engine.registry import CombatantRegistry


if TYPE_CHECKING:
    from clashkeeper.importers.sheets import SheetImporter
    from clashkeeper.storage.base import BaselineStore

logger = get_logger(__name__)


@dataclass
class ClashSession:
    """Every stateful engine component of one clash."""

    registry: CombatantRegistry
    encounter: EncounterState
    resolver: RollResolver
    pending: PendingActionStore
    coordinator: ActionCoordinator

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        *,
        roller: RandomRoller | None = None,
        store: BaselineStore | None = None,
        importer: SheetImporter | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> ClashSession:
        """Build a session from settings and optional collaborators.

        Args:
            settings: Application settings; the cached settings when None.
            roller: Die source; a d20-backed DiceRoller when None.
            store: Baseline persistence; in-memory defaults only when None.
            importer: External sheet importer, if any.
            clock: Time source for pending-action expiry.
        """
        settings = settings or get_settings()
        game = settings.game

        registry = CombatantRegistry(game, store=store)
        encounter = EncounterState()
        resolver = RollResolver(roller)
        if clock is None:
            pending = PendingActionStore(game.pending_action_ttl_seconds)
        else:
            pending = PendingActionStore(game.pending_action_ttl_seconds, clock=clock)
        coordinator = ActionCoordinator(
            registry,
            encounter,
            resolver,
            pending,
            game_settings=game,
            importer=importer,
        )
        logger.info(
            "Clash session created",
            persistence=store is not None,
            sheet_import=importer is not None,
        )
        return cls(
            registry=registry,
            encounter=encounter,
            resolver=resolver,
            pending=pending,
            coordinator=coordinator,
        )


__all__ = ["ClashSession"]
