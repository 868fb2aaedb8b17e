"""Registry of known combatants and their live resource pools.

Pools are created lazily the first time a combatant is referenced and
live for the lifetime of the registry. A baseline store, when configured,
is consulted only when a combatant joins a clash and their pool has not
yet been seeded by a sheet.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

from clashkeeper.core.config import GameSettings
from clashkeeper.core.logging import get_logger
from clashkeeper.engine.pool import ResourcePool
from clashkeeper.models.combatant import Baseline, CombatantIdentity
from clashkeeper.models.enums import Resource


if TYPE_CHECKING:
    from clashkeeper.storage.base import BaselineStore

logger = get_logger(__name__)


class CombatantRegistry:
    """Owns every combatant's ResourcePool, keyed by transport id."""

    def __init__(
        self,
        game_settings: GameSettings | None = None,
        *,
        store: BaselineStore | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            game_settings: Source of default maxima; library defaults when None.
            store: Optional baseline persistence collaborator.
        """
        self._settings = game_settings or GameSettings()
        self._store = store
        self._pools: dict[str, ResourcePool] = {}

    @property
    def store(self) -> BaselineStore | None:
        """The configured baseline store, if any."""
        return self._store

    def default_maxima(self) -> dict[Resource, int]:
        """Maxima used for combatants without a sheet."""
        return {
            Resource.HP: self._settings.default_max_hp,
            Resource.MP: self._settings.default_max_mp,
            Resource.IP: self._settings.default_max_ip,
            Resource.ARMOR: self._settings.default_max_armor,
            Resource.BARRIER: self._settings.default_max_barrier,
        }

    def __contains__(self, combatant_id: object) -> bool:
        return combatant_id in self._pools

    def __len__(self) -> int:
        return len(self._pools)

    def __iter__(self) -> Iterator[ResourcePool]:
        return iter(list(self._pools.values()))

    def get(self, combatant_id: str) -> ResourcePool | None:
        """Return the pool for ``combatant_id`` without creating one."""
        return self._pools.get(combatant_id)

    def get_or_create(
        self,
        combatant_id: str,
        display_name: str | None = None,
        *,
        load_baseline: bool = False,
    ) -> ResourcePool:
        """Return the combatant's pool, creating it on first reference.

        Args:
            combatant_id: Transport id.
            display_name: Transport display name, used for new combatants.
            load_baseline: Consult the baseline store unless the pool
                already holds a sheet.

        Returns:
            The live ResourcePool.
        """
        pool = self._pools.get(combatant_id)
        if pool is not None:
            if load_baseline and self._store is not None and not pool.seeded_from_baseline:
                baseline = self._store.load_baseline(combatant_id)
                if baseline is not None:
                    pool.apply_baseline(baseline)
                    logger.info(
                        "Stored baseline loaded",
                        combatant_id=combatant_id,
                        character_name=baseline.character_name,
                    )
            return pool

        identity = CombatantIdentity.fresh(combatant_id, display_name)
        baseline = None
        if load_baseline and self._store is not None:
            baseline = self._store.load_baseline(combatant_id)

        if baseline is not None:
            pool = ResourcePool.from_baseline(identity, baseline)
        else:
            pool = ResourcePool(identity, self.default_maxima())

        self._pools[combatant_id] = pool
        logger.info(
            "Combatant registered",
            combatant_id=combatant_id,
            from_baseline=baseline is not None,
        )
        return pool

    def apply_baseline(
        self,
        combatant_id: str,
        baseline: Baseline,
        display_name: str | None = None,
    ) -> ResourcePool:
        """Install a new sheet on a combatant, creating the pool if needed."""
        pool = self._pools.get(combatant_id)
        if pool is None:
            identity = CombatantIdentity.fresh(combatant_id, display_name)
            pool = ResourcePool.from_baseline(identity, baseline)
            self._pools[combatant_id] = pool
        else:
            if display_name:
                pool.identity.display_name = display_name
            pool.apply_baseline(baseline)
        logger.info(
            "Baseline applied",
            combatant_id=combatant_id,
            character_name=baseline.character_name,
        )
        return pool

    def rename(self, combatant_id: str, character_name: str) -> ResourcePool:
        """Change a combatant's character name."""
        pool = self.get_or_create(combatant_id)
        pool.identity.character_name = character_name
        return pool


__all__ = [
    "CombatantRegistry",
]
