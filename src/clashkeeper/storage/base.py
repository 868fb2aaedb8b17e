"""Protocol for baseline sheet persistence."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from clashkeeper.models.combatant import Baseline, CombatantIdentity


@runtime_checkable
class BaselineStore(Protocol):
    """Loads and saves the persisted maximum-value sheet of a combatant."""

    def load_baseline(self, combatant_id: str) -> Baseline | None:
        """Return the stored sheet, or None when the combatant has none."""
        ...

    def save_baseline(self, identity: CombatantIdentity, baseline: Baseline) -> None:
        """Insert or replace the sheet for ``identity``."""
        ...


__all__ = ["BaselineStore"]
