"""Pydantic V2 models for ClashKeeper.

Submodules:
    enums: Resource, DamageKind, RollVerdict, FollowUpChoice.
    combatant: CombatantIdentity and Baseline (the persisted sheet).
    results: Adjustment variant, RollOutcome and every result record.
"""

from __future__ import annotations

from clashkeeper.models.combatant import Baseline, CombatantIdentity
from clashkeeper.models.enums import DamageKind, FollowUpChoice, Resource, RollVerdict
from clashkeeper.models.results import (
    Adjustment,
    ClashEntry,
    ClashResult,
    CommandHelp,
    Delta,
    DirectedDamageResult,
    ErrorReport,
    FollowUpResult,
    GuideResult,
    LedgerResult,
    PendingAttackResult,
    PoolSnapshot,
    ResourceChange,
    ResourceLevel,
    RollOutcome,
    SelfRollResult,
    SetFull,
    SetZero,
    SheetResult,
    TargetDamage,
)


__all__ = [
    # Enums
    "Resource",
    "DamageKind",
    "RollVerdict",
    "FollowUpChoice",
    # Combatant
    "CombatantIdentity",
    "Baseline",
    # Adjustments
    "Adjustment",
    "SetFull",
    "SetZero",
    "Delta",
    # Results
    "RollOutcome",
    "ResourceChange",
    "ResourceLevel",
    "PoolSnapshot",
    "LedgerResult",
    "SelfRollResult",
    "TargetDamage",
    "DirectedDamageResult",
    "PendingAttackResult",
    "FollowUpResult",
    "ClashEntry",
    "ClashResult",
    "SheetResult",
    "CommandHelp",
    "GuideResult",
    "ErrorReport",
]
