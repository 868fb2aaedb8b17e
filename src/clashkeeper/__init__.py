"""ClashKeeper - Combat resource and encounter engine for tabletop RPG sessions.

Tracks per-character HP, MP, IP, Armor and Barrier pools, resolves opposed
two-die rolls, and runs multi-combatant clashes with turn tracking.

ARCHITECTURE:
- The engine owns TRUTH (pools, clash roster, dice)
- The transport owns INTERFACE (parsing chat into Commands, rendering results)
- The engine never builds user-facing text

Example:
    >>> from clashkeeper import Command, CommandDispatcher
    >>>
    >>> dispatcher = CommandDispatcher.from_settings()
    >>> dispatcher.dispatch(Command("clash", ["start"], acting_id="gm"))
    >>> dispatcher.dispatch(Command("clash", ["add"], acting_id="gm", mentioned_ids=["42"]))
    >>> response = dispatcher.dispatch(
    ...     Command("damage", ["10", "10", "2", "4", "armor"], acting_id="gm", mentioned_ids=["42"])
    ... )
    >>> response.result.applied

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 result records and identities.
    engine: Dice, resource pools, clash state and the action coordinator.
    commands: Token parsing and the command dispatcher.
    storage: SQLite baseline sheet store.
    importers: Google Sheets baseline import.
"""

from __future__ import annotations

# Core
from clashkeeper.core.config import Settings, get_settings
from clashkeeper.core.exceptions import ClashKeeperError
from clashkeeper.core.logging import configure_logging, get_logger

# Engine
from clashkeeper.engine import (
    ActionCoordinator,
    ClashSession,
    CombatantRegistry,
    DiceRoller,
    EncounterState,
    Participant,
    ResourcePool,
    RollResolver,
)

# Models
from clashkeeper.models.combatant import Baseline, CombatantIdentity
from clashkeeper.models.enums import DamageKind, FollowUpChoice, Resource, RollVerdict
from clashkeeper.models.results import RollOutcome

# Dispatch
from clashkeeper.commands.dispatcher import Command, CommandDispatcher, CommandResponse


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "ClashKeeperError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Engine
    "ActionCoordinator",
    "ClashSession",
    "CombatantRegistry",
    "DiceRoller",
    "EncounterState",
    "Participant",
    "ResourcePool",
    "RollResolver",
    # Models
    "Baseline",
    "CombatantIdentity",
    "DamageKind",
    "FollowUpChoice",
    "Resource",
    "RollVerdict",
    "RollOutcome",
    # Dispatch
    "Command",
    "CommandDispatcher",
    "CommandResponse",
]
