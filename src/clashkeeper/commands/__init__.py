"""Command dispatch boundary.

Submodules:
    parsing: Argument token parsing (integers, full/zero/±N, damage kinds)
    dispatcher: Verb table routing Commands to the ActionCoordinator
"""

from clashkeeper.commands.dispatcher import (
    CATALOGUE,
    Command,
    CommandDispatcher,
    CommandResponse,
)
from clashkeeper.commands.parsing import (
    parse_adjustment,
    parse_damage_kind,
    parse_int,
    require_args,
)

__all__ = [
    "CATALOGUE",
    "Command",
    "CommandDispatcher",
    "CommandResponse",
    "parse_adjustment",
    "parse_damage_kind",
    "parse_int",
    "require_args",
]
