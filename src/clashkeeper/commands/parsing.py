"""Token parsing for command arguments.

The transport splits a message into a verb, plain argument tokens and the
list of mentioned combatant ids. These helpers turn the plain tokens into
engine values and raise MalformedArgumentError on anything they cannot
read. Nothing is coerced silently.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from clashkeeper.core.exceptions import MalformedArgumentError
from clashkeeper.models.enums import DamageKind, FollowUpChoice, Resource
from clashkeeper.models.results import Adjustment, Delta, SetFull, SetZero


_INTEGER_PATTERN = re.compile(r"^[+-]?[0-9]+$")

FULL_TOKEN = "full"
ZERO_TOKEN = "zero"


def parse_int(token: str | None, argument: str) -> int:
    """Parse a base-10 integer token, accepting a leading ``+`` or ``-``.

    Raises:
        MalformedArgumentError: If the token is missing or not an integer.
    """
    if token is None:
        raise MalformedArgumentError(f"Missing {argument}", argument=argument)
    stripped = token.strip()
    if not _INTEGER_PATTERN.match(stripped):
        raise MalformedArgumentError(
            f"{argument} must be a whole number",
            argument=argument,
            token=token,
        )
    return int(stripped)


def parse_adjustment(token: str | None) -> Adjustment:
    """Parse ``full``, ``zero`` or a signed amount."""
    if token is None:
        raise MalformedArgumentError(
            "Missing amount: use a number, 'full' or 'zero'",
            argument="amount",
        )
    lowered = token.strip().lower()
    if lowered == FULL_TOKEN:
        return SetFull()
    if lowered == ZERO_TOKEN:
        return SetZero()
    return Delta(amount=parse_int(token, "amount"))


def parse_damage_kind(token: str | None) -> DamageKind | None:
    """Return the damage kind named by ``token``, or None if it names none."""
    if token is None:
        return None
    try:
        return DamageKind(token.strip().lower())
    except ValueError:
        return None


def split_damage_kind(args: Sequence[str]) -> tuple[list[str], DamageKind | None]:
    """Pop a trailing ``armor|barrier|true`` token off ``args`` if present."""
    remaining = list(args)
    if remaining:
        kind = parse_damage_kind(remaining[-1])
        if kind is not None:
            remaining.pop()
            return remaining, kind
    return remaining, None


def parse_resource(token: str) -> Resource:
    """Resolve a pool name such as ``hp`` or ``Armor``."""
    try:
        return Resource.from_token(token)
    except ValueError as exc:
        raise MalformedArgumentError(
            f"Unknown pool '{token}'",
            argument="resource",
            token=token,
        ) from exc


def parse_choice(token: str | None) -> FollowUpChoice:
    """Parse ``defend`` or ``take``."""
    if token is None:
        raise MalformedArgumentError("Missing choice: use 'defend' or 'take'", argument="choice")
    try:
        return FollowUpChoice(token.strip().lower())
    except ValueError as exc:
        raise MalformedArgumentError(
            "Choice must be 'defend' or 'take'",
            argument="choice",
            token=token,
        ) from exc


def parse_roll_args(args: Sequence[str]) -> tuple[int, int, int, int]:
    """Parse the ``<d1> <d2> <mod> <gate>`` prefix shared by every roll."""
    require_args(args, 4, "<d1> <d2> <mod> <gate>")
    return (
        parse_int(args[0], "d1"),
        parse_int(args[1], "d2"),
        parse_int(args[2], "mod"),
        parse_int(args[3], "gate"),
    )


def require_args(args: Sequence[str], count: int, usage: str) -> None:
    """Raise if fewer than ``count`` tokens were supplied."""
    if len(args) < count:
        raise MalformedArgumentError(
            f"Expected {count} argument(s): {usage}",
            details={"usage": usage, "received": len(args)},
        )


__all__ = [
    "FULL_TOKEN",
    "ZERO_TOKEN",
    "parse_int",
    "parse_adjustment",
    "parse_damage_kind",
    "split_damage_kind",
    "parse_resource",
    "parse_choice",
    "parse_roll_args",
    "require_args",
]
