"""Enumerations shared by the engine and the dispatch boundary."""

from __future__ import annotations

from enum import StrEnum


class Resource(StrEnum):
    """Per-combatant resource pools."""

    HP = "HP"
    MP = "MP"
    IP = "IP"
    ARMOR = "Armor"
    BARRIER = "Barrier"

    @property
    def is_absorption(self) -> bool:
        """Whether this pool soaks damage before HP."""
        return self in (Resource.ARMOR, Resource.BARRIER)

    @classmethod
    def from_token(cls, token: str) -> Resource:
        """Look up a resource by case-insensitive name.

        Raises:
            ValueError: If the token names no resource.
        """
        lowered = token.strip().lower()
        for member in cls:
            if member.value.lower() == lowered:
                return member
        raise ValueError(f"Unknown resource: {token!r}")


class DamageKind(StrEnum):
    """How directed damage reaches HP."""

    ARMOR = "armor"
    BARRIER = "barrier"
    TRUE = "true"

    @property
    def absorbing_resource(self) -> Resource | None:
        """The pool that soaks this damage first, or None for true damage."""
        if self is DamageKind.ARMOR:
            return Resource.ARMOR
        if self is DamageKind.BARRIER:
            return Resource.BARRIER
        return None


class RollVerdict(StrEnum):
    """Headline result of a two-die roll, in precedence order."""

    FUMBLE = "fumble"
    CRITICAL = "critical"
    HIT = "hit"
    MISS = "miss"


class FollowUpChoice(StrEnum):
    """Answers a target can give to a deferred GM attack."""

    DEFEND = "defend"
    TAKE = "take"


__all__ = [
    "Resource",
    "DamageKind",
    "RollVerdict",
    "FollowUpChoice",
]
