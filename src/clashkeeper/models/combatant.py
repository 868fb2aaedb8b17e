"""Pydantic V2 schemas for combatant identity and baseline sheets.

The identity is supplied by the transport (a chat user id plus names);
the baseline is the persisted set of pool maxima that seeds a
combatant's live ResourcePool.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from clashkeeper.models.enums import Resource


class CombatantIdentity(BaseModel):
    """Who a combatant is.

    Attributes:
        combatant_id: Opaque stable id from the transport layer.
        display_name: Name the transport shows for the user.
        character_name: Free-form character name; defaults to the display name.
    """

    model_config = ConfigDict(
        strict=True,
        extra="forbid",
        validate_assignment=True,
    )

    combatant_id: str = Field(min_length=1, description="Transport-supplied id")
    display_name: str = Field(description="Transport display name")
    character_name: str = Field(description="Character name")

    @classmethod
    def fresh(cls, combatant_id: str, display_name: str | None = None) -> CombatantIdentity:
        """Build an identity whose character name mirrors the display name.

        Args:
            combatant_id: Transport id.
            display_name: Display name; falls back to the id.
        """
        name = display_name or combatant_id
        return cls(combatant_id=combatant_id, display_name=name, character_name=name)


class Baseline(BaseModel):
    """Persisted character sheet: the maximum of every pool.

    Attributes:
        character_name: Character name stored with the sheet.
        max_hp: Maximum hit points.
        max_mp: Maximum mana.
        max_ip: Maximum influence.
        max_armor: Armor gained per defend.
        max_barrier: Barrier gained per defend.
    """

    model_config = ConfigDict(
        frozen=True,
        strict=True,
        extra="forbid",
    )

    character_name: str = Field(min_length=1, max_length=100, description="Character name")
    max_hp: Annotated[int, Field(ge=0, description="Maximum HP")]
    max_mp: Annotated[int, Field(ge=0, description="Maximum MP")]
    max_ip: Annotated[int, Field(ge=0, description="Maximum IP")]
    max_armor: Annotated[int, Field(ge=0, description="Maximum Armor")]
    max_barrier: Annotated[int, Field(ge=0, description="Maximum Barrier")]

    def maxima(self) -> dict[Resource, int]:
        """Return the maxima keyed by resource."""
        return {
            Resource.HP: self.max_hp,
            Resource.MP: self.max_mp,
            Resource.IP: self.max_ip,
            Resource.ARMOR: self.max_armor,
            Resource.BARRIER: self.max_barrier,
        }


__all__ = [
    "CombatantIdentity",
    "Baseline",
]
