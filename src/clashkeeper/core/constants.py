"""Game constants for ClashKeeper.

Default pool maxima and dice thresholds. Runtime overrides live in
``clashkeeper.core.config.GameSettings``; these values are the fallbacks.
"""

from __future__ import annotations

# =============================================================================
# Default Pool Maxima
# =============================================================================

DEFAULT_MAX_HP = 100
"""Maximum HP for a combatant with no baseline sheet."""

DEFAULT_MAX_MP = 50
"""Maximum MP for a combatant with no baseline sheet."""

DEFAULT_MAX_IP = 100
"""Maximum IP (influence) for a combatant with no baseline sheet."""

DEFAULT_MAX_ARMOR = 20
"""Armor gained per defend for a combatant with no baseline sheet."""

DEFAULT_MAX_BARRIER = 15
"""Barrier gained per defend for a combatant with no baseline sheet."""

# =============================================================================
# Dice
# =============================================================================

CRITICAL_MIN_FACE = 6
"""Lowest matching face that counts as a critical."""

FUMBLE_FACE = 1
"""Face both dice must show for a fumble."""

# =============================================================================
# Actions
# =============================================================================

DEFAULT_CAST_COST = 10
"""MP spent by a cast when no cost token is given."""

PENDING_ACTION_TTL_SECONDS = 900
"""How long a deferred GM attack can still be answered."""


__all__ = [
    "DEFAULT_MAX_HP",
    "DEFAULT_MAX_MP",
    "DEFAULT_MAX_IP",
    "DEFAULT_MAX_ARMOR",
    "DEFAULT_MAX_BARRIER",
    "CRITICAL_MIN_FACE",
    "FUMBLE_FACE",
    "DEFAULT_CAST_COST",
    "PENDING_ACTION_TTL_SECONDS",
]
