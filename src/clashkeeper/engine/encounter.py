"""Clash (encounter) state machine.

Tracks whether a clash is running, which combatants joined it (in join
order) and which of them have finished their turn this round. Starting a
new round only forgets who has acted; it never touches anyone's Armor or
Barrier.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from clashkeeper.core.exceptions import NotActiveError
from clashkeeper.core.logging import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class EncounterSnapshot:
    """Read-only copy of the clash state.

    Attributes:
        active: Whether a clash is running.
        round_number: Current round, 0 when inactive.
        combatants: Enrolled ids in join order.
        turns_taken: Ids that have ended their turn this round.
    """

    active: bool
    round_number: int
    combatants: tuple[str, ...]
    turns_taken: frozenset[str] = field(default_factory=frozenset)


class EncounterState:
    """The single clash tracked by an engine instance."""

    def __init__(self) -> None:
        """Initialize an inactive clash."""
        self._active = False
        self._round = 0
        self._combatants: list[str] = []
        self._turns_taken: set[str] = set()

    @property
    def active(self) -> bool:
        """Whether a clash is running."""
        return self._active

    @property
    def round_number(self) -> int:
        """Current round (0 when inactive)."""
        return self._round

    @property
    def combatants(self) -> list[str]:
        """Enrolled combatant ids in join order."""
        return list(self._combatants)

    @property
    def turns_taken(self) -> set[str]:
        """Ids that have ended their turn this round."""
        return set(self._turns_taken)

    def _require_active(self, action: str) -> None:
        if not self._active:
            raise NotActiveError(
                "No clash is active",
                details={"action": action},
            )

    def start(self) -> None:
        """Start a clash, discarding any previous roster."""
        self._active = True
        self._round = 1
        self._combatants.clear()
        self._turns_taken.clear()
        logger.info("Clash started")

    def end(self) -> None:
        """End the clash and clear the roster."""
        self._active = False
        self._round = 0
        self._combatants.clear()
        self._turns_taken.clear()
        logger.info("Clash ended")

    def enroll(self, combatant_id: str) -> bool:
        """Add a combatant to the clash.

        Returns:
            True if the combatant was added, False if already enrolled.

        Raises:
            NotActiveError: If no clash is active.
        """
        self._require_active("enroll")
        if combatant_id in self._combatants:
            return False
        self._combatants.append(combatant_id)
        logger.info("Combatant enrolled", combatant_id=combatant_id)
        return True

    def unenroll(self, combatant_id: str) -> bool:
        """Remove a combatant; allowed whether or not a clash is active.

        Returns:
            True if the combatant was removed, False if not enrolled.
        """
        if combatant_id not in self._combatants:
            return False
        self._combatants.remove(combatant_id)
        self._turns_taken.discard(combatant_id)
        logger.info("Combatant unenrolled", combatant_id=combatant_id)
        return True

    def mark_turn_done(self, combatant_id: str) -> None:
        """Record that a combatant has acted this round.

        Membership is not checked: an id that never enrolled is recorded too.

        Raises:
            NotActiveError: If no clash is active.
        """
        self._require_active("mark_turn_done")
        self._turns_taken.add(combatant_id)
        logger.debug("Turn marked done", combatant_id=combatant_id, round=self._round)

    def new_round(self) -> int:
        """Start the next round by forgetting who has acted.

        Returns:
            The new round number.

        Raises:
            NotActiveError: If no clash is active.
        """
        self._require_active("new_round")
        self._turns_taken.clear()
        self._round += 1
        logger.info("New round started", round=self._round)
        return self._round

    def is_enrolled(self, combatant_id: str) -> bool:
        """Whether ``combatant_id`` is in the clash."""
        return combatant_id in self._combatants

    def has_acted(self, combatant_id: str) -> bool:
        """Whether ``combatant_id`` has ended their turn this round."""
        return combatant_id in self._turns_taken

    def pending(self) -> list[str]:
        """Enrolled ids that have not acted yet, in join order."""
        return [c for c in self._combatants if c not in self._turns_taken]

    def snapshot(self) -> EncounterSnapshot:
        """Immutable copy of the clash state."""
        return EncounterSnapshot(
            active=self._active,
            round_number=self._round,
            combatants=tuple(self._combatants),
            turns_taken=frozenset(self._turns_taken),
        )


__all__ = [
    "EncounterSnapshot",
    "EncounterState",
]
