"""Server-held records for GM attacks awaiting a target's answer.

A GM attack that hits is not applied straight away; each target later
chooses to defend or take the damage. The rolled damage and damage kind
are stored here under an opaque token so the follow-up applies exactly
what was rolled, without re-rolling or re-parsing anything.
"""

from __future__ import annotations

import secrets
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from clashkeeper.core.exceptions import PendingActionError
from clashkeeper.core.logging import get_logger
from clashkeeper.models.enums import DamageKind
from clashkeeper.models.results import RollOutcome


logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class PendingAction:
    """A rolled hit waiting for its targets to answer.

    Attributes:
        token: Opaque lookup key handed to the transport.
        outcome: The roll that produced the hit.
        kind: Damage kind chosen by the GM.
        expires_at: After this instant the action can no longer be answered.
        remaining: Target ids that have not answered yet.
    """

    token: str
    outcome: RollOutcome
    kind: DamageKind
    expires_at: datetime
    remaining: list[str] = field(default_factory=list)

    @property
    def damage(self) -> int:
        """Damage fixed at roll time."""
        return self.outcome.damage


class PendingActionStore:
    """Token-keyed store of deferred GM attacks."""

    def __init__(
        self,
        ttl_seconds: float,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the store.

        Args:
            ttl_seconds: Lifetime of each pending action.
            clock: Source of the current time; injectable for tests.
        """
        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._actions: dict[str, PendingAction] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._actions)

    def create(
        self,
        outcome: RollOutcome,
        kind: DamageKind,
        target_ids: list[str],
    ) -> PendingAction:
        """Store a hit for ``target_ids`` and return it with a fresh token."""
        with self._lock:
            self._purge_expired()
            token = secrets.token_urlsafe(12)
            action = PendingAction(
                token=token,
                outcome=outcome,
                kind=kind,
                expires_at=self._clock() + self._ttl,
                remaining=list(dict.fromkeys(target_ids)),
            )
            self._actions[token] = action
        logger.debug("Pending action stored", token=token, targets=len(action.remaining))
        return action

    def claim(self, token: str, combatant_id: str) -> PendingAction:
        """Consume one target's answer to a pending action.

        The action is dropped once every target has answered.

        Args:
            token: Token returned by ``create``.
            combatant_id: The answering target.

        Returns:
            The pending action (with ``combatant_id`` no longer remaining).

        Raises:
            PendingActionError: If the token is unknown or expired, or the
                combatant is not an outstanding target of it.
        """
        with self._lock:
            action = self._actions.get(token)
            if action is None:
                raise PendingActionError("No pending attack for this token", token=token)
            if self._clock() >= action.expires_at:
                del self._actions[token]
                raise PendingActionError("This attack has expired", token=token)
            if combatant_id not in action.remaining:
                raise PendingActionError(
                    "Not an outstanding target of this attack",
                    token=token,
                    details={"combatant_id": combatant_id},
                )
            action.remaining.remove(combatant_id)
            if not action.remaining:
                del self._actions[token]
            return action

    def purge_expired(self) -> int:
        """Drop expired actions and return how many were removed."""
        with self._lock:
            return self._purge_expired()

    def _purge_expired(self) -> int:
        now = self._clock()
        expired = [t for t, a in self._actions.items() if now >= a.expires_at]
        for token in expired:
            del self._actions[token]
        return len(expired)


__all__ = [
    "PendingAction",
    "PendingActionStore",
]
