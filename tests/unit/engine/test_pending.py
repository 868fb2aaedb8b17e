"""Tests for server-held deferred GM attacks."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from clashkeeper.core.exceptions import PendingActionError
from clashkeeper.engine.pending import PendingActionStore
from clashkeeper.models.enums import DamageKind
from clashkeeper.models.results import RollOutcome


if TYPE_CHECKING:
    from conftest import FakeClock


@pytest.fixture
def outcome() -> RollOutcome:
    """Provide a hit for 11 damage."""
    return RollOutcome(die1=9, die2=7, die1_size=10, die2_size=10, modifier=2, gate=4)


@pytest.fixture
def pending_store(clock: FakeClock) -> PendingActionStore:
    """Provide a store with a one minute lifetime."""
    return PendingActionStore(60, clock=clock)


class TestPendingActionStore:
    """Tests for creating and claiming pending actions."""

    def test_create(self, pending_store: PendingActionStore, outcome: RollOutcome, clock: FakeClock) -> None:
        """Test a new action keeps damage, kind and targets."""
        action = pending_store.create(outcome, DamageKind.BARRIER, ["a", "b", "a"])

        assert action.damage == 11
        assert action.kind is DamageKind.BARRIER
        assert action.remaining == ["a", "b"]
        assert (action.expires_at - clock()).total_seconds() == 60
        assert len(pending_store) == 1

    def test_tokens_are_unique(self, pending_store: PendingActionStore, outcome: RollOutcome) -> None:
        """Test each action gets its own token."""
        tokens = {pending_store.create(outcome, DamageKind.ARMOR, ["a"]).token for _ in range(20)}
        assert len(tokens) == 20

    def test_each_target_claims_once(self, pending_store: PendingActionStore, outcome: RollOutcome) -> None:
        """Test a target cannot answer the same attack twice."""
        token = pending_store.create(outcome, DamageKind.ARMOR, ["a", "b"]).token

        assert pending_store.claim(token, "a").remaining == ["b"]
        with pytest.raises(PendingActionError):
            pending_store.claim(token, "a")

    def test_dropped_after_last_claim(self, pending_store: PendingActionStore, outcome: RollOutcome) -> None:
        """Test the action disappears once every target answered."""
        token = pending_store.create(outcome, DamageKind.ARMOR, ["a"]).token
        pending_store.claim(token, "a")

        assert len(pending_store) == 0
        with pytest.raises(PendingActionError):
            pending_store.claim(token, "a")

    def test_non_target_rejected(self, pending_store: PendingActionStore, outcome: RollOutcome) -> None:
        """Test only mentioned targets may answer."""
        token = pending_store.create(outcome, DamageKind.ARMOR, ["a"]).token

        with pytest.raises(PendingActionError) as exc_info:
            pending_store.claim(token, "intruder")

        assert exc_info.value.details["combatant_id"] == "intruder"
        assert len(pending_store) == 1

    def test_unknown_token(self, pending_store: PendingActionStore) -> None:
        """Test an unknown token is rejected."""
        with pytest.raises(PendingActionError) as exc_info:
            pending_store.claim("nope", "a")
        assert exc_info.value.details["token"] == "nope"

    def test_expired(self, pending_store: PendingActionStore, outcome: RollOutcome, clock: FakeClock) -> None:
        """Test answers after the lifetime are rejected and the action dropped."""
        token = pending_store.create(outcome, DamageKind.ARMOR, ["a"]).token
        clock.advance(61)

        with pytest.raises(PendingActionError):
            pending_store.claim(token, "a")
        assert len(pending_store) == 0

    def test_purge_expired(self, pending_store: PendingActionStore, outcome: RollOutcome, clock: FakeClock) -> None:
        """Test purging removes only stale actions."""
        pending_store.create(outcome, DamageKind.ARMOR, ["a"])
        clock.advance(30)
        pending_store.create(outcome, DamageKind.ARMOR, ["b"])
        clock.advance(40)

        assert pending_store.purge_expired() == 1
        assert len(pending_store) == 1
