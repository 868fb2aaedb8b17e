"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the ClashKeeper test suite.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator

    from clashkeeper.commands.dispatcher import CommandDispatcher
    from clashkeeper.engine.coordinator import ActionCoordinator
    from clashkeeper.engine.session import ClashSession
    from clashkeeper.models.combatant import Baseline, CombatantIdentity


# =============================================================================
# Test Doubles
# =============================================================================


class ScriptedRoller:
    """RandomRoller that returns queued faces and counts every call."""

    def __init__(self, faces: Iterable[int] = ()) -> None:
        self.faces: list[int] = list(faces)
        self.calls: list[int] = []

    def queue(self, *faces: int) -> None:
        self.faces.extend(faces)

    def roll_die(self, sides: int) -> int:
        self.calls.append(sides)
        if not self.faces:
            raise AssertionError("ScriptedRoller ran out of faces")
        return self.faces.pop(0)

    @property
    def call_count(self) -> int:
        return len(self.calls)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class MemoryStore:
    """In-memory BaselineStore recording every call."""

    def __init__(self) -> None:
        self.baselines: dict[str, Baseline] = {}
        self.loads: list[str] = []
        self.saves: list[str] = []

    def load_baseline(self, combatant_id: str) -> Baseline | None:
        self.loads.append(combatant_id)
        return self.baselines.get(combatant_id)

    def save_baseline(self, identity: CombatantIdentity, baseline: Baseline) -> None:
        self.saves.append(identity.combatant_id)
        self.baselines[identity.combatant_id] = baseline


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from clashkeeper.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Undo any logging configuration a test performed."""
    import logging

    import structlog

    from clashkeeper.core.logging import ROOT_LOGGER_NAME

    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "CLASHKEEPER_DEBUG": "true",
        "CLASHKEEPER_LOG_LEVEL": "DEBUG",
        "CLASHKEEPER_GAME_DEFAULT_MAX_HP": "120",
        "CLASHKEEPER_GAME_DEFAULT_CAST_COST": "7",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def roller() -> ScriptedRoller:
    """Provide an empty scripted roller; queue faces per test."""
    return ScriptedRoller()


@pytest.fixture
def clock() -> FakeClock:
    """Provide a controllable clock for pending-action expiry."""
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    """Provide an in-memory baseline store."""
    return MemoryStore()


@pytest.fixture
def session(roller: ScriptedRoller, clock: FakeClock) -> ClashSession:
    """Provide an engine session with scripted dice and no persistence."""
    from clashkeeper.core.config import Settings
    from clashkeeper.engine.session import ClashSession

    return ClashSession.create(Settings(), roller=roller, clock=clock)


@pytest.fixture
def coordinator(session: ClashSession) -> ActionCoordinator:
    """Provide the session's ActionCoordinator."""
    return session.coordinator


@pytest.fixture
def dispatcher(session: ClashSession) -> CommandDispatcher:
    """Provide a dispatcher over the scripted session."""
    from clashkeeper.commands.dispatcher import CommandDispatcher

    return CommandDispatcher(session)


@pytest.fixture
def sample_baseline() -> Baseline:
    """Provide a typical character sheet."""
    from clashkeeper.models.combatant import Baseline

    return Baseline(
        character_name="Gandalf",
        max_hp=100,
        max_mp=50,
        max_ip=100,
        max_armor=20,
        max_barrier=15,
    )
