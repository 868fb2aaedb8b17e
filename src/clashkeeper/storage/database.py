"""SQLite persistence for baseline character sheets.

Stores one row per combatant with the maxima of every pool and the
character name. Only the explicit ``set``/``import`` commands write here;
live current values are never persisted.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from clashkeeper.core.logging import get_logger
from clashkeeper.models.combatant import Baseline, CombatantIdentity


logger = get_logger(__name__)


class BaselineDatabase:
    """SQLite-backed BaselineStore.

    Example:
        >>> db = BaselineDatabase("data/sheets.db")
        >>> db.load_baseline("42") is None
        True
    """

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path) -> None:
        """Initialize the database, creating the schema if needed.

        Args:
            db_path: Path to the SQLite file.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()
        logger.info("Baseline database initialized", path=str(self.db_path))

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with commit/rollback and cleanup."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS baselines (
                    combatant_id TEXT PRIMARY KEY,
                    display_name TEXT NOT NULL,
                    character_name TEXT NOT NULL,
                    max_hp INTEGER NOT NULL,
                    max_mp INTEGER NOT NULL,
                    max_ip INTEGER NOT NULL,
                    max_armor INTEGER NOT NULL,
                    max_barrier INTEGER NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            cursor.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

    @staticmethod
    def _baseline_from_row(row: sqlite3.Row | tuple[Any, ...]) -> Baseline:
        return Baseline(
            character_name=row["character_name"],
            max_hp=row["max_hp"],
            max_mp=row["max_mp"],
            max_ip=row["max_ip"],
            max_armor=row["max_armor"],
            max_barrier=row["max_barrier"],
        )

    def load_baseline(self, combatant_id: str) -> Baseline | None:
        """Return the stored sheet for ``combatant_id``, or None."""
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT character_name, max_hp, max_mp, max_ip, max_armor, max_barrier
                FROM baselines WHERE combatant_id = ?
                """,
                (combatant_id,),
            )
            row = cursor.fetchone()

        if row is None:
            return None
        return self._baseline_from_row(row)

    def save_baseline(self, identity: CombatantIdentity, baseline: Baseline) -> None:
        """Insert or replace the sheet of ``identity``."""
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO baselines
                    (combatant_id, display_name, character_name, max_hp, max_mp,
                     max_ip, max_armor, max_barrier, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(combatant_id) DO UPDATE SET
                    display_name = excluded.display_name,
                    character_name = excluded.character_name,
                    max_hp = excluded.max_hp,
                    max_mp = excluded.max_mp,
                    max_ip = excluded.max_ip,
                    max_armor = excluded.max_armor,
                    max_barrier = excluded.max_barrier,
                    updated_at = excluded.updated_at
                """,
                (
                    identity.combatant_id,
                    identity.display_name,
                    baseline.character_name,
                    baseline.max_hp,
                    baseline.max_mp,
                    baseline.max_ip,
                    baseline.max_armor,
                    baseline.max_barrier,
                    datetime.now().isoformat(),
                ),
            )
        logger.info("Baseline saved", combatant_id=identity.combatant_id)

    def count(self) -> int:
        """Number of stored sheets."""
        with self._get_connection() as conn:
            return conn.execute("SELECT COUNT(*) FROM baselines").fetchone()[0]


__all__ = ["BaselineDatabase"]
