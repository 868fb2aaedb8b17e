"""Configuration management for ClashKeeper.

Centralized configuration using pydantic-settings, supporting environment
variables, .env files, and runtime overrides.

Example:
    >>> from clashkeeper.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.game.default_cast_cost
    10

Environment Variables:
    CLASHKEEPER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    CLASHKEEPER_JSON_LOGS: Emit JSON log lines instead of console output
    CLASHKEEPER_DEBUG: Force DEBUG logging
    CLASHKEEPER_LOG_FILE: Also write log lines to this file
    CLASHKEEPER_GAME_DEFAULT_MAX_HP: Max HP for combatants without a sheet
    CLASHKEEPER_GAME_DEFAULT_CAST_COST: MP spent by a cast without a cost token
    CLASHKEEPER_STORAGE_DATABASE_PATH: SQLite file for baseline sheets (unset = memory only)
    CLASHKEEPER_SHEETS_TIMEOUT_SECONDS: HTTP timeout for sheet imports
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from clashkeeper.core import constants
from clashkeeper.core.exceptions import ConfigurationError


class GameSettings(BaseSettings):
    """Configuration for engine defaults.

    Attributes:
        default_max_hp: Max HP for a combatant with no baseline.
        default_max_mp: Max MP for a combatant with no baseline.
        default_max_ip: Max IP for a combatant with no baseline.
        default_max_armor: Max Armor for a combatant with no baseline.
        default_max_barrier: Max Barrier for a combatant with no baseline.
        default_cast_cost: MP spent by a cast when no cost is given.
        default_damage_kind: Damage kind used by directed attacks when none is given.
        pending_action_ttl_seconds: Lifetime of a deferred GM attack.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLASHKEEPER_GAME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_max_hp: int = Field(default=constants.DEFAULT_MAX_HP, description="Default max HP")
    default_max_mp: int = Field(default=constants.DEFAULT_MAX_MP, description="Default max MP")
    default_max_ip: int = Field(default=constants.DEFAULT_MAX_IP, description="Default max IP")
    default_max_armor: int = Field(
        default=constants.DEFAULT_MAX_ARMOR,
        description="Default max Armor",
    )
    default_max_barrier: int = Field(
        default=constants.DEFAULT_MAX_BARRIER,
        description="Default max Barrier",
    )
    default_cast_cost: int = Field(
        default=constants.DEFAULT_CAST_COST,
        ge=0,
        description="MP cost of a cast without an explicit cost",
    )
    default_damage_kind: Literal["armor", "barrier", "true"] = Field(
        default="armor",
        description="Damage kind for directed attacks without an explicit kind",
    )
    pending_action_ttl_seconds: float = Field(
        default=constants.PENDING_ACTION_TTL_SECONDS,
        gt=0,
        description="Seconds a deferred GM attack stays answerable",
    )

    @model_validator(mode="after")
    def validate_maxima(self) -> "GameSettings":
        """Ensure no default maximum is negative.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If any default maximum is below zero.
        """
        for key in (
            "default_max_hp",
            "default_max_mp",
            "default_max_ip",
            "default_max_armor",
            "default_max_barrier",
        ):
            if getattr(self, key) < 0:
                raise ConfigurationError(
                    f"{key} must not be negative",
                    config_key=key,
                )
        return self


class StorageSettings(BaseSettings):
    """Configuration for baseline sheet persistence.

    Attributes:
        database_path: SQLite file for baseline sheets; None keeps everything in memory.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLASHKEEPER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path | None = Field(
        default=None,
        description="Path to SQLite database for baseline sheets",
    )

    @field_validator("database_path", mode="after")
    @classmethod
    def ensure_parent_exists(cls, value: Path | None) -> Path | None:
        """Create the database directory if a path is configured.

        Args:
            value: The configured database path.

        Returns:
            The validated path.
        """
        if value is not None:
            value.parent.mkdir(parents=True, exist_ok=True)
        return value


class SheetImportSettings(BaseSettings):
    """Configuration for importing baselines from an external spreadsheet.

    Attributes:
        export_url_template: CSV export URL with a ``{sheet_id}`` placeholder.
        timeout_seconds: HTTP request timeout.
        max_retries: Attempts for transient connection failures.
        label_aliases: Cell labels recognised for each baseline field.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLASHKEEPER_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    export_url_template: str = Field(
        default="https://docs.google.com/spreadsheets/d/{sheet_id}/export?format=csv",
        description="CSV export URL template",
    )
    timeout_seconds: float = Field(default=15.0, gt=0, le=120, description="HTTP timeout")
    max_retries: int = Field(default=3, ge=1, le=10, description="Connection attempts")
    label_aliases: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "character_name": ["name", "character", "character name"],
            "max_hp": ["hp", "health", "max hp"],
            "max_mp": ["mp", "mana", "max mp"],
            "max_ip": ["ip", "influence", "max ip"],
            "max_armor": ["armor", "armour", "max armor"],
            "max_barrier": ["barrier", "max barrier"],
        },
        description="Recognised cell labels per baseline field",
    )

    @field_validator("export_url_template", mode="after")
    @classmethod
    def validate_template(cls, value: str) -> str:
        """Ensure the export template has a sheet id placeholder.

        Raises:
            ConfigurationError: If ``{sheet_id}`` is missing.
        """
        if "{sheet_id}" not in value:
            raise ConfigurationError(
                "export_url_template must contain '{sheet_id}'",
                config_key="export_url_template",
            )
        return value


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Tag added to every log event.
        debug: Log at DEBUG regardless of ``log_level``.
        log_level: Application logging level.
        json_logs: Emit JSON log lines.
        log_file: Also write log lines to this file.
        game: Engine defaults.
        storage: Baseline persistence settings.
        sheets: Sheet import settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLASHKEEPER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(default="ClashKeeper", description="Application name")
    debug: bool = Field(default=False, description="Force DEBUG logging")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    json_logs: bool = Field(default=False, description="Emit JSON logs")
    log_file: Path | None = Field(default=None, description="Optional log file")

    game: GameSettings = Field(default_factory=GameSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    sheets: SheetImportSettings = Field(default_factory=SheetImportSettings)

    @property
    def effective_log_level(self) -> str:
        """Level passed to ``configure_logging``."""
        return "DEBUG" if self.debug else self.log_level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access."""
    get_settings.cache_clear()


__all__ = [
    "GameSettings",
    "StorageSettings",
    "SheetImportSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
