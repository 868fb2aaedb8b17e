"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        ClashKeeperError: Base exception for all application errors.
        CommandError and subclasses: user-facing command failures.
        SheetImportError and subclasses: external sheet import failures.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from clashkeeper.core.config import (
    GameSettings,
    Settings,
    SheetImportSettings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from clashkeeper.core.exceptions import (
    ClashKeeperError,
    CommandError,
    ConfigurationError,
    DiceRollError,
    GameEngineError,
    InsufficientResourceError,
    MalformedArgumentError,
    MalformedSheetError,
    NoTargetsError,
    NotActiveError,
    PendingActionError,
    SheetAuthRequiredError,
    SheetImportError,
    SheetUnreachableError,
    UnknownCommandError,
    ValidationError,
)
from clashkeeper.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


__all__ = [
    # Exceptions
    "ClashKeeperError",
    "CommandError",
    "MalformedArgumentError",
    "InsufficientResourceError",
    "NotActiveError",
    "NoTargetsError",
    "PendingActionError",
    "UnknownCommandError",
    "GameEngineError",
    "DiceRollError",
    "ValidationError",
    "SheetImportError",
    "SheetUnreachableError",
    "SheetAuthRequiredError",
    "MalformedSheetError",
    "ConfigurationError",
    # Configuration
    "Settings",
    "GameSettings",
    "StorageSettings",
    "SheetImportSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
]
