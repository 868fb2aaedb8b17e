"""Custom exception hierarchy for ClashKeeper.

All exceptions inherit from ClashKeeperError so that the command dispatch
boundary can report any domain failure uniformly while preserving
domain-specific context in ``details``.

User-facing command failures (bad tokens, not enough MP, no active clash,
no targets) derive from CommandError. Sheet import failures derive from
SheetImportError and carry a remediation hint for the presentation layer.

Example:
    >>> from clashkeeper.core.exceptions import InsufficientResourceError
    >>> raise InsufficientResourceError("Not enough MP", resource="MP", required=10, available=5)
"""

from __future__ import annotations

from typing import Any


class ClashKeeperError(Exception):
    """Base exception for all ClashKeeper errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    kind: str = "error"

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Command Domain Exceptions
# =============================================================================


class CommandError(ClashKeeperError):
    """Base exception for recoverable, user-facing command failures.

    A CommandError aborts the command before any state is mutated.
    """

    kind = "command"


class MalformedArgumentError(CommandError):
    """Raised when a required token is missing or is not a valid integer."""

    kind = "malformed_argument"

    def __init__(
        self,
        message: str,
        *,
        argument: str | None = None,
        token: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize malformed argument error with token context.

        Args:
            message: Human-readable error description.
            argument: Name of the argument that failed to parse.
            token: The raw token that was supplied, if any.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if argument:
            combined_details["argument"] = argument
        if token is not None:
            combined_details["token"] = token
        super().__init__(message, details=combined_details)


class InsufficientResourceError(CommandError):
    """Raised when a combatant cannot pay a resource cost (e.g. MP for a cast)."""

    kind = "insufficient_resource"

    def __init__(
        self,
        message: str,
        *,
        resource: str | None = None,
        required: int | None = None,
        available: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize insufficient resource error with cost context.

        Args:
            message: Human-readable error description.
            resource: The resource that was short.
            required: Amount that was needed.
            available: Amount the combatant actually had.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if resource:
            combined_details["resource"] = resource
        if required is not None:
            combined_details["required"] = required
        if available is not None:
            combined_details["available"] = available
        super().__init__(message, details=combined_details)


class NotActiveError(CommandError):
    """Raised when a clash command is issued while no clash is active."""

    kind = "not_active"


class NoTargetsError(CommandError):
    """Raised when a directed-damage command resolves zero targets."""

    kind = "no_targets"


class PendingActionError(CommandError):
    """Raised when a follow-up references an unknown, expired or spent action."""

    kind = "pending_action"

    def __init__(
        self,
        message: str,
        *,
        token: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize pending action error with token context.

        Args:
            message: Human-readable error description.
            token: The follow-up token that could not be resolved.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if token:
            combined_details["token"] = token
        super().__init__(message, details=combined_details)


class UnknownCommandError(CommandError):
    """Raised when the dispatcher receives a verb it does not handle."""

    kind = "unknown_command"


# =============================================================================
# Game Engine Domain Exceptions
# =============================================================================


class GameEngineError(ClashKeeperError):
    """Base exception for engine contract violations.

    These indicate a caller passed values the engine refuses to coerce,
    rather than an ordinary user mistake.
    """

    kind = "engine"


class DiceRollError(GameEngineError):
    """Raised when a die size is not a positive integer."""

    def __init__(
        self,
        message: str,
        *,
        sides: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dice roll error with die size context.

        Args:
            message: Human-readable error description.
            sides: The rejected die size.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if sides is not None:
            combined_details["sides"] = sides
        super().__init__(message, details=combined_details)


class ValidationError(GameEngineError):
    """Raised when a value violates a ledger or model constraint."""

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


# =============================================================================
# Sheet Import Exceptions
# =============================================================================


class SheetImportError(ClashKeeperError):
    """Base exception for external character sheet import failures.

    Attributes:
        remediation: Short hint telling the user how to fix the problem.
    """

    kind = "sheet_import"
    default_remediation = "Check the sheet link and try again."

    def __init__(
        self,
        message: str,
        *,
        reference: str | None = None,
        remediation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize sheet import error with reference context.

        Args:
            message: Human-readable error description.
            reference: The sheet URL or document id being imported.
            remediation: Hint for the user; defaults per subclass.
            details: Optional dictionary containing additional error context.
        """
        self.remediation = remediation or self.default_remediation
        combined_details = details or {}
        if reference:
            combined_details["reference"] = reference
        super().__init__(message, details=combined_details)


class SheetUnreachableError(SheetImportError):
    """Raised when the sheet host cannot be reached or answers with a server error."""

    kind = "unreachable"
    default_remediation = "The sheet host did not answer; try again in a moment."


class SheetAuthRequiredError(SheetImportError):
    """Raised when the sheet is private and requires a login."""

    kind = "auth_required"
    default_remediation = "Share the sheet as 'Anyone with the link can view'."


class MalformedSheetError(SheetImportError):
    """Raised when the sheet is reachable but the expected stats are missing."""

    kind = "malformed_sheet"
    default_remediation = "Label the cells Name, HP, MP, IP, Armor and Barrier with a number beside each."


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(ClashKeeperError):
    """Raised when application configuration is invalid."""

    kind = "configuration"

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


__all__ = [
    "ClashKeeperError",
    # Command exceptions
    "CommandError",
    "MalformedArgumentError",
    "InsufficientResourceError",
    "NotActiveError",
    "NoTargetsError",
    "PendingActionError",
    "UnknownCommandError",
    # Engine exceptions
    "GameEngineError",
    "DiceRollError",
    "ValidationError",
    # Sheet import exceptions
    "SheetImportError",
    "SheetUnreachableError",
    "SheetAuthRequiredError",
    "MalformedSheetError",
    # Configuration exceptions
    "ConfigurationError",
]
