"""Centralized exception hierarchy for obsidian-anki-triggers.

Exception Hierarchy:
    AnkiTriggerSyncError (base)
     ConfigurationError - Configuration loading/validation errors
     AnkiError - Anki-related errors
        AnkiConnectError - A single AnkiConnect call failed
        AnkiUnavailableError - AnkiConnect unreachable at the start of a run
        DeckError - Deck could not be found or created
     ProviderError - LLM provider communication errors
        ProviderConnectionError - Provider connection failures
     EnhancementError - AI card enhancement failed

Only ``AnkiUnavailableError`` is allowed to abort a synchronization run.
Everything raised later is converted into ``SyncReport`` entries by the
component that catches it.

Usage Examples:
    try:
        report = engine.sync(cards)
    except AnkiUnavailableError as e:
        console.print(e.message)
        console.print(e.suggestion)
"""

from typing import Any


class AnkiTriggerSyncError(Exception):
    """Base exception for all errors raised by this package.

    Attributes:
        message: Human-readable error message
        suggestion: Optional suggestion for resolving the error
        context: Additional context for debugging (deck names, URLs, ...)
    """

    def __init__(
        self,
        message: str,
        suggestion: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        """Initialize the exception.

        Args:
            message: Human-readable error message
            suggestion: Optional suggestion for resolving the error
            context: Additional context for debugging
        """
        self.message = message
        self.suggestion = suggestion
        self.context = context or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with the suggestion if available."""
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "message": self.message,
            "suggestion": self.suggestion,
            "context": self.context,
            "type": type(self).__name__,
        }


# Configuration Errors


class ConfigurationError(AnkiTriggerSyncError):
    """Configuration loading or validation errors.

    Raised when:
    - Config file is malformed
    - Configuration values fail validation
    """


# Anki Errors


class AnkiError(AnkiTriggerSyncError):
    """Base class for Anki-related errors."""


class AnkiConnectError(AnkiError):
    """AnkiConnect communication errors.

    Raised when:
    - The HTTP request fails or returns a non-2xx status
    - The response body is not valid JSON
    - AnkiConnect returns a non-null ``error`` field
    """


class AnkiUnavailableError(AnkiError):
    """AnkiConnect is unreachable or too old when a run starts.

    This is the only error that aborts a synchronization run.
    """


class DeckError(AnkiError):
    """Deck is missing and cannot be created.

    Fatal to one bucket only; sibling buckets still process.
    """


# Provider Errors


class ProviderError(AnkiTriggerSyncError):
    """LLM provider communication errors."""


class ProviderConnectionError(ProviderError):
    """Provider connection failures.

    Raised when:
    - Cannot connect to provider service
    - Provider returned a non-2xx status
    """


# Enhancement Errors


class EnhancementError(AnkiTriggerSyncError):
    """AI card enhancement failed.

    Raised inside the enhancer only; callers always receive cards back.
    """
