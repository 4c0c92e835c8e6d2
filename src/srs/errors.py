"""Error types raised by the revision scheduler."""

from __future__ import annotations


class SchedulerError(Exception):
    """Base class for all scheduler errors."""


class MissingDeckError(SchedulerError):
    """Raised when a requested deck does not exist in the current state."""

    def __init__(self, name: str) -> None:
        super().__init__(f"No deck named '{name}' exists")
        self.name = name


class EmptyDeckError(SchedulerError):
    """Raised when a deck has no cards carrying its membership tag."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Deck '{name}' contains no cards")
        self.name = name


class NoDueCardsError(SchedulerError):
    """Raised when a deck has cards but none of them are due."""

    def __init__(self, name: str) -> None:
        super().__init__(f"No due cards in deck '{name}'")
        self.name = name


class ParserConfigurationError(SchedulerError):
    """Raised when a parsing pattern cannot be compiled."""


class CardParsingError(SchedulerError):
    """Raised when a note does not match one of the configured patterns."""

    def __init__(self, field: str, detail: str | None = None) -> None:
        message = f"Could not match {field.upper()} against pattern"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.field = field


class StateStoreError(SchedulerError):
    """Raised when the persisted state cannot be read or written."""
