"""Spaced-repetition scheduling for note-based flashcards."""

from .cards import Card, Deck, derive_decks
from .errors import (
    CardParsingError,
    EmptyDeckError,
    MissingDeckError,
    NoDueCardsError,
    ParserConfigurationError,
    SchedulerError,
    StateStoreError,
)
from .hand import Hand, RevisionResult, SessionSignal
from .intervals import IntervalCoefficients, RevisionOutcome, SchedulingState, transform
from .notes import CardLoadFailure, LoadedCards, load_cards
from .parser import CardParser, ParsedCardFields, ParsingConfig, TaggedLine, WrappedMultiLine
from .state import State

__all__ = [
    "Card",
    "CardLoadFailure",
    "CardParser",
    "CardParsingError",
    "Deck",
    "EmptyDeckError",
    "Hand",
    "IntervalCoefficients",
    "LoadedCards",
    "MissingDeckError",
    "NoDueCardsError",
    "ParsedCardFields",
    "ParserConfigurationError",
    "ParsingConfig",
    "RevisionOutcome",
    "RevisionResult",
    "SchedulerError",
    "SchedulingState",
    "SessionSignal",
    "State",
    "StateStoreError",
    "TaggedLine",
    "WrappedMultiLine",
    "derive_decks",
    "load_cards",
    "transform",
]
