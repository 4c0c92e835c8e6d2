"""Card and deck entities used by the revision scheduler."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Tuple

from src.srs.intervals import IntervalCoefficients, RevisionOutcome, SchedulingState, transform
from src.srs.parser import ParsedCardFields


@dataclass(frozen=True, slots=True)
class Card:
    """A flashcard identified by the path of the note it was read from."""

    path: str
    decks: Tuple[str, ...]
    question: str
    answer: str
    scheduling: SchedulingState

    @property
    def uid(self) -> str:
        return self.path

    @classmethod
    def from_parsed(
        cls,
        path: str,
        fields: ParsedCardFields,
        now: datetime | None = None,
    ) -> Card:
        """Build a never-reviewed card from freshly extracted note fields."""
        return cls(
            path=path,
            decks=tuple(fields.decks),
            question=fields.question,
            answer=fields.answer,
            scheduling=SchedulingState.default(now),
        )

    def is_due(self, now: datetime | None = None) -> bool:
        if now is None:
            now = datetime.now(timezone.utc)
        return self.scheduling.due <= now

    def in_deck(self, deck_name: str) -> bool:
        return deck_name in self.decks

    def with_scheduling(self, scheduling: SchedulingState) -> Card:
        return replace(self, scheduling=scheduling)

    def transform(
        self,
        outcome: RevisionOutcome,
        coefficients: IntervalCoefficients,
        now: datetime | None = None,
    ) -> Card:
        """Return a copy of the card rescheduled for the given outcome."""
        return self.with_scheduling(transform(self.scheduling, outcome, coefficients, now=now))

    def merge(self, stored: Card) -> Card:
        """Keep this card's content but adopt the scheduling state of ``stored``."""
        return self.with_scheduling(stored.scheduling)


@dataclass(frozen=True, slots=True)
class Deck:
    """A named group of cards sharing interval coefficients."""

    name: str
    card_paths: Tuple[str, ...] = ()
    interval_coefficients: IntervalCoefficients = field(default_factory=IntervalCoefficients)

    @property
    def uid(self) -> str:
        return self.name

    def merge(self, stored: Deck) -> Deck:
        """Keep this deck's card paths but adopt the coefficients of ``stored``."""
        return replace(self, interval_coefficients=stored.interval_coefficients)


def derive_decks(cards: Iterable[Card]) -> List[Deck]:
    """Create one deck per distinct membership tag found on ``cards``, ordered by name."""
    paths_by_deck: Dict[str, List[str]] = {}
    for card in cards:
        for deck_name in card.decks:
            paths = paths_by_deck.setdefault(deck_name, [])
            if card.path not in paths:
                paths.append(card.path)
    return [
        Deck(name=name, card_paths=tuple(paths_by_deck[name]))
        for name in sorted(paths_by_deck)
    ]
