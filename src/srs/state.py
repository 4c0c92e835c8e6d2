"""Snapshot of every known card and deck plus the rules that reconcile them."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, TypeVar

from src.srs.cards import Card, Deck, derive_decks
from src.srs.errors import MissingDeckError
from src.srs.hand import Hand, Shuffler
from src.srs.parser import ParsingConfig


class Identifiable(Protocol):
    """Anything stored in the snapshot under a stable uid."""

    @property
    def uid(self) -> str:
        ...


class Mergeable(Identifiable, Protocol):
    def merge(self, stored: Any) -> Any:
        ...


ItemT = TypeVar("ItemT", bound=Identifiable)
MergeableT = TypeVar("MergeableT", bound=Mergeable)


def override_matching_values(
    existing: Mapping[str, ItemT], items: Iterable[ItemT]
) -> Dict[str, ItemT]:
    """Replace or insert each item under its uid."""
    result = dict(existing)
    for item in items:
        result[item.uid] = item
    return result


def merge_matching_values(
    existing: Mapping[str, MergeableT], items: Iterable[MergeableT]
) -> Dict[str, MergeableT]:
    """Like :func:`override_matching_values`, but stored items first donate their state."""
    merged = []
    for item in items:
        stored = existing.get(item.uid)
        merged.append(item.merge(stored) if stored is not None else item)
    return override_matching_values(existing, merged)


@dataclass(frozen=True, slots=True)
class State:
    """Every card and deck known to the scheduler, keyed by uid."""

    card_parsing_config: ParsingConfig = field(default_factory=ParsingConfig)
    cards: Dict[str, Card] = field(default_factory=dict)
    decks: Dict[str, Deck] = field(default_factory=dict)

    @classmethod
    def from_items(
        cls,
        card_parsing_config: ParsingConfig,
        cards: Iterable[Card] = (),
        decks: Iterable[Deck] = (),
    ) -> State:
        return cls(
            card_parsing_config=card_parsing_config,
            cards=override_matching_values({}, cards),
            decks=override_matching_values({}, decks),
        )

    def with_card_parsing_config(self, card_parsing_config: ParsingConfig) -> State:
        return replace(self, card_parsing_config=card_parsing_config)

    def with_overridden_cards(self, cards: Iterable[Card]) -> State:
        """Unconditionally replace stored cards, e.g. with the output of a revision session."""
        return replace(self, cards=override_matching_values(self.cards, cards))

    def with_overridden_decks(self, decks: Iterable[Deck]) -> State:
        return replace(self, decks=override_matching_values(self.decks, decks))

    def with_merged_cards(self, cards: Iterable[Card]) -> State:
        """Adopt new card content while keeping the stored scheduling state."""
        return replace(self, cards=merge_matching_values(self.cards, cards))

    def with_merged_decks(self, decks: Iterable[Deck]) -> State:
        """Adopt new deck card lists while keeping the stored coefficients."""
        return replace(self, decks=merge_matching_values(self.decks, decks))

    def refreshed(self, loaded_cards: Iterable[Card]) -> State:
        """Reconcile freshly extracted cards, and the decks they imply, with this snapshot."""
        loaded_cards = list(loaded_cards)
        return self.with_merged_cards(loaded_cards).with_merged_decks(derive_decks(loaded_cards))

    def get_deck(self, deck_name: str) -> Deck:
        deck = self.decks.get(deck_name)
        if deck is None:
            raise MissingDeckError(deck_name)
        return deck

    def deal(
        self,
        deck_name: str,
        *,
        rng: Optional[Shuffler] = None,
        now: Optional[datetime] = None,
    ) -> Hand:
        """Build a revision hand for the named deck from every known card."""
        deck = self.get_deck(deck_name)
        return Hand.from_deck(deck, self.cards.values(), rng=rng, now=now)
