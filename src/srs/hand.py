"""Revision sessions that re-queue failed cards until every card is answered."""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Deque, Iterable, List, MutableSequence, Optional, Protocol, Union

from src.srs.cards import Card, Deck
from src.srs.errors import EmptyDeckError, NoDueCardsError
from src.srs.intervals import IntervalCoefficients, RevisionOutcome


LOGGER = logging.getLogger(__name__)


class SessionSignal(Enum):
    """Signals a scoring callback may return instead of an outcome."""

    CANCEL = "cancel"


ScoreCallback = Callable[[Card, int], Union[RevisionOutcome, SessionSignal]]


class Shuffler(Protocol):
    """Minimal interface required from the randomness source."""

    def shuffle(self, x: MutableSequence[Card]) -> None:
        ...


@dataclass(slots=True)
class RevisionResult:
    """Cards produced by a revision session."""

    cards: List[Card]
    cancelled: bool = False


class Hand:
    """The shuffled queue of due cards studied during one session.

    Only the hand touches its queue, and a hand can be revised once.
    """

    def __init__(
        self,
        cards: Iterable[Card],
        interval_coefficients: IntervalCoefficients,
        deck_name: str = "",
    ) -> None:
        self._queue: Deque[Card] = deque(cards)
        self._interval_coefficients = interval_coefficients
        self._deck_name = deck_name
        self._consumed = False

    @classmethod
    def from_deck(
        cls,
        deck: Deck,
        cards: Iterable[Card],
        *,
        rng: Optional[Shuffler] = None,
        now: Optional[datetime] = None,
    ) -> Hand:
        """Deal the due cards of ``deck`` from the full card pool in random order."""
        if now is None:
            now = datetime.now(timezone.utc)
        if rng is None:
            rng = random.Random()

        deck_cards = [card for card in cards if card.in_deck(deck.name)]
        if not deck_cards:
            raise EmptyDeckError(deck.name)

        due_cards = [card for card in deck_cards if card.is_due(now)]
        if not due_cards:
            raise NoDueCardsError(deck.name)

        rng.shuffle(due_cards)
        LOGGER.debug(
            "Dealt %d of %d cards from deck %s.", len(due_cards), len(deck_cards), deck.name
        )
        return cls(due_cards, deck.interval_coefficients, deck_name=deck.name)

    @property
    def interval_coefficients(self) -> IntervalCoefficients:
        return self._interval_coefficients

    @property
    def remaining(self) -> int:
        """Number of cards still waiting to be judged."""
        return len(self._queue)

    def queued_cards(self) -> List[Card]:
        """Return a snapshot of the queue in presentation order."""
        return list(self._queue)

    def revise_until_none_fail(
        self,
        score_callback: ScoreCallback,
        *,
        now: Optional[datetime] = None,
    ) -> RevisionResult:
        """Present cards until each has received a non-fail outcome or the reviewer cancels.

        Failed cards are rescheduled and returned to the back of the queue.
        On cancellation the card being judged and every queued card are
        returned unchanged after the cards already judged. Exceptions raised
        by ``score_callback`` propagate to the caller.
        """
        if self._consumed:
            raise RuntimeError("This hand has already been revised.")
        self._consumed = True

        output: List[Card] = []
        while self._queue:
            remaining = len(self._queue)
            card = self._queue.popleft()
            outcome = score_callback(card, remaining)

            if outcome is SessionSignal.CANCEL:
                output.append(card)
                output.extend(self._queue)
                self._queue.clear()
                if self._deck_name:
                    LOGGER.info(
                        "Revision of deck %s cancelled with %d cards left.", self._deck_name, remaining
                    )
                else:
                    LOGGER.info("Revision cancelled with %d cards left.", remaining)
                return RevisionResult(cards=output, cancelled=True)

            revised = card.transform(outcome, self._interval_coefficients, now=now)
            if outcome is RevisionOutcome.FAIL:
                self._queue.append(revised)
                LOGGER.debug("Card %s failed and was re-queued.", card.path)
            else:
                output.append(revised)
                LOGGER.debug("Card %s scored %s.", card.path, outcome.value)

        return RevisionResult(cards=output)
