from __future__ import annotations

from datetime import datetime, timedelta, timezone

from src.srs.cards import Card, Deck, derive_decks
from src.srs.intervals import IntervalCoefficients, RevisionOutcome, SchedulingState
from src.srs.parser import ParsedCardFields


NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


def _card(path: str, decks: tuple[str, ...] = ("cephalopoda",), due: datetime = NOW) -> Card:
    return Card(
        path=path,
        decks=decks,
        question=f"{path}?",
        answer=f"yes, {path}",
        scheduling=SchedulingState(due=due),
    )


def test_from_parsed_creates_card_with_default_scheduling() -> None:
    fields = ParsedCardFields(decks=("a", "b"), question="What?", answer="That.")

    card = Card.from_parsed("notes/what.md", fields, now=NOW)

    assert card.uid == "notes/what.md"
    assert card.decks == ("a", "b")
    assert card.question == "What?"
    assert card.answer == "That."
    assert card.scheduling == SchedulingState(due=NOW, interval=0.0, memorisation_factor=1300.0)


def test_is_due_includes_cards_due_exactly_now() -> None:
    assert _card("past", due=NOW - timedelta(seconds=1)).is_due(NOW)
    assert _card("now", due=NOW).is_due(NOW)
    assert not _card("future", due=NOW + timedelta(seconds=1)).is_due(NOW)


def test_in_deck_checks_membership() -> None:
    card = _card("octopus", decks=("cephalopoda", "molluscs"))

    assert card.in_deck("molluscs")
    assert not card.in_deck("bivalvia")


def test_transform_returns_rescheduled_copy() -> None:
    card = _card("squid", due=NOW - timedelta(days=4))
    card = card.with_scheduling(SchedulingState(due=card.scheduling.due, interval=1.0, memorisation_factor=2000.0))

    revised = card.transform(RevisionOutcome.EASY, IntervalCoefficients(easy_coef=2.0), now=NOW)

    assert revised is not card
    assert card.scheduling.interval == 1.0
    assert revised.scheduling.memorisation_factor == 2150.0
    assert revised.question == card.question


def test_merge_keeps_content_and_adopts_stored_scheduling() -> None:
    stored_scheduling = SchedulingState(due=NOW + timedelta(days=9), interval=654.25, memorisation_factor=9876.5)
    stored = _card("nautilus").with_scheduling(stored_scheduling)
    fresh = Card(
        path="nautilus",
        decks=("shells",),
        question="New question?",
        answer="New answer.",
        scheduling=SchedulingState(due=NOW),
    )

    merged = fresh.merge(stored)

    assert merged.path == "nautilus"
    assert merged.decks == ("shells",)
    assert merged.question == "New question?"
    assert merged.answer == "New answer."
    assert merged.scheduling == stored_scheduling


def test_deck_merge_keeps_card_paths_and_adopts_stored_coefficients() -> None:
    tuned = IntervalCoefficients(pass_coef=8.0, easy_coef=9.0, fail_coef=10.0)
    stored = Deck(name="cephalopoda", card_paths=("old",), interval_coefficients=tuned)
    fresh = Deck(name="cephalopoda", card_paths=("octopus", "squid"))

    merged = fresh.merge(stored)

    assert merged.card_paths == ("octopus", "squid")
    assert merged.interval_coefficients == tuned


def test_derive_decks_creates_one_deck_per_membership_tag() -> None:
    cards = [
        _card("octopus", decks=("cephalopoda", "molluscs")),
        _card("clam", decks=("bivalvia", "molluscs")),
        _card("squid", decks=("cephalopoda",)),
    ]

    decks = derive_decks(cards)

    assert [deck.name for deck in decks] == ["bivalvia", "cephalopoda", "molluscs"]
    by_name = {deck.name: deck for deck in decks}
    assert by_name["cephalopoda"].card_paths == ("octopus", "squid")
    assert by_name["molluscs"].card_paths == ("octopus", "clam")
    assert by_name["bivalvia"].card_paths == ("clam",)
    assert all(deck.interval_coefficients == IntervalCoefficients() for deck in decks)


def test_derive_decks_without_cards_is_empty() -> None:
    assert derive_decks([]) == []
