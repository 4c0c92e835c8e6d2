"""Bootstrap logic for running a revision session from the command line."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.app.settings import AppSettings
from src.app.terminal import TerminalReviewer
from src.db import build_engine, build_session_factory, run_migrations_if_needed
from src.db.state_store import load_state, save_state
from src.srs.cards import Deck
from src.srs.errors import SchedulerError
from src.srs.hand import ScoreCallback, Shuffler
from src.srs.notes import CardLoadFailure, load_cards
from src.srs.parser import CardParser


LOGGER = logging.getLogger(__name__)

ReviewerFactory = Callable[[Deck, int], ScoreCallback]


@dataclass(slots=True)
class StudySummary:
    """What happened during one run of the study command."""

    deck_name: Optional[str]
    available_decks: List[str]
    revised: int = 0
    cancelled: bool = False
    error: Optional[str] = None
    failures: List[CardLoadFailure] = field(default_factory=list)


def _configure_logging(log_level: str) -> None:
    """Set up project-wide logging configuration."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        level=log_level,
    )


async def study(
    settings: AppSettings,
    session_factory: async_sessionmaker[AsyncSession],
    reviewer_factory: ReviewerFactory = TerminalReviewer,
    rng: Optional[Shuffler] = None,
) -> StudySummary:
    """Refresh the stored state from the notes, revise one deck and save the result."""
    async with session_factory() as session:
        async with session.begin():
            state = await load_state(session)

    parser = CardParser(state.card_parsing_config)
    loaded = load_cards(settings.notes_dir, parser)
    state = state.refreshed(loaded.succeeded)

    summary = StudySummary(
        deck_name=settings.deck_name,
        available_decks=sorted(state.decks),
        failures=list(loaded.failed),
    )

    if settings.deck_name:
        try:
            deck = state.get_deck(settings.deck_name)
            hand = state.deal(settings.deck_name, rng=rng)
        except SchedulerError as exc:
            LOGGER.info("Nothing to revise: %s", exc)
            summary.error = str(exc)
        else:
            reviewer = reviewer_factory(deck, hand.remaining)
            # The reviewer blocks on input, so the session runs off the event loop.
            result = await asyncio.to_thread(hand.revise_until_none_fail, reviewer)
            state = state.with_overridden_cards(result.cards)
            summary.revised = len(result.cards)
            summary.cancelled = result.cancelled

    async with session_factory() as session:
        async with session.begin():
            await save_state(session, state)

    return summary


async def _study_with_database(settings: AppSettings) -> StudySummary:
    engine = build_engine(settings.database_url)
    try:
        return await study(settings, build_session_factory(engine))
    finally:
        await engine.dispose()


def run_study(settings: AppSettings) -> StudySummary:
    """Run one study session using the provided settings."""
    _configure_logging(settings.log_level)
    print(f"{settings.app_name} is running in {settings.app_env} mode.")

    try:
        run_migrations_if_needed(database_url=settings.database_url)
    except Exception:
        LOGGER.exception("Database migrations failed. Aborting startup.")
        raise

    LOGGER.info("Studying notes in %s.", settings.notes_dir)
    try:
        summary = asyncio.run(_study_with_database(settings))
    except SchedulerError:
        LOGGER.exception("Unable to complete the study session.")
        raise

    for failure in summary.failures:
        print(f"Skipped {failure.path}: {failure.reason}")
    if summary.deck_name is None:
        print("Available decks: " + (", ".join(summary.available_decks) or "none"))
    elif summary.error:
        print(summary.error)
    else:
        state_word = "cancelled" if summary.cancelled else "finished"
        print(f"Revision of deck '{summary.deck_name}' {state_word}; {summary.revised} cards saved.")
    return summary
