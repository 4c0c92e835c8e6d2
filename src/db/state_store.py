"""Loading and saving scheduler state through SQLAlchemy."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.srs.cards import Card, Deck
from src.srs.errors import StateStoreError
from src.srs.intervals import IntervalCoefficients, SchedulingState
from src.srs.parser import ParsingConfig
from src.srs.state import State

from . import STATE_CONFIG_ID, CardRecord, DeckRecord, StateConfig


LOGGER = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on the way out; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def card_from_record(record: CardRecord) -> Card:
    """Convert a stored card row, raising :class:`StateStoreError` when malformed."""
    try:
        if not isinstance(record.decks, list):
            raise ValueError("decks must be a list of deck names")
        if record.due is None:
            raise ValueError("due date is missing")
        interval = float(record.interval)
        if interval < 0:
            raise ValueError(f"interval must not be negative, got {interval}")
        return Card(
            path=record.path,
            decks=tuple(str(name) for name in record.decks),
            question=record.question,
            answer=record.answer,
            scheduling=SchedulingState(
                due=_as_utc(record.due),
                interval=interval,
                memorisation_factor=float(record.memorisation_factor),
            ),
        )
    except (TypeError, ValueError) as exc:
        raise StateStoreError(f"Unable to parse card {record.path} from state store: {exc}") from exc


def deck_from_record(record: DeckRecord) -> Deck:
    """Convert a stored deck row, raising :class:`StateStoreError` when malformed."""
    try:
        if not isinstance(record.card_paths, list):
            raise ValueError("card_paths must be a list of card paths")
        return Deck(
            name=record.name,
            card_paths=tuple(str(path) for path in record.card_paths),
            interval_coefficients=IntervalCoefficients(
                pass_coef=float(record.pass_coef),
                easy_coef=float(record.easy_coef),
                fail_coef=float(record.fail_coef),
            ),
        )
    except (TypeError, ValueError) as exc:
        raise StateStoreError(f"Unable to parse deck {record.name} from state store: {exc}") from exc


async def load_state(session: AsyncSession) -> State:
    """Read the persisted snapshot; an empty store yields the default state."""
    try:
        config_record = await session.get(StateConfig, STATE_CONFIG_ID)
        card_records = (await session.execute(select(CardRecord).order_by(CardRecord.path))).scalars().all()
        deck_records = (await session.execute(select(DeckRecord).order_by(DeckRecord.name))).scalars().all()
    except SQLAlchemyError as exc:
        raise StateStoreError("Unable to read state from the database.") from exc

    if config_record is None:
        card_parsing_config = ParsingConfig()
    else:
        try:
            card_parsing_config = ParsingConfig.from_dict(config_record.card_parsing_config)
        except ValueError as exc:
            raise StateStoreError(f"Unable to parse card parsing config from state store: {exc}") from exc

    state = State.from_items(
        card_parsing_config,
        cards=[card_from_record(record) for record in card_records],
        decks=[deck_from_record(record) for record in deck_records],
    )
    LOGGER.debug("Loaded %d cards and %d decks from the state store.", len(state.cards), len(state.decks))
    return state


async def save_state(
    session: AsyncSession,
    state: State,
    now: Optional[datetime] = None,
) -> None:
    """Insert or update every card, deck and the parsing config of ``state``."""
    if now is None:
        now = datetime.now(timezone.utc)

    try:
        config_record = await session.get(StateConfig, STATE_CONFIG_ID)
        if config_record is None:
            session.add(
                StateConfig(
                    id=STATE_CONFIG_ID,
                    card_parsing_config=state.card_parsing_config.to_dict(),
                    updated_at=now,
                )
            )
        else:
            config_record.card_parsing_config = state.card_parsing_config.to_dict()
            config_record.updated_at = now

        for card in state.cards.values():
            record = await session.get(CardRecord, card.path)
            if record is None:
                record = CardRecord(path=card.path, created_at=now)
                session.add(record)
            record.decks = list(card.decks)
            record.question = card.question
            record.answer = card.answer
            record.due = card.scheduling.due.astimezone(timezone.utc)
            record.interval = card.scheduling.interval
            record.memorisation_factor = card.scheduling.memorisation_factor
            record.updated_at = now

        for deck in state.decks.values():
            record = await session.get(DeckRecord, deck.name)
            if record is None:
                record = DeckRecord(name=deck.name, created_at=now)
                session.add(record)
            record.card_paths = list(deck.card_paths)
            record.pass_coef = deck.interval_coefficients.pass_coef
            record.easy_coef = deck.interval_coefficients.easy_coef
            record.fail_coef = deck.interval_coefficients.fail_coef
            record.updated_at = now

        await session.flush()
    except SQLAlchemyError as exc:
        raise StateStoreError("Unable to write state to the database.") from exc

    LOGGER.debug("Saved %d cards and %d decks to the state store.", len(state.cards), len(state.decks))
