from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Tuple

import pytest
from sqlalchemy import create_engine, inspect

from src.db import STATE_CONFIG_ID, CardRecord, DeckRecord, StateConfig, run_migrations, run_migrations_if_needed
from src.db.state_store import load_state, save_state
from src.srs.cards import Card, Deck
from src.srs.errors import StateStoreError
from src.srs.intervals import IntervalCoefficients, SchedulingState
from src.srs.parser import ParsingConfig, TaggedLine
from src.srs.state import State


NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


def _sample_state() -> State:
    cards = [
        Card(
            path="notes/octopus.md",
            decks=("cephalopoda", "molluscs"),
            question="Hearts?",
            answer="Three.",
            scheduling=SchedulingState(due=NOW + timedelta(days=2, hours=5), interval=6.5, memorisation_factor=2150.0),
        ),
        Card(
            path="notes/clam.md",
            decks=("bivalvia",),
            question="Shells?",
            answer="Two.",
            scheduling=SchedulingState(due=NOW),
        ),
    ]
    decks = [
        Deck(
            name="cephalopoda",
            card_paths=("notes/octopus.md",),
            interval_coefficients=IntervalCoefficients(pass_coef=1.1, easy_coef=1.7, fail_coef=0.25),
        ),
        Deck(name="bivalvia", card_paths=("notes/clam.md",)),
        Deck(name="molluscs", card_paths=("notes/octopus.md",)),
    ]
    config = ParsingConfig(decks_pattern=TaggedLine(tag="decks:"), deck_delimiter=",")
    return State.from_items(config, cards=cards, decks=decks)


@pytest.mark.asyncio
async def test_empty_store_loads_default_state(session_factory) -> None:
    async with session_factory() as session:
        async with session.begin():
            state = await load_state(session)

    assert state == State()


@pytest.mark.asyncio
async def test_saved_state_loads_back_unchanged(session_factory) -> None:
    state = _sample_state()

    async with session_factory() as session:
        async with session.begin():
            await save_state(session, state, now=NOW)

    async with session_factory() as session:
        async with session.begin():
            loaded = await load_state(session)

    assert loaded == state
    assert loaded.cards["notes/octopus.md"].scheduling.due.tzinfo is not None


@pytest.mark.asyncio
async def test_saving_again_updates_existing_rows(session_factory) -> None:
    state = _sample_state()
    async with session_factory() as session:
        async with session.begin():
            await save_state(session, state, now=NOW)

    revised_card = state.cards["notes/clam.md"].with_scheduling(
        SchedulingState(due=NOW + timedelta(days=2), interval=2.0, memorisation_factor=1300.0)
    )
    retuned_deck = Deck(
        name="bivalvia",
        card_paths=("notes/clam.md",),
        interval_coefficients=IntervalCoefficients(pass_coef=0.9),
    )
    updated = (
        state.with_overridden_cards([revised_card])
        .with_overridden_decks([retuned_deck])
        .with_card_parsing_config(ParsingConfig())
    )

    async with session_factory() as session:
        async with session.begin():
            await save_state(session, updated, now=NOW + timedelta(minutes=5))

    async with session_factory() as session:
        async with session.begin():
            loaded = await load_state(session)
            card_rows = await session.get(CardRecord, "notes/clam.md")

    assert loaded == updated
    assert card_rows is not None
    assert card_rows.created_at.replace(tzinfo=timezone.utc) == NOW


@pytest.mark.asyncio
async def test_malformed_parsing_config_is_reported(session_factory) -> None:
    async with session_factory() as session:
        async with session.begin():
            session.add(StateConfig(id=STATE_CONFIG_ID, card_parsing_config={"deck_delimiter": ":"}, updated_at=NOW))

    async with session_factory() as session:
        async with session.begin():
            with pytest.raises(StateStoreError):
                await load_state(session)


@pytest.mark.asyncio
async def test_malformed_card_row_names_the_card(session_factory) -> None:
    async with session_factory() as session:
        async with session.begin():
            session.add(
                CardRecord(
                    path="notes/broken.md",
                    decks=["a"],
                    question="q",
                    answer="a",
                    due=NOW,
                    interval=-3.0,
                    memorisation_factor=1300.0,
                    created_at=NOW,
                    updated_at=NOW,
                )
            )

    async with session_factory() as session:
        async with session.begin():
            with pytest.raises(StateStoreError) as excinfo:
                await load_state(session)

    assert "notes/broken.md" in str(excinfo.value)


@pytest.mark.asyncio
async def test_malformed_deck_row_names_the_deck(session_factory) -> None:
    async with session_factory() as session:
        async with session.begin():
            session.add(
                DeckRecord(
                    name="broken",
                    card_paths="not a list",
                    pass_coef=1.0,
                    easy_coef=1.3,
                    fail_coef=0.0,
                    created_at=NOW,
                    updated_at=NOW,
                )
            )

    async with session_factory() as session:
        async with session.begin():
            with pytest.raises(StateStoreError) as excinfo:
                await load_state(session)

    assert "broken" in str(excinfo.value)


def test_run_migrations_if_needed_invokes_upgrade(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[Tuple[object, str]] = []

    def fake_upgrade(config: object, target: str) -> None:
        calls.append((config, target))

    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("RUN_MIGRATIONS_ON_STARTUP", "true")
    monkeypatch.setattr("src.db.command.upgrade", fake_upgrade)

    run_migrations_if_needed()

    assert calls and calls[0][1] == "head"


def test_run_migrations_if_needed_skips_when_disabled(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RUN_MIGRATIONS_ON_STARTUP", "false")
    calls: List[str] = []

    def fake_upgrade(_: object, target: str) -> None:
        calls.append(target)

    monkeypatch.setattr("src.db.command.upgrade", fake_upgrade)

    run_migrations_if_needed(database_url="sqlite+aiosqlite:///:memory:")

    assert not calls


def test_run_migrations_creates_state_tables(tmp_path) -> None:
    database_path = tmp_path / "state.db"

    run_migrations(database_url=f"sqlite+aiosqlite:///{database_path}")

    engine = create_engine(f"sqlite:///{database_path}")
    try:
        tables = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    assert {"alembic_version", "cards", "decks", "state_config"} <= tables


def test_run_migrations_explains_missing_checkout(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("src.db.PROJECT_ROOT", tmp_path)

    with pytest.raises(RuntimeError, match="source checkout"):
        run_migrations(database_url="sqlite+aiosqlite:///:memory:")
