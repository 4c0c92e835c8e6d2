import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from alembic import command
from alembic.config import Config
from sqlalchemy import JSON, DateTime, Float, Index, Integer, String, Text, func, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


LOGGER = logging.getLogger(__name__)

STATE_CONFIG_ID = 1
PROJECT_ROOT = Path(__file__).resolve().parents[2]


class Base(DeclarativeBase):
    """Declarative base for SQLAlchemy models."""


class CardRecord(Base):
    """Persisted content and scheduling state of a single card."""

    __tablename__ = "cards"
    __table_args__ = (Index("ix_cards_due", "due"),)

    path: Mapped[str] = mapped_column(Text, primary_key=True)
    decks: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    question: Mapped[str] = mapped_column(Text, nullable=False, default="")
    answer: Mapped[str] = mapped_column(Text, nullable=False, default="")
    due: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    interval: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0, server_default=text("0")
    )
    memorisation_factor: Mapped[float] = mapped_column(
        Float, nullable=False, default=1300.0, server_default=text("1300")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        server_onupdate=func.now(),
    )


class DeckRecord(Base):
    """Persisted deck with its user-tunable interval coefficients."""

    __tablename__ = "decks"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    card_paths: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    pass_coef: Mapped[float] = mapped_column(
        Float, nullable=False, default=1.0, server_default=text("1.0")
    )
    easy_coef: Mapped[float] = mapped_column(
        Float, nullable=False, default=1.3, server_default=text("1.3")
    )
    fail_coef: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0, server_default=text("0")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        server_onupdate=func.now(),
    )


class StateConfig(Base):
    """Single-row table holding the note parsing configuration."""

    __tablename__ = "state_config"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    card_parsing_config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        server_onupdate=func.now(),
    )


def _expand_database_url(raw_url: str) -> str:
    """Expand environment variables inside the configured database URL."""
    return os.path.expandvars(raw_url)


def get_database_url(default: Optional[str] = None) -> str:
    """Return the configured database URL, falling back to ``default``, or raise if missing."""
    raw_url = os.getenv("DATABASE_URL") or default
    if not raw_url:
        raise RuntimeError("DATABASE_URL environment variable is required to connect to the database.")
    return _expand_database_url(raw_url)


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine for the given database URL."""
    echo = os.getenv("SQLALCHEMY_ECHO", "false").lower() in {"1", "true", "yes"}
    return create_async_engine(database_url, echo=echo)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return an async session factory bound to ``engine``."""
    return async_sessionmaker(engine, expire_on_commit=False)


def should_run_migrations() -> bool:
    """Determine whether migrations should be executed during startup."""
    flag = os.getenv("RUN_MIGRATIONS_ON_STARTUP", "true").lower()
    return flag in {"1", "true", "yes", "on"}


def _build_alembic_config(database_url: Optional[str] = None) -> Config:
    migrations_dir = PROJECT_ROOT / "migrations"
    if not migrations_dir.is_dir():
        raise RuntimeError(
            f"Migrations not found at {migrations_dir}; run vultan from a source checkout with `python -m src.main`."
        )
    alembic_cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(migrations_dir))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url or get_database_url())
    return alembic_cfg


def run_migrations(target: str = "head", database_url: Optional[str] = None) -> None:
    """Run Alembic migrations up to the specified target revision."""
    command.upgrade(_build_alembic_config(database_url), target)


def run_migrations_if_needed(target: str = "head", database_url: Optional[str] = None) -> None:
    """Run migrations when the startup flag is enabled."""
    if not should_run_migrations():
        LOGGER.info("Skipping migrations because RUN_MIGRATIONS_ON_STARTUP is disabled.")
        return

    LOGGER.info("Applying database migrations up to %s.", target)
    run_migrations(target, database_url)
    LOGGER.info("Database schema is up to date.")
