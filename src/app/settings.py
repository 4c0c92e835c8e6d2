"""Configuration helpers for the Vultan study runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


STATE_DATABASE_FILENAME = ".vultan.db"


def default_database_url(notes_dir: Path) -> str:
    """Return the SQLite URL of the state database kept inside the notes directory."""
    return f"sqlite+aiosqlite:///{notes_dir / STATE_DATABASE_FILENAME}"


@dataclass(frozen=True)
class AppSettings:
    """Strongly typed application settings loaded from environment variables."""

    app_name: str
    app_env: str
    log_level: str
    notes_dir: Path
    deck_name: Optional[str]
    database_url: str

    @classmethod
    def from_env(
        cls,
        notes_dir: Optional[str] = None,
        deck_name: Optional[str] = None,
    ) -> AppSettings:
        """Construct settings from environment variables, preferring explicit overrides."""
        app_name = os.getenv("APP_NAME", "Vultan")
        app_env = os.getenv("APP_ENV", "development")
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        raw_notes_dir = notes_dir or os.getenv("NOTES_DIR")
        if not raw_notes_dir:
            raise RuntimeError("NOTES_DIR environment variable is required to locate the notes to study.")

        resolved_notes_dir = Path(raw_notes_dir).expanduser()
        if not resolved_notes_dir.is_dir():
            raise RuntimeError(f"NOTES_DIR must point to an existing directory, got {raw_notes_dir}.")

        deck_name = deck_name or os.getenv("DECK_NAME") or None
        database_url = os.getenv("DATABASE_URL") or default_database_url(resolved_notes_dir)

        return cls(
            app_name=app_name,
            app_env=app_env,
            log_level=log_level,
            notes_dir=resolved_notes_dir,
            deck_name=deck_name,
            database_url=database_url,
        )
