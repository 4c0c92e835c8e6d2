"""Discovery of note files and conversion of their contents into cards."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from src.srs.cards import Card
from src.srs.errors import CardParsingError
from src.srs.parser import CardParser


LOGGER = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"


@dataclass(slots=True)
class CardLoadFailure:
    """A note that could not be turned into a card."""

    path: str
    reason: str


@dataclass(slots=True)
class LoadedCards:
    """Cards read from a notes directory, alongside the notes that failed."""

    succeeded: List[Card] = field(default_factory=list)
    failed: List[CardLoadFailure] = field(default_factory=list)


def discover_notes(notes_dir: Path) -> List[Path]:
    """Return every note file below ``notes_dir`` in a stable order."""
    return sorted(path for path in notes_dir.rglob(f"*{NOTE_SUFFIX}") if path.is_file())


def load_cards(
    notes_dir: Path,
    parser: CardParser,
    now: Optional[datetime] = None,
) -> LoadedCards:
    """Parse every note below ``notes_dir``; failures are collected rather than raised."""
    loaded = LoadedCards()
    for note_path in discover_notes(notes_dir):
        path = str(note_path)
        try:
            content = note_path.read_text(encoding="utf-8")
            fields = parser.parse(content)
        except (OSError, UnicodeDecodeError) as exc:
            reason = f"Unable to read card at {path}: {exc}"
        except CardParsingError as exc:
            reason = f"Unable to parse card at {path}: {exc}"
        else:
            loaded.succeeded.append(Card.from_parsed(path, fields, now=now))
            continue

        LOGGER.warning(reason)
        loaded.failed.append(CardLoadFailure(path=path, reason=reason))

    LOGGER.info(
        "Loaded %d cards from %s (%d failed).", len(loaded.succeeded), notes_dir, len(loaded.failed)
    )
    return loaded
