from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from src.srs.notes import discover_notes, load_cards
from src.srs.parser import CardParser, ParsingConfig


NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)

GOOD_NOTE = """tags: cephalopoda

# Question
How many hearts does an octopus have?
# Answer
Three.
----
"""


def _write(path: Path, content: str | bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def test_discover_notes_walks_subdirectories_for_markdown(tmp_path: Path) -> None:
    nested = _write(tmp_path / "zoology" / "octopus.md", GOOD_NOTE)
    top = _write(tmp_path / "alpha.md", GOOD_NOTE)
    _write(tmp_path / "readme.txt", GOOD_NOTE)

    assert discover_notes(tmp_path) == sorted([nested, top])


def test_load_cards_collects_successes_and_failures(tmp_path: Path, caplog) -> None:
    good = _write(tmp_path / "octopus.md", GOOD_NOTE)
    missing_answer = _write(tmp_path / "squid.md", "tags: cephalopoda\n# Question\nInk?\n# Answer\nInk.\n")
    not_utf8 = _write(tmp_path / "binary.md", b"\xff\xfe\xfa")

    with caplog.at_level(logging.WARNING, logger="src.srs.notes"):
        loaded = load_cards(tmp_path, CardParser(ParsingConfig()), now=NOW)

    assert len(loaded.succeeded) == 1
    card = loaded.succeeded[0]
    assert card.path == str(good)
    assert card.decks == ("cephalopoda",)
    assert card.question == "How many hearts does an octopus have?"
    assert card.answer == "Three."
    assert card.scheduling.due == NOW

    reasons = {failure.path: failure.reason for failure in loaded.failed}
    assert reasons[str(missing_answer)].startswith(f"Unable to parse card at {missing_answer}")
    assert "ANSWER" in reasons[str(missing_answer)]
    assert reasons[str(not_utf8)].startswith(f"Unable to read card at {not_utf8}")
    assert len(caplog.records) == 2


def test_load_cards_from_empty_directory(tmp_path: Path) -> None:
    loaded = load_cards(tmp_path, CardParser(ParsingConfig()), now=NOW)

    assert loaded.succeeded == []
    assert loaded.failed == []
