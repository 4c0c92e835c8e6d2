import argparse
from typing import Optional, Sequence

from src.app import AppSettings, run_study

__all__ = ["main"]


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Study flashcards from a deck of notes.")
    parser.add_argument("-n", "--notes-dir", help="Directory containing the notes (defaults to NOTES_DIR).")
    parser.add_argument("-d", "--deck", help="Name of the deck to study (defaults to DECK_NAME).")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point for the application."""
    args = _parse_args(argv)
    settings = AppSettings.from_env(notes_dir=args.notes_dir, deck_name=args.deck)
    run_study(settings)


if __name__ == "__main__":
    main()
