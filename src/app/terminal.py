"""Plain terminal prompts used to score cards during a revision session."""

from __future__ import annotations

from typing import Callable, Dict, Union

from src.srs.cards import Card, Deck
from src.srs.hand import SessionSignal
from src.srs.intervals import RevisionOutcome


QUIT_KEYS = {"q", "quit"}
SCORE_KEYS: Dict[str, RevisionOutcome] = {
    "1": RevisionOutcome.FAIL,
    "2": RevisionOutcome.HARD,
    "3": RevisionOutcome.PASS,
    "4": RevisionOutcome.EASY,
}
SCORE_HELP = (
    "[1] FAIL: revise it again this session  "
    "[2] HARD: took a long time  "
    "[3] PASS: took a short time  "
    "[4] EASY: almost immediate  "
    "[Q] QUIT"
)


class TerminalReviewer:
    """Scoring callback that asks the reviewer for a judgement on each card."""

    def __init__(
        self,
        deck: Deck,
        total: int,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ) -> None:
        self._deck = deck
        self._total = total
        self._read = read
        self._write = write

    def _prompt(self, message: str) -> str:
        try:
            return self._read(message).strip().lower()
        except EOFError:
            # Closed input is treated as a request to quit.
            return "q"

    def __call__(self, card: Card, remaining: int) -> Union[RevisionOutcome, SessionSignal]:
        revised = self._total - remaining
        self._write(
            f"\n[{self._deck.name}] {revised} of {self._total} revised, {remaining} remaining"
        )
        self._write(f"QUESTION:\n{card.question}")

        reply = self._prompt("Press Enter to reveal the answer or Q to quit: ")
        if reply in QUIT_KEYS:
            return SessionSignal.CANCEL

        self._write(f"ANSWER:\n{card.answer}")
        while True:
            reply = self._prompt(f"{SCORE_HELP}\n> ")
            if reply in QUIT_KEYS:
                return SessionSignal.CANCEL
            outcome = SCORE_KEYS.get(reply)
            if outcome is not None:
                return outcome
            self._write("Please answer with 1, 2, 3, 4 or Q.")
