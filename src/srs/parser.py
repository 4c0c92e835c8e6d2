"""Extraction of deck memberships, question and answer from note text."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple, Union

from src.srs.errors import CardParsingError, ParserConfigurationError


@dataclass(frozen=True, slots=True)
class TaggedLine:
    """Match the remainder of the line that follows ``tag``."""

    tag: str

    def to_regex(self) -> str:
        return f"{self.tag}(.*)"

    def to_dict(self) -> Dict[str, str]:
        return {"type": "tagged_line", "tag": self.tag}


@dataclass(frozen=True, slots=True)
class WrappedMultiLine:
    """Match everything between ``opening_tag`` and ``closing_tag``, across lines."""

    opening_tag: str
    closing_tag: str

    def to_regex(self) -> str:
        return f"{self.opening_tag}((?s:.*)){self.closing_tag}"

    def to_dict(self) -> Dict[str, str]:
        return {
            "type": "wrapped_multi_line",
            "opening_tag": self.opening_tag,
            "closing_tag": self.closing_tag,
        }


ParsingPattern = Union[TaggedLine, WrappedMultiLine]


def pattern_from_dict(raw: Dict[str, Any]) -> ParsingPattern:
    """Rebuild a parsing pattern from its stored form."""
    pattern_type = raw.get("type")
    if pattern_type == "tagged_line":
        return TaggedLine(tag=str(raw["tag"]))
    if pattern_type == "wrapped_multi_line":
        return WrappedMultiLine(
            opening_tag=str(raw["opening_tag"]),
            closing_tag=str(raw["closing_tag"]),
        )
    raise ValueError(f"Unknown parsing pattern type: {pattern_type!r}")


@dataclass(frozen=True, slots=True)
class ParsingConfig:
    """User-configurable patterns describing how notes are laid out."""

    decks_pattern: ParsingPattern = field(default_factory=lambda: TaggedLine(tag="tags:"))
    deck_delimiter: str = ":"
    question_pattern: ParsingPattern = field(
        default_factory=lambda: WrappedMultiLine(opening_tag="# Question", closing_tag="# Answer")
    )
    answer_pattern: ParsingPattern = field(
        default_factory=lambda: WrappedMultiLine(opening_tag="# Answer", closing_tag="----\n")
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "decks_pattern": self.decks_pattern.to_dict(),
            "deck_delimiter": self.deck_delimiter,
            "question_pattern": self.question_pattern.to_dict(),
            "answer_pattern": self.answer_pattern.to_dict(),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> ParsingConfig:
        """Rebuild a config from :meth:`to_dict` output, raising ``ValueError`` when malformed."""
        if not isinstance(raw, dict):
            raise ValueError("Parsing config must be a mapping.")
        try:
            return cls(
                decks_pattern=pattern_from_dict(raw["decks_pattern"]),
                deck_delimiter=str(raw["deck_delimiter"]),
                question_pattern=pattern_from_dict(raw["question_pattern"]),
                answer_pattern=pattern_from_dict(raw["answer_pattern"]),
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise ValueError(f"Malformed parsing config: {exc}") from exc


@dataclass(frozen=True, slots=True)
class ParsedCardFields:
    """Values extracted from a single note."""

    decks: Tuple[str, ...]
    question: str
    answer: str


class CardParser:
    """Compile a :class:`ParsingConfig` once and parse any number of notes with it."""

    def __init__(self, config: ParsingConfig) -> None:
        if not config.deck_delimiter:
            raise ParserConfigurationError("Deck delimiter must not be empty.")
        self._deck_delimiter = config.deck_delimiter
        self._decks_expression = self._compile(config.decks_pattern, "decks")
        self._question_expression = self._compile(config.question_pattern, "question")
        self._answer_expression = self._compile(config.answer_pattern, "answer")

    @staticmethod
    def _compile(pattern: ParsingPattern, pattern_id: str) -> re.Pattern[str]:
        try:
            return re.compile(pattern.to_regex())
        except re.error as exc:
            raise ParserConfigurationError(
                f"Unable to construct parser. Supplied {pattern_id} pattern is malformed: {pattern!r}"
            ) from exc

    @staticmethod
    def _match(expression: re.Pattern[str], text: str) -> str | None:
        match = expression.search(text)
        if match is None:
            return None
        return match.group(1).strip()

    def parse(self, text: str) -> ParsedCardFields:
        """Extract deck names, question and answer, raising :class:`CardParsingError`."""
        raw_decks = self._match(self._decks_expression, text)
        if raw_decks is None:
            raise CardParsingError("decks")
        decks = tuple(
            name for name in (part.strip() for part in raw_decks.split(self._deck_delimiter)) if name
        )

        question = self._match(self._question_expression, text)
        if question is None:
            raise CardParsingError("question")

        answer = self._match(self._answer_expression, text)
        if answer is None:
            raise CardParsingError("answer")

        return ParsedCardFields(decks=decks, question=question, answer=answer)
