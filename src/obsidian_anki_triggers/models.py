"""Data models for extracted matches and cards."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum

CLOZE_MARKER_PATTERN = re.compile(r"\{\{c\d+::(.*?)\}\}")


class MatchKind(str, Enum):
    """Extraction mode that produced a RawMatch."""

    HIGHLIGHT = "highlight"
    CUE_LINE = "cue_line"
    TRIGGER_LINE = "trigger_line"


class CardKind(str, Enum):
    """Card formats written to Anki."""

    CLOZE = "cloze"
    SHORT_ANSWER = "short-answer"
    MULTIPLE_CHOICE = "multiple-choice"


@dataclass(frozen=True)
class RawMatch:
    """A verbatim piece of a document found by the cue extractor.

    ``source_text`` is a substring (highlights, delimiters included) or a
    whole line (cue and trigger lines) of the originating document.
    """

    source_text: str
    kind: MatchKind
    trigger_word: str | None = None


@dataclass(frozen=True)
class Context:
    """Where a match came from: document label and nearest heading."""

    source_label: str
    heading: str | None = None


@dataclass(frozen=True)
class Card:
    """A flashcard ready for export or synchronization.

    Cards are values; enhancement and other transformations return new
    instances via :meth:`evolve`.
    """

    kind: CardKind
    prompt: str
    answer: str
    options: tuple[str, ...] | None = None
    explanation: str | None = None
    cloze_body: str | None = None
    context: Context | None = None
    origin: MatchKind | None = None
    trigger_word: str | None = None

    def __post_init__(self) -> None:
        """Validate entity invariants."""
        if not self.answer.strip():
            raise ValueError("Card answer cannot be empty")

        if self.kind is CardKind.CLOZE:
            if not self.cloze_body:
                raise ValueError("Cloze card requires a cloze body")
            markers = CLOZE_MARKER_PATTERN.findall(self.cloze_body)
            if len(markers) != 1:
                raise ValueError(
                    f"Cloze body must contain exactly one deletion, found {len(markers)}"
                )

        if self.kind is CardKind.MULTIPLE_CHOICE:
            if not self.options or self.answer not in self.options:
                raise ValueError("Multiple choice options must include the answer")

    @property
    def is_cloze(self) -> bool:
        return self.kind is CardKind.CLOZE

    @property
    def heading(self) -> str | None:
        return self.context.heading if self.context else None

    def evolve(self, **changes: object) -> Card:
        """Return a copy with ``changes`` applied (invariants re-checked)."""
        return replace(self, **changes)  # type: ignore[arg-type]
