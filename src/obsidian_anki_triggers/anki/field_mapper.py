"""Map cards onto AnkiConnect note payloads.

Two note shapes are written: cloze notes (text + extra fields) and
front/back notes. Field names come from the configuration so that custom
note types with renamed fields still work.
"""

import html
import re
from typing import Any
from urllib.parse import quote

from obsidian_anki_triggers.config import Config
from obsidian_anki_triggers.models import Card, CardKind

BASE_TAG = "obsidian-anki-triggers"
CLOZE_TAG = "cloze-deletion"

_BLANK_LINE = re.compile(r"\n\s*\n")
_SPACE_BEFORE_BR = re.compile(r"\s+<br>")
_SPACE_AFTER_BR = re.compile(r"<br>\s+")


def line_breaks_to_html(text: str) -> str:
    """Convert newlines to ``<br>`` and trim whitespace around them."""
    text = _BLANK_LINE.sub("<br><br>", text)
    text = text.replace("\n", "<br>")
    text = _SPACE_BEFORE_BR.sub("<br>", text)
    return _SPACE_AFTER_BR.sub("<br>", text)


def obsidian_link(source_label: str, vault_name: str) -> str:
    """HTML link that opens ``source_label`` in Obsidian."""
    basename = source_label[:-3] if source_label.endswith(".md") else source_label
    uri = f"obsidian://open?vault={quote(vault_name, safe='')}&file={quote(basename, safe='')}"
    return f'<a href="{uri}">{html.escape(source_label)}</a>'


def format_options(options: tuple[str, ...]) -> str:
    """Lettered options block appended to multiple-choice prompts."""
    lines = [f"{chr(ord('A') + index)}. {option}" for index, option in enumerate(options)]
    return "\n\nOptions:\n" + "\n".join(lines)


def tag_safe(value: str) -> str:
    return "_".join(value.split())


class NoteFieldMapper:
    """Renders cards into note fields, tags and payloads."""

    def __init__(self, config: Config):
        self.config = config
        self._vault_name = config.effective_vault_name

    def model_for(self, card: Card) -> str:
        return self.config.cloze_note_type if card.is_cloze else self.config.note_type

    def answer_field(self, card: Card) -> str:
        """Field written when an existing note is updated."""
        return self.config.cloze_text_field if card.is_cloze else self.config.back_field

    def compared_fields(self, card: Card) -> list[str]:
        """Fields that must all be similar for a note to count as identical."""
        if card.is_cloze:
            return [self.config.cloze_text_field]
        return [self.config.front_field, self.config.back_field]

    def search_field(self, card: Card) -> str:
        return self.config.cloze_text_field if card.is_cloze else self.config.front_field

    def _with_link(self, text: str, card: Card) -> str:
        label = card.context.source_label if card.context else ""
        if label and text.startswith(label):
            return obsidian_link(label, self._vault_name) + text[len(label) :]
        return text

    def render_fields(self, card: Card) -> dict[str, str]:
        if card.is_cloze:
            return {
                self.config.cloze_text_field: line_breaks_to_html(
                    self._with_link(card.cloze_body or "", card)
                ),
                self.config.cloze_extra_field: line_breaks_to_html(card.explanation or ""),
            }

        front = card.prompt
        if card.kind is CardKind.MULTIPLE_CHOICE and card.options:
            front += format_options(card.options)
        back = card.answer
        if card.explanation:
            back += "\n\n" + card.explanation
        return {
            self.config.front_field: line_breaks_to_html(self._with_link(front, card)),
            self.config.back_field: line_breaks_to_html(back),
        }

    def tags_for(self, card: Card, trigger_word: str | None = None) -> list[str]:
        tags = [BASE_TAG, f"type::{card.kind.value}"]
        trigger = trigger_word or card.trigger_word
        if trigger:
            tags.append(f"trigger::{tag_safe(trigger)}")
        if card.is_cloze:
            tags.append(CLOZE_TAG)
        return tags

    def to_note(
        self, card: Card, deck_name: str, trigger_word: str | None = None
    ) -> dict[str, Any]:
        """AnkiConnect ``addNote`` payload for ``card``."""
        return {
            "deckName": deck_name,
            "modelName": self.model_for(card),
            "fields": self.render_fields(card),
            "tags": self.tags_for(card, trigger_word),
            "options": {"allowDuplicate": False},
        }
