"""Reconcile one bucket of cards with the notes already in its Anki deck."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any

from obsidian_anki_triggers.anki.field_mapper import NoteFieldMapper
from obsidian_anki_triggers.config import Config
from obsidian_anki_triggers.domain.interfaces.anki_client import IAnkiClient
from obsidian_anki_triggers.exceptions import AnkiConnectError, DeckError
from obsidian_anki_triggers.models import CLOZE_MARKER_PATTERN, Card
from obsidian_anki_triggers.utils.logging import get_logger

from .report import SyncReport
from .similarity import ContainmentSimilarity, SimilarityStrategy, normalize_text

logger = get_logger(__name__)

SEARCH_TOKEN_COUNT = 3
SEARCH_TOKEN_MIN_LENGTH = 3
SNIPPET_LENGTH = 50


class MatchState(str, Enum):
    """How a new card relates to the notes already in its deck."""

    NEW = "new"
    IDENTICAL = "identical"
    CHANGED = "changed"


def build_search_key(card: Card) -> list[str]:
    """Up to three distinctive tokens of the card's searchable text.

    Cloze cards use the body with deletion markers removed, other cards the
    prompt. Punctuation is stripped so tokens are safe inside a query.
    """
    if card.is_cloze:
        text = CLOZE_MARKER_PATTERN.sub(r"\1", card.cloze_body or "")
    else:
        text = card.prompt
    tokens = [
        token
        for token in normalize_text(text).replace("_", " ").split()
        if len(token) >= SEARCH_TOKEN_MIN_LENGTH
    ]
    return tokens[:SEARCH_TOKEN_COUNT]


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def build_search_query(
    deck_name: str, model_name: str, field_name: str, tokens: Sequence[str]
) -> str | None:
    """Anki search restricted to deck and note type, one wildcard term per token.

    Returns None when there are no tokens to search for.
    """
    if not tokens:
        return None
    terms = [f'deck:"{_quote(deck_name)}"', f'note:"{_quote(model_name)}"']
    terms.extend(f'"{_quote(field_name)}:*{token}*"' for token in tokens)
    return " ".join(terms)


def _snippet(card: Card) -> str:
    text = " ".join(card.answer.split())
    if len(text) > SNIPPET_LENGTH:
        return text[:SNIPPET_LENGTH] + "..."
    return text


class DeckReconciler:
    """Applies the existing-note policy to every card of one bucket.

    A reconciler never raises for store errors: bucket-level problems fail
    every card of the bucket with one message, record-level problems fail a
    single card.
    """

    def __init__(
        self,
        anki: IAnkiClient,
        config: Config,
        similarity: SimilarityStrategy | None = None,
        mapper: NoteFieldMapper | None = None,
        model_names: Sequence[str] | None = None,
    ):
        self.anki = anki
        self.config = config
        self.similarity = similarity or ContainmentSimilarity()
        self.mapper = mapper or NoteFieldMapper(config)
        self.model_names = set(model_names) if model_names is not None else None

    def ensure_deck(self, deck_name: str) -> bool:
        """Make sure ``deck_name`` exists.

        Returns:
            True if the deck was created by this call

        Raises:
            DeckError: If the deck is missing and cannot be created
        """
        try:
            existing = self.anki.get_deck_names()
        except AnkiConnectError as e:
            msg = f"Could not list decks: {e.message}"
            raise DeckError(msg, context={"deck": deck_name}) from e

        if deck_name in existing:
            return False

        if not self.config.allow_deck_creation:
            msg = f'Deck "{deck_name}" does not exist and deck creation is disabled'
            raise DeckError(
                msg,
                suggestion="Create the deck in Anki or set allow_deck_creation: true",
                context={"deck": deck_name},
            )

        try:
            self.anki.create_deck(deck_name)
        except AnkiConnectError as e:
            msg = f'Failed to create deck "{deck_name}": {e.message}'
            raise DeckError(msg, context={"deck": deck_name}) from e

        logger.info("deck_created", deck=deck_name)
        return True

    def classify(
        self, card: Card, note: dict[str, Any], deck_name: str
    ) -> tuple[MatchState, int | None]:
        """Compare ``card`` (rendered as ``note``) with the candidates in its deck.

        Candidates are the notes whose search field contains every token of
        the card's search key. A candidate similar on all compared fields makes
        the card IDENTICAL; otherwise the first candidate makes it CHANGED.

        Note that two trigger lines for the same word under the same heading
        share their prompt and therefore their search key: the second one is
        classified CHANGED against the first, so under the ``update`` policy it
        overwrites that note's answer instead of creating a new note.
        """
        query = build_search_query(
            deck_name,
            note["modelName"],
            self.mapper.search_field(card),
            build_search_key(card),
        )
        if query is None:
            return MatchState.NEW, None

        note_ids = self.anki.find_notes(query)
        if not note_ids:
            return MatchState.NEW, None

        candidates = self.anki.notes_info(note_ids)
        if not candidates:
            return MatchState.NEW, None

        compared = self.mapper.compared_fields(card)
        for candidate in candidates:
            existing = {
                name: (value or {}).get("value", "")
                for name, value in candidate.get("fields", {}).items()
            }
            if all(
                self.similarity.is_similar(note["fields"].get(name, ""), existing.get(name, ""))
                for name in compared
            ):
                return MatchState.IDENTICAL, candidate.get("noteId")

        return MatchState.CHANGED, candidates[0].get("noteId", note_ids[0])

    def reconcile(self, bucket: str, cards: Sequence[Card]) -> SyncReport:
        report = SyncReport()
        if not cards:
            return report

        deck_name = self.config.deck_name_for(bucket)
        policy = self.config.existing_note_behavior
        trigger_word = None if bucket == self.config.fallback_deck else bucket

        try:
            if self.ensure_deck(deck_name):
                report.record_deck_created(deck_name)
        except DeckError as e:
            logger.error(
                "bucket_failed", deck=deck_name, cards=len(cards), error=e.message
            )
            report.record_failed(f"Failed to process {deck_name}: {e.message}", count=len(cards))
            return report

        pending: list[tuple[Card, dict[str, Any]]] = []
        for card in cards:
            note = self.mapper.to_note(card, deck_name, trigger_word)

            if self.model_names is not None and note["modelName"] not in self.model_names:
                report.record_failed(
                    f'Note type "{note["modelName"]}" not found in Anki; '
                    f"card not added to {deck_name}: {_snippet(card)}"
                )
                continue

            if policy == "create":
                pending.append((card, note))
                continue

            try:
                state, note_id = self.classify(card, note, deck_name)
            except AnkiConnectError as e:
                logger.warning("card_lookup_failed", deck=deck_name, error=e.message)
                report.record_failed(f"Lookup failed in {deck_name}: {e.message}")
                continue

            if state is MatchState.NEW:
                pending.append((card, note))
            elif state is MatchState.IDENTICAL:
                logger.debug("card_skipped_identical", deck=deck_name, note_id=note_id)
                report.record_skipped()
            elif policy == "update" and note_id is not None:
                self._update(card, note, note_id, deck_name, report)
            else:
                logger.debug("card_skipped_existing", deck=deck_name, note_id=note_id)
                report.record_skipped()

        if pending:
            self._create(pending, deck_name, report)

        logger.debug("bucket_reconciled", deck=deck_name, **report.to_dict())
        return report

    def _update(
        self,
        card: Card,
        note: dict[str, Any],
        note_id: int,
        deck_name: str,
        report: SyncReport,
    ) -> None:
        field_name = self.mapper.answer_field(card)
        try:
            self.anki.update_note_fields(note_id, {field_name: note["fields"][field_name]})
        except AnkiConnectError as e:
            logger.warning("note_update_failed", deck=deck_name, note_id=note_id, error=e.message)
            report.record_failed(f"Failed to update note {note_id} in {deck_name}: {e.message}")
            return
        logger.debug("note_updated", deck=deck_name, note_id=note_id, field=field_name)
        report.record_updated()

    def _create(
        self,
        pending: list[tuple[Card, dict[str, Any]]],
        deck_name: str,
        report: SyncReport,
    ) -> None:
        """Add all new notes in one call, one call per note if that fails."""
        payloads = [note for _, note in pending]
        outcomes: list[tuple[int | None, str | None]]
        try:
            outcomes = [(note_id, None) for note_id in self.anki.add_notes(payloads)]
        except AnkiConnectError as e:
            logger.warning(
                "bulk_add_failed",
                deck=deck_name,
                notes=len(payloads),
                error=e.message,
                falling_back_to_individual=True,
            )
            outcomes = [self._add_one(payload) for payload in payloads]

        for index, (card, _) in enumerate(pending):
            note_id, error = outcomes[index] if index < len(outcomes) else (None, None)
            if note_id is not None:
                report.record_created()
                continue
            message = f"Failed to add card in {deck_name}: {_snippet(card)}"
            if error:
                message += f" ({error})"
            report.record_failed(message)

    def _add_one(self, payload: dict[str, Any]) -> tuple[int | None, str | None]:
        try:
            note_id = self.anki.add_note(
                payload["deckName"],
                payload["modelName"],
                payload["fields"],
                payload.get("tags"),
            )
        except AnkiConnectError as e:
            if "duplicate" in e.message.lower():
                logger.debug("note_rejected_duplicate", deck=payload["deckName"])
            return None, e.message
        return note_id, None
