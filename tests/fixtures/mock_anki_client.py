"""In-memory implementation of IAnkiClient for testing."""

import re
import threading
from collections.abc import Callable
from typing import Any

from obsidian_anki_triggers.domain.interfaces.anki_client import IAnkiClient
from obsidian_anki_triggers.exceptions import AnkiConnectError

_QUOTED_FILTER = re.compile(r'(deck|note):"((?:[^"\\]|\\.)*)"')
_FIELD_WILDCARD = re.compile(r'"([^":]+):\*([^*"]*)\*"')

DUPLICATE_ERROR = "cannot create note because it is a duplicate"


class MockAnkiClient(IAnkiClient):
    """Mock implementation of Anki client for testing.

    Stores decks and notes in memory and evaluates the subset of the Anki
    search syntax the reconciler produces: ``deck:"..."``, ``note:"..."`` and
    ``"Field:*token*"`` terms (case-insensitive). Failure switches let tests
    force store errors at each call.
    """

    MODEL_FIELDS = {
        "Basic": ["Front", "Back"],
        "Cloze": ["Text", "Extra"],
    }

    def __init__(
        self,
        decks: list[str] | None = None,
        models: list[str] | None = None,
        api_version: int = 6,
    ):
        """Initialize mock client."""
        self._decks = list(decks or ["Default"])
        self._models = list(models if models is not None else self.MODEL_FIELDS)
        self._notes: dict[int, dict[str, Any]] = {}
        self._note_counter = 1000
        self._lock = threading.Lock()
        self.api_version = api_version

        # Failure injection
        self.unreachable = False
        self.fail_create_deck = False
        self.fail_find_notes = False
        self.fail_add_notes = False
        self.fail_add_note_when: Callable[[dict[str, str]], bool] | None = None
        self.fail_update = False

        # Call recording
        self.add_notes_calls: list[list[dict[str, Any]]] = []
        self.add_note_calls: list[dict[str, Any]] = []
        self.update_calls: list[tuple[int, dict[str, str]]] = []
        self.queries: list[str] = []

    def _check_reachable(self) -> None:
        if self.unreachable:
            msg = "Connection error to AnkiConnect: connection refused"
            raise AnkiConnectError(msg)

    def version(self) -> int:
        self._check_reachable()
        return self.api_version

    def check_connection(self) -> bool:
        return not self.unreachable

    def get_deck_names(self) -> list[str]:
        self._check_reachable()
        with self._lock:
            return self._decks.copy()

    def create_deck(self, deck_name: str) -> int:
        self._check_reachable()
        if self.fail_create_deck:
            msg = f"AnkiConnect error: cannot create deck {deck_name}"
            raise AnkiConnectError(msg)
        with self._lock:
            if deck_name not in self._decks:
                self._decks.append(deck_name)
            return self._decks.index(deck_name) + 1

    def get_model_names(self) -> list[str]:
        self._check_reachable()
        return self._models.copy()

    def get_model_field_names(self, model_name: str) -> list[str]:
        return list(self.MODEL_FIELDS.get(model_name, []))

    def find_notes(self, query: str) -> list[int]:
        self._check_reachable()
        self.queries.append(query)
        if self.fail_find_notes:
            msg = "AnkiConnect error: search failed"
            raise AnkiConnectError(msg)

        filters = dict(_QUOTED_FILTER.findall(query))
        wildcards = _FIELD_WILDCARD.findall(query)

        with self._lock:
            notes = list(self._notes.values())

        matches = []
        for note in notes:
            if "deck" in filters and note["deckName"] != filters["deck"]:
                continue
            if "note" in filters and note["modelName"] != filters["note"]:
                continue
            if all(
                token.lower() in note["fields"].get(field, {}).get("value", "").lower()
                for field, token in wildcards
            ):
                matches.append(note["noteId"])
        return matches

    def notes_info(self, note_ids: list[int]) -> list[dict[str, Any]]:
        self._check_reachable()
        with self._lock:
            return [self._copy(self._notes[note_id]) for note_id in note_ids if note_id in self._notes]

    def add_note(
        self,
        deck_name: str,
        model_name: str,
        fields: dict[str, str],
        tags: list[str] | None = None,
    ) -> int:
        self._check_reachable()
        self.add_note_calls.append(
            {"deckName": deck_name, "modelName": model_name, "fields": fields, "tags": tags}
        )
        if self.fail_add_note_when is not None and self.fail_add_note_when(fields):
            msg = "AnkiConnect error: note was rejected"
            raise AnkiConnectError(msg)
        note_id = self._store(deck_name, model_name, fields, tags or [])
        if note_id is None:
            msg = f"AnkiConnect error: {DUPLICATE_ERROR}"
            raise AnkiConnectError(msg)
        return note_id

    def add_notes(self, notes: list[dict[str, Any]]) -> list[int | None]:
        self._check_reachable()
        self.add_notes_calls.append(notes)
        if self.fail_add_notes:
            msg = "AnkiConnect error: addNotes failed"
            raise AnkiConnectError(msg)
        return [
            self._store(note["deckName"], note["modelName"], note["fields"], note.get("tags", []))
            for note in notes
        ]

    def update_note_fields(self, note_id: int, fields: dict[str, str]) -> None:
        self._check_reachable()
        self.update_calls.append((note_id, dict(fields)))
        if self.fail_update:
            msg = "AnkiConnect error: update failed"
            raise AnkiConnectError(msg)
        with self._lock:
            if note_id not in self._notes:
                msg = f"AnkiConnect error: note {note_id} not found"
                raise AnkiConnectError(msg)
            for name, value in fields.items():
                self._notes[note_id]["fields"][name]["value"] = value

    def _store(
        self, deck_name: str, model_name: str, fields: dict[str, str], tags: list[str]
    ) -> int | None:
        """Store a note; None when its first field duplicates an existing note."""
        field_names = self.MODEL_FIELDS.get(model_name, list(fields))
        first_field = field_names[0] if field_names else None
        with self._lock:
            if model_name not in self._models or deck_name not in self._decks:
                return None
            for note in self._notes.values():
                if (
                    first_field
                    and note["modelName"] == model_name
                    and note["fields"][first_field]["value"] == fields.get(first_field)
                ):
                    return None
            self._note_counter += 1
            note_id = self._note_counter
            self._notes[note_id] = {
                "noteId": note_id,
                "deckName": deck_name,
                "modelName": model_name,
                "tags": list(tags),
                "fields": {
                    name: {"value": fields.get(name, ""), "order": order}
                    for order, name in enumerate(field_names)
                },
            }
            return note_id

    @staticmethod
    def _copy(note: dict[str, Any]) -> dict[str, Any]:
        return {
            **note,
            "tags": list(note["tags"]),
            "fields": {name: dict(value) for name, value in note["fields"].items()},
        }

    # Test helpers

    def get_notes(self) -> dict[int, dict[str, Any]]:
        """Get all stored notes."""
        with self._lock:
            return {note_id: self._copy(note) for note_id, note in self._notes.items()}

    def notes_in_deck(self, deck_name: str) -> list[dict[str, Any]]:
        return [note for note in self.get_notes().values() if note["deckName"] == deck_name]
