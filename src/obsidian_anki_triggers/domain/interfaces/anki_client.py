"""Interface for Anki client operations."""

from abc import ABC, abstractmethod
from typing import Any


class IAnkiClient(ABC):
    """Interface for communicating with Anki through the AnkiConnect API.

    Every method either returns a result or raises ``AnkiConnectError`` for
    that call only.
    """

    @abstractmethod
    def version(self) -> int:
        """Get the AnkiConnect API version."""

    @abstractmethod
    def check_connection(self) -> bool:
        """Check if AnkiConnect is available and responsive."""

    @abstractmethod
    def get_deck_names(self) -> list[str]:
        """Get list of available deck names."""

    @abstractmethod
    def create_deck(self, deck_name: str) -> int:
        """Create a deck (no-op in Anki if it exists).

        Returns:
            Deck ID
        """

    @abstractmethod
    def get_model_names(self) -> list[str]:
        """Get list of available note type names."""

    @abstractmethod
    def get_model_field_names(self, model_name: str) -> list[str]:
        """Get field names for a note type."""

    @abstractmethod
    def find_notes(self, query: str) -> list[int]:
        """Find notes matching an Anki search query.

        Returns:
            List of note IDs
        """

    @abstractmethod
    def notes_info(self, note_ids: list[int]) -> list[dict[str, Any]]:
        """Get field values and metadata for notes.

        Returns:
            One dict per note with ``noteId`` and ``fields`` mapping field
            name to ``{"value": str, "order": int}``
        """

    @abstractmethod
    def add_note(
        self,
        deck_name: str,
        model_name: str,
        fields: dict[str, str],
        tags: list[str] | None = None,
    ) -> int:
        """Add a single note.

        Returns:
            Note ID
        """

    @abstractmethod
    def add_notes(self, notes: list[dict[str, Any]]) -> list[int | None]:
        """Add several notes in one call.

        Args:
            notes: AnkiConnect note payloads (deckName, modelName, fields, tags)

        Returns:
            Note ID or None per payload, in order
        """

    @abstractmethod
    def update_note_fields(self, note_id: int, fields: dict[str, str]) -> None:
        """Overwrite only the given fields of an existing note."""
