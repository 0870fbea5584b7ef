"""AnkiConnect HTTP API client."""

import contextlib
from types import TracebackType
from typing import Any, Literal, cast

import httpx

from obsidian_anki_triggers.domain.interfaces.anki_client import IAnkiClient
from obsidian_anki_triggers.exceptions import AnkiConnectError
from obsidian_anki_triggers.utils.logging import get_logger
from obsidian_anki_triggers.utils.retry import retry

logger = get_logger(__name__)

API_VERSION = 6


class TransientAnkiError(AnkiConnectError):
    """Transport-level failure worth retrying (timeouts, refused connections)."""


class AnkiClient(IAnkiClient):
    """Client for the AnkiConnect HTTP API.

    Every request is ``POST {"action", "version": 6, "params"}``. Transport
    failures are retried with exponential backoff; errors reported by
    AnkiConnect itself are raised immediately as ``AnkiConnectError``.
    """

    def __init__(self, url: str, timeout: float = 30.0, max_attempts: int = 3):
        """
        Initialize client.

        Args:
            url: AnkiConnect URL
            timeout: Request timeout in seconds
            max_attempts: Attempts per request on transport errors
        """
        self.url = url
        self.max_attempts = max_attempts

        self.session = httpx.Client(
            timeout=timeout,
            limits=httpx.Limits(
                max_keepalive_connections=5, max_connections=10, keepalive_expiry=30.0
            ),
        )
        logger.debug("anki_client_initialized", url=url, timeout=timeout)

    def invoke(self, action: str, params: dict | None = None) -> Any:
        """
        Invoke AnkiConnect action.

        Args:
            action: Action name
            params: Action parameters

        Returns:
            Action result

        Raises:
            AnkiConnectError: If the action fails
        """
        send = retry(
            max_attempts=self.max_attempts,
            initial_delay=0.5,
            exceptions=(TransientAnkiError,),
        )(self._send)
        return send(action, params)

    def _send(self, action: str, params: dict | None = None) -> Any:
        payload = {"action": action, "version": API_VERSION, "params": params or {}}

        logger.debug("anki_invoke", action=action)

        try:
            response = self.session.post(self.url, json=payload)
            response.raise_for_status()
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            msg = f"Connection error to AnkiConnect: {e}"
            raise TransientAnkiError(msg, context={"action": action}) from e
        except httpx.HTTPStatusError as e:
            msg = f"HTTP {e.response.status_code} from AnkiConnect: {e}"
            raise AnkiConnectError(msg, context={"action": action}) from e
        except httpx.HTTPError as e:
            msg = f"HTTP error calling AnkiConnect: {e}"
            raise AnkiConnectError(msg, context={"action": action}) from e

        try:
            result = response.json()
        except (ValueError, TypeError) as e:
            msg = f"Invalid JSON response: {e}"
            raise AnkiConnectError(msg, context={"action": action}) from e

        if not isinstance(result, dict) or "result" not in result:
            msg = f"Unexpected AnkiConnect response for {action}: {result!r}"
            raise AnkiConnectError(msg, context={"action": action})

        if result.get("error"):
            msg = f"AnkiConnect error: {result['error']}"
            raise AnkiConnectError(msg, context={"action": action})

        return result.get("result")

    def version(self) -> int:
        return cast("int", self.invoke("version"))

    def check_connection(self) -> bool:
        """
        Check if AnkiConnect is reachable.

        Returns:
            True if a ``version`` call succeeds
        """
        try:
            self._send("version")
            return True
        except AnkiConnectError as e:
            logger.warning("anki_connection_check_failed", url=self.url, error=str(e))
            return False

    def get_deck_names(self) -> list[str]:
        return cast("list[str]", self.invoke("deckNames"))

    def create_deck(self, deck_name: str) -> int:
        """
        Create a deck.

        Args:
            deck_name: Deck name (``::`` separates sub-decks)

        Returns:
            Deck ID
        """
        result = cast("int", self.invoke("createDeck", {"deck": deck_name}))
        logger.info("deck_created_remote", deck=deck_name, deck_id=result)
        return result

    def get_model_names(self) -> list[str]:
        return cast("list[str]", self.invoke("modelNames"))

    def get_model_field_names(self, model_name: str) -> list[str]:
        return cast(
            "list[str]", self.invoke("modelFieldNames", {"modelName": model_name})
        )

    def find_notes(self, query: str) -> list[int]:
        """
        Find notes matching query.

        Args:
            query: Anki search query

        Returns:
            List of note IDs
        """
        return cast("list[int]", self.invoke("findNotes", {"query": query}))

    def notes_info(self, note_ids: list[int]) -> list[dict[str, Any]]:
        """
        Get information about notes.

        Args:
            note_ids: List of note IDs

        Returns:
            List of note info dicts
        """
        if not note_ids:
            return []
        return cast(
            "list[dict[str, Any]]", self.invoke("notesInfo", {"notes": note_ids})
        )

    def add_note(
        self,
        deck_name: str,
        model_name: str,
        fields: dict[str, str],
        tags: list[str] | None = None,
    ) -> int:
        """
        Add a new note.

        Args:
            deck_name: Deck name
            model_name: Note type name
            fields: Field values
            tags: Optional tags

        Returns:
            Note ID
        """
        note_payload: dict[str, Any] = {
            "deckName": deck_name,
            "modelName": model_name,
            "fields": fields,
            "options": {"allowDuplicate": False},
        }
        if tags:
            note_payload["tags"] = tags

        result = cast("int", self.invoke("addNote", {"note": note_payload}))

        logger.debug("note_added", note_id=result, deck=deck_name, note_type=model_name)
        return result

    def add_notes(self, notes: list[dict[str, Any]]) -> list[int | None]:
        """
        Add multiple notes in a single batch operation.

        Args:
            notes: List of note payloads, each containing:
                - deckName: str
                - modelName: str
                - fields: dict[str, str]
                - tags: list[str]
                - options: dict (optional)

        Returns:
            List of note IDs (or None for failed notes)
        """
        if not notes:
            return []

        result = cast("list[int | None]", self.invoke("addNotes", {"notes": notes}))

        successful = sum(1 for note_id in result if note_id is not None)
        logger.debug(
            "notes_added_batch",
            total=len(notes),
            successful=successful,
            failed=len(result) - successful,
        )
        return result

    def update_note_fields(self, note_id: int, fields: dict[str, str]) -> None:
        """
        Update note fields.

        Args:
            note_id: Note ID
            fields: New field values (fields not listed are left untouched)
        """
        self.invoke("updateNoteFields", {"note": {"id": note_id, "fields": fields}})

        logger.debug("note_updated", note_id=note_id, fields=list(fields))

    def close(self) -> None:
        """Close HTTP session and cleanup resources."""
        if hasattr(self, "session") and self.session:
            try:
                self.session.close()
                logger.debug("anki_client_closed", url=self.url)
            except Exception as e:
                logger.warning("anki_client_cleanup_failed", url=self.url, error=str(e))

    def __enter__(self) -> "AnkiClient":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> Literal[False]:
        """Context manager exit with cleanup."""
        self.close()
        return False

    def __del__(self) -> None:
        """Cleanup on deletion."""
        with contextlib.suppress(Exception):
            self.close()
