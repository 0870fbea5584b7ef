"""Tests for the AnkiConnect HTTP client."""

import json

import httpx
import pytest
import respx

from obsidian_anki_triggers.anki.client import AnkiClient
from obsidian_anki_triggers.exceptions import AnkiConnectError

ANKI_URL = "http://localhost:8765"


@pytest.fixture(autouse=True)
def no_retry_sleep(monkeypatch):
    monkeypatch.setattr("obsidian_anki_triggers.utils.retry.time.sleep", lambda _: None)


def _ok(result):
    return httpx.Response(200, json={"result": result, "error": None})


def _sent(route) -> dict:
    return json.loads(route.calls.last.request.content)


class TestAnkiClient:
    @respx.mock
    def test_payload_shape(self) -> None:
        route = respx.post(ANKI_URL).mock(return_value=_ok([1, 2, 3]))

        with AnkiClient(ANKI_URL) as client:
            notes = client.find_notes('deck:"Test"')

        assert notes == [1, 2, 3]
        assert _sent(route) == {
            "action": "findNotes",
            "version": 6,
            "params": {"query": 'deck:"Test"'},
        }

    @respx.mock
    def test_error_field_raises(self) -> None:
        respx.post(ANKI_URL).mock(
            return_value=httpx.Response(200, json={"result": None, "error": "Test error"})
        )

        with AnkiClient(ANKI_URL) as client, pytest.raises(AnkiConnectError, match="Test error"):
            client.invoke("testAction")

    @respx.mock
    def test_http_status_error_is_not_retried(self) -> None:
        route = respx.post(ANKI_URL).mock(return_value=httpx.Response(500))

        with AnkiClient(ANKI_URL) as client, pytest.raises(AnkiConnectError, match="HTTP 500"):
            client.version()

        assert route.call_count == 1

    @respx.mock
    def test_connection_errors_are_retried(self) -> None:
        route = respx.post(ANKI_URL).mock(
            side_effect=[httpx.ConnectError("refused"), _ok(6)]
        )

        with AnkiClient(ANKI_URL, max_attempts=2) as client:
            assert client.version() == 6

        assert route.call_count == 2

    @respx.mock
    def test_connection_error_after_retries(self) -> None:
        route = respx.post(ANKI_URL).mock(side_effect=httpx.ConnectError("refused"))

        with AnkiClient(ANKI_URL, max_attempts=3) as client, pytest.raises(
            AnkiConnectError, match="Connection error"
        ):
            client.get_deck_names()

        assert route.call_count == 3

    @respx.mock
    def test_invalid_json(self) -> None:
        respx.post(ANKI_URL).mock(return_value=httpx.Response(200, content=b"not json"))

        with AnkiClient(ANKI_URL) as client, pytest.raises(AnkiConnectError, match="Invalid JSON"):
            client.get_model_names()

    @respx.mock
    def test_check_connection(self) -> None:
        respx.post(ANKI_URL).mock(side_effect=httpx.ConnectError("refused"))

        with AnkiClient(ANKI_URL) as client:
            assert client.check_connection() is False

    @respx.mock
    def test_create_deck(self) -> None:
        route = respx.post(ANKI_URL).mock(return_value=_ok(1234))

        with AnkiClient(ANKI_URL) as client:
            assert client.create_deck("Notes::definition") == 1234

        assert _sent(route)["params"] == {"deck": "Notes::definition"}

    @respx.mock
    def test_add_note_payload(self) -> None:
        route = respx.post(ANKI_URL).mock(return_value=_ok(42))

        with AnkiClient(ANKI_URL) as client:
            note_id = client.add_note("Deck", "Basic", {"Front": "Q", "Back": "A"}, ["t1"])

        assert note_id == 42
        assert _sent(route)["params"]["note"] == {
            "deckName": "Deck",
            "modelName": "Basic",
            "fields": {"Front": "Q", "Back": "A"},
            "options": {"allowDuplicate": False},
            "tags": ["t1"],
        }

    @respx.mock
    def test_add_notes_returns_per_note_results(self) -> None:
        respx.post(ANKI_URL).mock(return_value=_ok([1, None, 3]))

        with AnkiClient(ANKI_URL) as client:
            assert client.add_notes([{}, {}, {}]) == [1, None, 3]

    def test_add_notes_empty_makes_no_request(self) -> None:
        with respx.mock(assert_all_called=False) as mock:
            route = mock.post(ANKI_URL).mock(return_value=_ok([]))
            with AnkiClient(ANKI_URL) as client:
                assert client.add_notes([]) == []
                assert client.notes_info([]) == []

        assert route.call_count == 0

    @respx.mock
    def test_update_note_fields(self) -> None:
        route = respx.post(ANKI_URL).mock(return_value=_ok(None))

        with AnkiClient(ANKI_URL) as client:
            client.update_note_fields(7, {"Back": "new"})

        assert _sent(route) == {
            "action": "updateNoteFields",
            "version": 6,
            "params": {"note": {"id": 7, "fields": {"Back": "new"}}},
        }

    @respx.mock
    def test_get_model_field_names(self) -> None:
        route = respx.post(ANKI_URL).mock(return_value=_ok(["Front", "Back"]))

        with AnkiClient(ANKI_URL) as client:
            assert client.get_model_field_names("Basic") == ["Front", "Back"]

        assert _sent(route)["params"] == {"modelName": "Basic"}
