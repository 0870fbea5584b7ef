"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from obsidian_anki_triggers.config import Config, load_config
from obsidian_anki_triggers.exceptions import ConfigurationError


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(body, encoding="utf-8")
    return path


def test_defaults() -> None:
    config = Config()

    assert config.triggers == ["prototypical example", "key point"]
    assert config.existing_note_behavior == "skip"
    assert config.allow_deck_creation is True
    assert config.fallback_deck is None


def test_triggers_are_normalized() -> None:
    config = Config(triggers=[" Key Point ", "key point", "", "definition"])

    assert config.triggers == ["Key Point", "definition"]


def test_newline_separated_triggers() -> None:
    assert Config(triggers="one\ntwo\n").triggers == ["one", "two"]


def test_folder_paths_are_normalized() -> None:
    config = Config(folder_paths=["/notes/", "notes", "a\\b", ""])

    assert config.folder_paths == ["notes", "a/b", ""]


def test_environment_override(monkeypatch) -> None:
    monkeypatch.setenv("ANKI_TRIGGERS_EXISTING_NOTE_BEHAVIOR", "update")

    assert Config().existing_note_behavior == "update"


def test_config_is_frozen() -> None:
    config = Config()

    with pytest.raises(ValidationError):
        config.deck_prefix = "x"  # type: ignore[misc]


def test_deck_name_for() -> None:
    assert Config(deck_prefix="Notes::").deck_name_for("definition") == "Notes::definition"


def test_effective_vault_name(tmp_path: Path) -> None:
    vault = tmp_path / "My Vault"
    vault.mkdir()

    assert Config(vault_path=vault).effective_vault_name == "My Vault"
    assert Config(vault_path=vault, vault_name="Other").effective_vault_name == "Other"


def test_load_yaml(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        f"vault_path: {tmp_path}\ntriggers:\n  - definition\nexisting_note_behavior: update\n",
    )

    config = load_config(path)

    assert config.vault_path == tmp_path
    assert config.triggers == ["definition"]
    assert config.existing_note_behavior == "update"


def test_cwd_config_is_found(tmp_path: Path) -> None:
    _write_config(tmp_path, "deck_prefix: 'Cwd::'\n")

    assert load_config().deck_prefix == "Cwd::"


def test_overrides_win_over_yaml(tmp_path: Path) -> None:
    path = _write_config(tmp_path, "extraction_mode: triggers\n")

    config = load_config(path, overrides={"extraction_mode": "all", "deck_prefix": None})

    assert config.extraction_mode == "all"
    assert config.deck_prefix == ""


def test_invalid_yaml(tmp_path: Path) -> None:
    path = _write_config(tmp_path, "triggers: [unclosed\n")

    with pytest.raises(ConfigurationError, match="Failed to parse"):
        load_config(path)


def test_invalid_policy(tmp_path: Path) -> None:
    path = _write_config(tmp_path, "existing_note_behavior: merge\n")

    with pytest.raises(ConfigurationError, match="Invalid configuration"):
        load_config(path)


def test_missing_explicit_path(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        load_config(tmp_path / "missing.yaml")


def test_strict_validation(tmp_path: Path) -> None:
    path = _write_config(tmp_path, f"vault_path: {tmp_path / 'nowhere'}\n")

    assert load_config(path).vault_path == tmp_path / "nowhere"
    with pytest.raises(ConfigurationError, match="Vault path does not exist"):
        load_config(path, strict_config=True)


def test_openrouter_enhancement_needs_key(tmp_path: Path) -> None:
    config = Config(vault_path=tmp_path, enhance_cards=True, llm_provider="openrouter")

    with pytest.raises(ConfigurationError, match="API key"):
        config.validate_config()
