"""Settings model for the trigger sync service (split from config.py)."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError

ExistingNoteBehavior = Literal["skip", "update", "create"]
ExtractionMode = Literal["triggers", "all"]
ExportFormat = Literal["txt", "csv", "ankiconnect"]
LLMProviderName = Literal["ollama", "openrouter"]


def _split_lines(value: Any) -> Any:
    """Accept newline-separated strings where a list is expected."""
    if isinstance(value, str):
        return value.split("\n")
    return value


class Config(BaseSettings):
    """Immutable configuration snapshot.

    A Config is passed explicitly into every pipeline entry point; nothing in
    the core reads configuration from module state, so two sessions with
    different vaults or policies can run side by side.
    """

    model_config = SettingsConfigDict(
        env_prefix="ANKI_TRIGGERS_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Vault
    vault_path: Path = Field(default=Path(), description="Path to Obsidian vault")
    vault_name: str = Field(
        default="",
        description="Vault name used in obsidian:// links (defaults to the vault folder name)",
    )
    folder_paths: list[str] = Field(
        default_factory=list,
        description="Vault-relative folders to scan; '' means top-level files only",
    )

    # Extraction
    triggers: list[str] = Field(
        default_factory=lambda: ["prototypical example", "key point"],
        description="Trigger words, matched case-insensitively at line start",
    )
    extraction_mode: ExtractionMode = Field(
        default="triggers",
        description="'triggers' for trigger lines only, 'all' to add highlights and cues",
    )
    export_format: ExportFormat = Field(
        default="ankiconnect",
        description="Default format of the export command ('ankiconnect' exports txt)",
    )

    # Anki settings
    anki_connect_url: str = Field(
        default="http://localhost:8765", description="AnkiConnect URL"
    )
    anki_timeout: float = Field(default=30.0, gt=0, description="Request timeout")
    allow_deck_creation: bool = Field(
        default=True, description="Create missing decks instead of failing them"
    )
    existing_note_behavior: ExistingNoteBehavior = Field(
        default="skip", description="What to do when a matching note already exists"
    )
    note_type: str = Field(default="Basic", description="Note type for non-cloze cards")
    front_field: str = Field(default="Front")
    back_field: str = Field(default="Back")
    cloze_note_type: str = Field(default="Cloze")
    cloze_text_field: str = Field(default="Text")
    cloze_extra_field: str = Field(default="Extra")
    deck_prefix: str = Field(
        default="", description="Prefix prepended to every deck name, e.g. 'Notes::'"
    )
    fallback_deck: str | None = Field(
        default=None,
        description="Bucket for cards without a trigger word (excluded when unset)",
    )
    max_parallel_decks: int = Field(
        default=1, ge=1, le=16, description="Decks reconciled concurrently"
    )

    # AI enhancement
    enhance_cards: bool = Field(default=False, description="Enable AI enhancement")
    llm_provider: LLMProviderName = Field(default="ollama")
    llm_model: str = Field(default="qwen3:8b")
    llm_base_url: str | None = Field(default=None)
    llm_api_key: str | None = Field(default=None)
    llm_timeout: float = Field(default=120.0, gt=0)
    llm_temperature: float = Field(default=0.2, ge=0.0, le=1.0)
    enhancement_context_chars: int = Field(default=2000, ge=0)

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_dir: Path = Field(default=Path("logs"), description="Directory for log files")

    @field_validator("vault_path", "log_dir", mode="before")
    @classmethod
    def parse_path(cls, v: Any) -> Path:
        """Convert string to Path."""
        if v is None:
            return Path()
        if isinstance(v, (str, Path)):
            return Path(v).expanduser()
        msg = f"Path field must be string or Path, got {type(v).__name__}"
        raise ValueError(msg)

    @field_validator("triggers", mode="before")
    @classmethod
    def normalize_triggers(cls, v: Any) -> list[str]:
        """Strip trigger words, drop blanks and case-insensitive duplicates."""
        v = _split_lines(v)
        if not isinstance(v, list):
            msg = f"triggers must be a list of strings, got {type(v).__name__}"
            raise ValueError(msg)

        seen: set[str] = set()
        triggers: list[str] = []
        for item in v:
            word = str(item).strip()
            if word and word.lower() not in seen:
                seen.add(word.lower())
                triggers.append(word)
        return triggers

    @field_validator("folder_paths", mode="before")
    @classmethod
    def normalize_folder_paths(cls, v: Any) -> list[str]:
        """Use forward slashes and drop leading/trailing separators."""
        v = _split_lines(v)
        if not isinstance(v, list):
            msg = f"folder_paths must be a list of strings, got {type(v).__name__}"
            raise ValueError(msg)

        folders: list[str] = []
        for item in v:
            folder = str(item).strip().replace("\\", "/").strip("/")
            if folder not in folders:
                folders.append(folder)
        return folders

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "WARN", "ERROR", "CRITICAL"}:
            msg = f"Invalid log level: {v}"
            raise ValueError(msg)
        return level

    @property
    def effective_vault_name(self) -> str:
        """Vault name used for obsidian:// links."""
        if self.vault_name:
            return self.vault_name
        return self.vault_path.resolve().name

    def deck_name_for(self, bucket: str) -> str:
        """Map a bucket (trigger word) to its Anki deck name."""
        return f"{self.deck_prefix}{bucket}"

    def validate_config(self) -> Config:
        """Validate values that depend on the file system or on each other."""
        if not self.vault_path.exists() or not self.vault_path.is_dir():
            msg = f"Vault path does not exist or is not a directory: {self.vault_path}"
            raise ConfigurationError(
                msg,
                suggestion="Set vault_path in config.yaml or ANKI_TRIGGERS_VAULT_PATH",
            )

        if not self.triggers:
            msg = "No trigger words configured"
            raise ConfigurationError(
                msg, suggestion="Add at least one entry to 'triggers' in config.yaml"
            )

        if self.enhance_cards and self.llm_provider == "openrouter" and not self.llm_api_key:
            msg = "OpenRouter enhancement requires an API key"
            raise ConfigurationError(
                msg, suggestion="Set llm_api_key or ANKI_TRIGGERS_LLM_API_KEY"
            )

        return self
