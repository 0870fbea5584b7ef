"""Shared utilities for CLI commands."""

from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from obsidian_anki_triggers.agents.card_enhancer import LLMCardEnhancer
from obsidian_anki_triggers.config import Config, load_config
from obsidian_anki_triggers.domain.interfaces.card_enhancer import ICardEnhancer
from obsidian_anki_triggers.exceptions import ConfigurationError
from obsidian_anki_triggers.models import Card
from obsidian_anki_triggers.obsidian.documents import VaultFileDocument, VaultSource
from obsidian_anki_triggers.providers.factory import ProviderFactory
from obsidian_anki_triggers.sync.pipeline import generate_cards, generate_cards_for_folders
from obsidian_anki_triggers.sync.report import SyncReport
from obsidian_anki_triggers.utils.logging import configure_logging, get_logger

# Shared console for all commands
console = Console()

PREVIEW_TEXT_LENGTH = 60


def get_config_and_logger(
    config_path: Path | None = None,
    log_level: str | None = None,
    verbose: bool = False,
    overrides: dict[str, Any] | None = None,
) -> tuple[Config, Any]:
    """Load configuration and configure logging.

    Args:
        config_path: Optional path to config file
        log_level: Console log level (defaults to the configured one)
        verbose: Show all log messages on terminal
        overrides: Config values given on the command line (None values ignored)

    Returns:
        Tuple of (Config, Logger)

    Raises:
        typer.Exit: If the configuration cannot be loaded
    """
    try:
        config = load_config(config_path, overrides=overrides)
    except ConfigurationError as e:
        console.print(f"[bold red]ERROR:[/bold red] {e.message}")
        if e.suggestion:
            console.print(f"[dim]TIP: {e.suggestion}[/dim]")
        raise typer.Exit(code=1) from e

    configure_logging(
        log_level or config.log_level,
        log_dir=config.log_dir,
        verbose=verbose,
    )
    return config, get_logger("cli")


def build_enhancer(config: Config) -> ICardEnhancer | None:
    """LLM enhancer when enhancement is enabled, else None."""
    if not config.enhance_cards:
        return None
    provider = ProviderFactory.create_from_config(config)
    return LLMCardEnhancer(
        provider,
        model=config.llm_model,
        temperature=config.llm_temperature,
        context_chars=config.enhancement_context_chars,
    )


def collect_cards(
    config: Config, files: list[Path] | None, enhancer: ICardEnhancer | None = None
) -> list[Card]:
    """Cards from explicit files, or from the configured vault folders."""
    if files:
        cards: list[Card] = []
        for path in files:
            document = VaultFileDocument(path)
            try:
                document.get_text()
            except (OSError, UnicodeDecodeError) as e:
                get_logger("cli").warning("note_read_failed", file=str(path), error=str(e))
                console.print(f"[yellow]Skipped unreadable file {path}[/yellow]")
                continue
            cards.extend(generate_cards(document, config, enhancer))
        return cards
    return generate_cards_for_folders(VaultSource(config.vault_path), config, enhancer)


def _shorten(text: str, limit: int = PREVIEW_TEXT_LENGTH) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."


def cards_table(cards: list[Card], title: str = "Cards") -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Kind", style="cyan")
    table.add_column("Source")
    table.add_column("Heading")
    table.add_column("Prompt")
    table.add_column("Answer", style="green")

    for index, card in enumerate(cards, start=1):
        source = card.context.source_label if card.context else ""
        table.add_row(
            str(index),
            card.kind.value,
            source,
            card.heading or "",
            _shorten(card.prompt.split("\n")[-1]),
            _shorten(card.answer),
        )
    return table


def print_report(report: SyncReport) -> None:
    table = Table(title="Sync Summary", show_header=True, header_style="bold magenta")
    table.add_column("Result", style="cyan")
    table.add_column("Count", style="green", justify="right")

    table.add_row("Created", str(report.created))
    table.add_row("Updated", str(report.updated))
    table.add_row("Skipped", str(report.skipped))
    table.add_row("Failed", str(report.failed))
    table.add_row("Unattributed", str(report.unattributed))
    console.print(table)

    if report.decks_created:
        console.print(
            f"[green]Decks created:[/green] {', '.join(sorted(report.decks_created))}"
        )
    for error in report.errors:
        console.print(f"[red]- {error}[/red]")
