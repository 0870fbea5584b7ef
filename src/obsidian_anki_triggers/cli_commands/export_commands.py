"""File export command for manual Anki import."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ..anki.exporter import write_export
from ..exceptions import AnkiTriggerSyncError
from .shared import build_enhancer, collect_cards, console, get_config_and_logger

FILE_FORMATS = ("txt", "csv")


def register(app: typer.Typer) -> None:
    """Register export commands on the given Typer app."""

    @app.command()
    def export(
        files: Annotated[
            list[Path] | None,
            typer.Argument(
                help="Notes to export (default: configured folders)", exists=True, dir_okay=False
            ),
        ] = None,
        file_format: Annotated[
            str | None,
            typer.Option(
                "--format", "-f", help="Output format: txt or csv (default: export_format)"
            ),
        ] = None,
        output: Annotated[
            Path | None,
            typer.Option("--output", "-o", help="Output file (default: anki-cards.<format>)"),
        ] = None,
        mode: Annotated[
            str | None,
            typer.Option("--mode", help="Extraction mode: triggers or all"),
        ] = None,
        config_path: Annotated[
            Path | None,
            typer.Option("--config", help="Path to config.yaml", exists=True),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option("--log-level", help="Log level (DEBUG, INFO, WARN, ERROR)"),
        ] = None,
    ) -> None:
        """Export cards to a tab-separated or CSV file."""
        config, logger = get_config_and_logger(
            config_path, log_level, overrides={"extraction_mode": mode}
        )

        if file_format is None:
            file_format = (
                config.export_format if config.export_format in FILE_FORMATS else "txt"
            )
        file_format = file_format.lower()
        if file_format not in FILE_FORMATS:
            console.print(f"[red]Unsupported format: {file_format} (use txt or csv)[/red]")
            raise typer.Exit(code=2)
        output = output or Path(f"anki-cards.{file_format}")

        try:
            cards = collect_cards(config, files, build_enhancer(config))
        except AnkiTriggerSyncError as e:
            logger.error("cli_command_failed", command="export", error=e.message)
            console.print(f"[bold red]ERROR:[/bold red] {e}")
            raise typer.Exit(code=1) from e

        if not cards:
            console.print("[yellow]No cards found; nothing exported.[/yellow]")
            return

        write_export(cards, output, file_format)
        console.print(f"[green]Exported {len(cards)} cards to {output}[/green]")
