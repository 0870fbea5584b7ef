"""Core CLI commands: preview, sync, check."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from ..anki.client import AnkiClient
from ..exceptions import AnkiTriggerSyncError, AnkiUnavailableError
from ..sync.engine import SyncEngine
from ..sync.router import route
from .shared import (
    build_enhancer,
    cards_table,
    collect_cards,
    console,
    get_config_and_logger,
    print_report,
)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="Path to config.yaml", exists=True),
]
LogLevelOption = Annotated[
    str | None,
    typer.Option("--log-level", help="Log level (DEBUG, INFO, WARN, ERROR)"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show all log messages on terminal"),
]


def register(app: typer.Typer) -> None:
    """Register core commands on the given Typer app."""

    @app.command()
    def preview(
        file: Annotated[
            Path,
            typer.Argument(help="Markdown note to extract cards from", exists=True, dir_okay=False),
        ],
        mode: Annotated[
            str | None,
            typer.Option("--mode", help="Extraction mode: triggers or all"),
        ] = None,
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Show the cards a note would produce, without touching Anki."""
        config, logger = get_config_and_logger(
            config_path, log_level, verbose, overrides={"extraction_mode": mode}
        )
        cards = collect_cards(config, [file])
        logger.debug("cli_preview", file=str(file), cards=len(cards))

        if not cards:
            console.print("[yellow]No cards found.[/yellow]")
            return
        console.print(cards_table(cards, title=f"Cards from {file.name}"))

    @app.command()
    def sync(
        files: Annotated[
            list[Path] | None,
            typer.Argument(
                help="Notes to sync (default: configured folders)", exists=True, dir_okay=False
            ),
        ] = None,
        policy: Annotated[
            str | None,
            typer.Option("--policy", help="Existing notes: skip, update or create"),
        ] = None,
        mode: Annotated[
            str | None,
            typer.Option("--mode", help="Extraction mode: triggers or all"),
        ] = None,
        enhance: Annotated[
            bool | None,
            typer.Option("--enhance/--no-enhance", help="Enhance cards with an LLM"),
        ] = None,
        dry_run: Annotated[
            bool,
            typer.Option("--dry-run", help="Show decks and cards without syncing"),
        ] = False,
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Synchronize trigger cards from Obsidian notes to Anki."""
        start_time = time.time()
        config, logger = get_config_and_logger(
            config_path,
            log_level,
            verbose,
            overrides={
                "existing_note_behavior": policy,
                "extraction_mode": mode,
                "enhance_cards": enhance,
            },
        )
        logger.info(
            "cli_command_started",
            command="sync",
            files=len(files or []),
            dry_run=dry_run,
            policy=config.existing_note_behavior,
        )

        try:
            cards = collect_cards(config, files, build_enhancer(config))

            if dry_run:
                routing = route(cards, config.triggers, config.fallback_deck)
                for bucket, bucket_cards in routing.buckets.items():
                    console.print(
                        cards_table(bucket_cards, title=f"Deck: {config.deck_name_for(bucket)}")
                    )
                if routing.unattributed:
                    console.print(
                        f"[yellow]{len(routing.unattributed)} cards have no trigger word "
                        "and would not be synced.[/yellow]"
                    )
                return

            with AnkiClient(config.anki_connect_url, timeout=config.anki_timeout) as anki:
                report = SyncEngine(config, anki).sync(cards)
        except AnkiUnavailableError as e:
            console.print(f"[bold red]ERROR:[/bold red] {e.message}")
            if e.suggestion:
                console.print(f"[dim]TIP: {e.suggestion}[/dim]")
            raise typer.Exit(code=1) from e
        except AnkiTriggerSyncError as e:
            logger.error(
                "cli_command_failed",
                command="sync",
                duration=round(time.time() - start_time, 2),
                error=e.message,
                error_type=type(e).__name__,
            )
            console.print(f"[bold red]ERROR:[/bold red] {e}")
            raise typer.Exit(code=1) from e

        print_report(report)
        logger.info(
            "cli_command_completed",
            command="sync",
            duration=round(time.time() - start_time, 2),
            success=not report.has_failures,
        )
        if report.has_failures:
            raise typer.Exit(code=1)

    @app.command()
    def check(
        config_path: ConfigOption = None,
        log_level: LogLevelOption = None,
        verbose: VerboseOption = False,
    ) -> None:
        """Show AnkiConnect status, decks and note types."""
        config, _logger = get_config_and_logger(config_path, log_level, verbose)

        with AnkiClient(
            config.anki_connect_url, timeout=config.anki_timeout, max_attempts=1
        ) as anki:
            info = SyncEngine(config, anki).anki_info()

        if not info["connected"]:
            console.print(f"[red]FAIL[/red] AnkiConnect at {info['url']}: {info.get('error', '')}")
            console.print("[dim]TIP: Start Anki and install the AnkiConnect add-on[/dim]")
            raise typer.Exit(code=1)

        table = Table(title="AnkiConnect Status", show_header=True, header_style="bold magenta")
        table.add_column("Item", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("URL", info["url"])
        table.add_row("API version", str(info["version"]))
        table.add_row("Decks", ", ".join(info["decks"]) or "-")
        table.add_row("Note types", ", ".join(info["models"]) or "-")
        console.print(table)

        for model_name, missing in info["missing_fields"].items():
            console.print(
                f"[yellow]WARN[/yellow] Note type {model_name!r} lacks fields: "
                f"{', '.join(missing)}"
            )
