"""Command-line interface for trigger card sync."""

from __future__ import annotations

import typer

from .cli_commands import core_commands, export_commands

app = typer.Typer(
    name="obsidian-anki-triggers",
    help="Turn trigger lines in Obsidian notes into Anki cards.",
    no_args_is_help=True,
)

core_commands.register(app)
export_commands.register(app)


def cli() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
