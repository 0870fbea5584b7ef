"""Obsidian note reading, cue extraction and card building."""

from .card_builder import build_cards
from .context import format_preamble, resolve_context
from .documents import TextDocument, VaultFileDocument, VaultSource
from .extractor import extract

__all__ = [
    "TextDocument",
    "VaultFileDocument",
    "VaultSource",
    "build_cards",
    "extract",
    "format_preamble",
    "resolve_context",
]
