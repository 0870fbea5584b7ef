"""Extract trigger-line flashcards from Obsidian notes and sync them to Anki."""

__version__ = "0.1.0"
