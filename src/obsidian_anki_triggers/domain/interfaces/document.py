"""Interfaces for reading documents from the note store."""

from abc import ABC, abstractmethod


class IDocument(ABC):
    """Narrow read-only view of one note.

    The pipeline only ever depends on this interface, whether the text comes
    from an editor buffer or from a file loaded in batch.
    """

    @abstractmethod
    def get_text(self) -> str:
        """Full document text."""

    @abstractmethod
    def get_display_name(self) -> str:
        """Plain display name used as the card's source label (e.g. 'notes.md')."""


class IDocumentSource(ABC):
    """Read access to a collection of documents addressed by relative path."""

    @abstractmethod
    def read_all(self, path: str) -> str:
        """Read a document's content as text."""

    @abstractmethod
    def list_under(self, folder_prefix: str) -> list[str]:
        """List document paths under a folder prefix.

        A path matches when it equals the prefix or starts with
        ``prefix + "/"``. The empty prefix matches top-level paths only.
        """
