"""Document adapters for in-memory text and vault files."""

from pathlib import Path

from obsidian_anki_triggers.domain.interfaces.document import IDocument, IDocumentSource
from obsidian_anki_triggers.utils.logging import get_logger

logger = get_logger(__name__)

MARKDOWN_SUFFIX = ".md"


class TextDocument(IDocument):
    """Document backed by a string, e.g. the contents of an open editor."""

    def __init__(self, text: str, display_name: str):
        self._text = text
        self._display_name = display_name

    def get_text(self) -> str:
        return self._text

    def get_display_name(self) -> str:
        return self._display_name

    def __repr__(self) -> str:
        return f"TextDocument({self._display_name!r}, chars={len(self._text)})"


class VaultFileDocument(IDocument):
    """Document read lazily from a Markdown file.

    The text is loaded once on first access; the display name is the file
    name with its extension (``notes.md``).
    """

    def __init__(self, path: Path):
        self.path = path
        self._text: str | None = None

    def get_text(self) -> str:
        if self._text is None:
            self._text = self.path.read_text(encoding="utf-8")
        return self._text

    def get_display_name(self) -> str:
        return self.path.name

    def __repr__(self) -> str:
        return f"VaultFileDocument({str(self.path)!r})"


def matches_folder(path: str, folder_prefix: str) -> bool:
    """Folder-prefix rule for vault-relative paths.

    A path matches when it equals the prefix or starts with ``prefix + "/"``.
    The empty prefix matches top-level paths only.
    """
    if not folder_prefix:
        return "/" not in path
    return path == folder_prefix or path.startswith(folder_prefix + "/")


class VaultSource(IDocumentSource):
    """Markdown files of an Obsidian vault addressed by vault-relative path."""

    def __init__(self, vault_path: Path):
        self.vault_path = vault_path

    def read_all(self, path: str) -> str:
        return (self.vault_path / path).read_text(encoding="utf-8")

    def list_under(self, folder_prefix: str) -> list[str]:
        folder_prefix = folder_prefix.strip("/")
        search_root = self.vault_path / folder_prefix if folder_prefix else self.vault_path

        if search_root.is_file():
            # a prefix naming a note matches that note itself
            return [folder_prefix] if search_root.suffix == MARKDOWN_SUFFIX else []

        if not search_root.exists():
            logger.warning(
                "source_dir_not_found",
                path=str(search_root),
                relative_path=folder_prefix,
            )
            return []

        pattern = f"*{MARKDOWN_SUFFIX}" if not folder_prefix else f"**/*{MARKDOWN_SUFFIX}"
        paths = sorted(
            md_file.relative_to(self.vault_path).as_posix()
            for md_file in search_root.glob(pattern)
            if md_file.is_file()
        )
        paths = [path for path in paths if matches_folder(path, folder_prefix)]

        logger.info(
            "discovered_notes_in_dir",
            count=len(paths),
            path=str(search_root),
            relative_path=folder_prefix,
        )
        return paths
