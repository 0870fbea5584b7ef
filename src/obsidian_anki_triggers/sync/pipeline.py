"""Card generation: extractor -> context resolver -> builder -> enhancer."""

from pathlib import PurePosixPath

from obsidian_anki_triggers.config import Config
from obsidian_anki_triggers.domain.interfaces.card_enhancer import ICardEnhancer
from obsidian_anki_triggers.domain.interfaces.document import IDocument, IDocumentSource
from obsidian_anki_triggers.models import Card
from obsidian_anki_triggers.obsidian.card_builder import build_cards
from obsidian_anki_triggers.obsidian.documents import TextDocument
from obsidian_anki_triggers.obsidian.extractor import extract
from obsidian_anki_triggers.utils.logging import get_logger

logger = get_logger(__name__)


def generate_cards(
    document: IDocument, config: Config, enhancer: ICardEnhancer | None = None
) -> list[Card]:
    """Cards for one document.

    In ``triggers`` mode only trigger lines are extracted; ``all`` adds
    highlights and cue lines. The enhancer, when given, runs once for the
    whole document and falls back to the unenhanced cards on failure.
    """
    text = document.get_text()
    include_all = config.extraction_mode == "all"
    matches = extract(
        text,
        config.triggers,
        include_highlights=include_all,
        include_cues=include_all,
    )
    cards = build_cards(document, matches)

    logger.debug(
        "cards_generated",
        file=document.get_display_name(),
        matches=len(matches),
        cards=len(cards),
    )

    if enhancer is not None and cards:
        cards = enhancer.enhance(cards, text)
    return cards


def generate_cards_for_folders(
    source: IDocumentSource, config: Config, enhancer: ICardEnhancer | None = None
) -> list[Card]:
    """Cards for every Markdown file under the configured folders.

    Files listed under overlapping folders are processed once. Unreadable
    files are logged and skipped.
    """
    folders = config.folder_paths or [""]
    seen: set[str] = set()
    cards: list[Card] = []
    files_processed = 0

    for folder in folders:
        for path in source.list_under(folder):
            if path in seen:
                continue
            seen.add(path)

            try:
                text = source.read_all(path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("note_read_failed", file=path, error=str(e))
                continue

            document = TextDocument(text, PurePosixPath(path).name)
            cards.extend(generate_cards(document, config, enhancer))
            files_processed += 1

    logger.info(
        "folders_processed",
        folders=len(folders),
        files=files_processed,
        cards=len(cards),
    )
    return cards
