"""Plain-text exports for manual import through Anki's File > Import."""

import csv
import io
import re
from collections.abc import Sequence
from pathlib import Path

from obsidian_anki_triggers.models import Card, CardKind
from obsidian_anki_triggers.utils.logging import get_logger

from .field_mapper import format_options, line_breaks_to_html

logger = get_logger(__name__)

CLOZE_EXPORT_TAG = "obsidian-cloze"
QUIZ_EXPORT_TAG = "obsidian-quiz"
CSV_HEADER = ("Front", "Back", "Tags")


def clean_text_for_anki(text: str) -> str:
    """Tabs to spaces, newlines to ``<br>``."""
    return line_breaks_to_html(re.sub(r"\t", " ", text))


def card_to_row(card: Card) -> tuple[str, str, str]:
    """``(front, back, tag)`` for one card, already cleaned."""
    if card.kind is CardKind.CLOZE:
        front = card.cloze_body or card.prompt
        back = card.explanation or ""
        tag = CLOZE_EXPORT_TAG
    else:
        front = card.prompt
        if card.kind is CardKind.MULTIPLE_CHOICE and card.options:
            front += format_options(card.options)
        back = card.answer
        if card.explanation:
            back += f"<br><br>Explanation: {card.explanation}"
        tag = QUIZ_EXPORT_TAG
    return clean_text_for_anki(front), clean_text_for_anki(back), tag


def export_to_txt(cards: Sequence[Card]) -> str:
    """Tab-separated ``front<TAB>back<TAB>tag`` lines."""
    return "".join("\t".join(card_to_row(card)) + "\n" for card in cards)


def export_to_csv(cards: Sequence[Card]) -> str:
    """CSV with a ``Front,Back,Tags`` header and every value quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    buffer.write(",".join(CSV_HEADER) + "\n")
    for card in cards:
        writer.writerow(card_to_row(card))
    return buffer.getvalue()


def write_export(cards: Sequence[Card], output_path: Path, export_format: str) -> Path:
    """Render ``cards`` in ``export_format`` ('txt' or 'csv') and write them."""
    if export_format == "txt":
        content = export_to_txt(cards)
    elif export_format == "csv":
        content = export_to_csv(cards)
    else:
        msg = f"Unsupported export format: {export_format}"
        raise ValueError(msg)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")
    logger.info(
        "cards_exported", path=str(output_path), format=export_format, cards=len(cards)
    )
    return output_path
