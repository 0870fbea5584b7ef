"""Turn raw matches into cards."""

from collections.abc import Iterable

from obsidian_anki_triggers.domain.interfaces.document import IDocument
from obsidian_anki_triggers.models import Card, CardKind, Context, MatchKind, RawMatch
from obsidian_anki_triggers.utils.logging import get_logger

from .context import find_heading, format_preamble, locate_anchor_line
from .extractor import (
    compile_trigger,
    split_cue_line,
    split_lines,
    strip_highlight,
)

logger = get_logger(__name__)

CLOZE_TEMPLATE = "{{{{c1::{inner}}}}}"


def build_cloze_card(line: str, match: RawMatch, context: Context) -> Card | None:
    """Highlight -> cloze card with a single ``c1`` deletion."""
    inner = strip_highlight(match.source_text).strip()
    if not inner:
        return None

    clozed_line = line.replace(
        match.source_text, CLOZE_TEMPLATE.format(inner=inner), 1
    )
    cloze_body = f"{format_preamble(context)}\n{clozed_line}"
    return Card(
        kind=CardKind.CLOZE,
        prompt=cloze_body,
        answer=inner,
        cloze_body=cloze_body,
        context=context,
        origin=MatchKind.HIGHLIGHT,
    )


def build_cue_card(match: RawMatch, context: Context) -> Card | None:
    """``prompt::answer`` line -> short-answer card."""
    parts = split_cue_line(match.source_text)
    if parts is None:
        return None
    prompt, answer = parts
    return Card(
        kind=CardKind.SHORT_ANSWER,
        prompt=f"{format_preamble(context)}\n{prompt}",
        answer=answer,
        context=context,
        origin=MatchKind.CUE_LINE,
    )


def build_trigger_card(match: RawMatch, context: Context) -> Card | None:
    """Trigger line -> short-answer card asking for the trigger word's content."""
    if not match.trigger_word:
        return None
    found = compile_trigger(match.trigger_word).match(match.source_text)
    if not found:
        return None
    answer = found.group("answer").strip()
    if not answer:
        return None
    return Card(
        kind=CardKind.SHORT_ANSWER,
        prompt=f"{format_preamble(context)}\n\n{match.trigger_word}",
        answer=answer,
        context=context,
        origin=MatchKind.TRIGGER_LINE,
        trigger_word=match.trigger_word,
    )


def build_card(lines: list[str], match: RawMatch, source_label: str) -> Card | None:
    """Build one card, or None when the match cannot produce one.

    A match is dropped when its anchor line cannot be located or when its
    answer is empty after trimming.
    """
    anchor = locate_anchor_line(lines, match.source_text)
    if anchor is None:
        logger.debug(
            "match_dropped_no_anchor",
            source=source_label,
            kind=match.kind.value,
            text=match.source_text[:80],
        )
        return None

    context = Context(source_label=source_label, heading=find_heading(lines, anchor))

    if match.kind is MatchKind.HIGHLIGHT:
        card = build_cloze_card(lines[anchor], match, context)
    elif match.kind is MatchKind.CUE_LINE:
        card = build_cue_card(match, context)
    else:
        card = build_trigger_card(match, context)

    if card is None:
        logger.debug(
            "match_dropped_empty_answer",
            source=source_label,
            kind=match.kind.value,
            text=match.source_text[:80],
        )
    return card


def build_cards(document: IDocument, matches: Iterable[RawMatch]) -> list[Card]:
    """Build cards for every match of ``document``, preserving match order."""
    matches = list(matches)
    lines = split_lines(document.get_text())
    source_label = document.get_display_name()

    cards: list[Card] = []
    for match in matches:
        try:
            card = build_card(lines, match, source_label)
        except ValueError as e:
            # e.g. a highlight that already contains a cloze marker
            logger.debug(
                "match_dropped_invalid_card",
                source=source_label,
                kind=match.kind.value,
                error=str(e),
            )
            continue
        if card is not None:
            cards.append(card)

    logger.debug(
        "cards_built",
        source=source_label,
        matches=len(matches),
        cards=len(cards),
    )
    return cards
