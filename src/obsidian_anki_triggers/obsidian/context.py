"""Context resolution: document label and the heading above a match."""

import re

from ..models import Context
from .extractor import split_lines

HEADING_PATTERN = re.compile(r"^#{1,6}\s+(.+)$")
HEADING_MARKER = "-> "


def locate_anchor_line(lines: list[str], raw_match_text: str) -> int | None:
    """Index of the first line containing ``raw_match_text`` verbatim.

    Repeated identical lines always resolve to the first occurrence.
    """
    for index, line in enumerate(lines):
        if raw_match_text in line:
            return index
    return None


def find_heading(lines: list[str], anchor_index: int) -> str | None:
    """Nearest heading strictly above ``anchor_index``, trimmed."""
    for index in range(anchor_index - 1, -1, -1):
        match = HEADING_PATTERN.match(lines[index].strip())
        if match:
            return match.group(1).strip()
    return None


def resolve_context(text: str, raw_match_text: str, source_label: str) -> Context:
    lines = split_lines(text)
    anchor = locate_anchor_line(lines, raw_match_text)
    heading = find_heading(lines, anchor) if anchor is not None else None
    return Context(source_label=source_label, heading=heading)


def format_preamble(context: Context) -> str:
    """Render ``label`` or ``label\\n-> heading``."""
    if context.heading:
        return f"{context.source_label}\n{HEADING_MARKER}{context.heading}"
    return context.source_label
