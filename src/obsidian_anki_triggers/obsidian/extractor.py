"""Cue extraction: highlights, ``prompt::answer`` lines and trigger lines.

All functions here are pure. The three modes run independently over the same
text and their results are concatenated without de-duplication, so a line
that is both a cue line and a trigger line yields one match from each mode.
"""

import re
from collections.abc import Iterable, Sequence

from ..models import MatchKind, RawMatch

HIGHLIGHT_PATTERN = re.compile(r"==(.*?)==")
CUE_SEPARATOR = "::"
HIGHLIGHT_DELIMITER = "=="

TriggerPattern = tuple[str, re.Pattern[str]]


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` only, dropping a trailing ``\\r`` from each line."""
    return [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]


def compile_trigger(trigger_word: str) -> re.Pattern[str]:
    """Build the line-start pattern for one trigger word.

    Up to three asterisks of emphasis may open and close the word, e.g.
    ``**Definition**: ...`` or ``*key point:* ...``.
    """
    return re.compile(
        r"^\s*\*{0,3}\s*(?P<trigger>"
        + re.escape(trigger_word)
        + r")\s*\*{0,3}\s*[:.]\*{0,3}\s*(?P<answer>.+)",
        re.IGNORECASE,
    )


def compile_triggers(triggers: Iterable[str]) -> list[TriggerPattern]:
    return [(word, compile_trigger(word)) for word in triggers if word.strip()]


def first_matching_trigger(
    line: str, patterns: Sequence[TriggerPattern]
) -> tuple[str, re.Match[str]] | None:
    """Return the first configured trigger (in configuration order) matching ``line``."""
    for word, pattern in patterns:
        match = pattern.match(line)
        if match:
            return word, match
    return None


def parse_trigger_line(
    line: str, patterns: Sequence[TriggerPattern]
) -> tuple[str, str] | None:
    """Return ``(trigger_word, answer)`` for a trigger line, else None."""
    found = first_matching_trigger(line, patterns)
    if found is None:
        return None
    word, match = found
    return word, match.group("answer").strip()


def strip_highlight(span: str) -> str:
    """``==text==`` -> ``text``."""
    if span.startswith(HIGHLIGHT_DELIMITER) and span.endswith(HIGHLIGHT_DELIMITER):
        return span[len(HIGHLIGHT_DELIMITER) : -len(HIGHLIGHT_DELIMITER)]
    return span


def split_cue_line(line: str) -> tuple[str, str] | None:
    """Split a cue line into ``(prompt, answer)``, or None if it is not one."""
    if HIGHLIGHT_DELIMITER in line or line.count(CUE_SEPARATOR) != 1:
        return None
    prompt, answer = line.split(CUE_SEPARATOR, 1)
    # ":::" counts once above but still holds a second separator
    if prompt.endswith(":") or answer.startswith(":"):
        return None
    if not prompt.strip() or not answer.strip():
        return None
    return prompt.strip(), answer.strip()


def extract_highlights(text: str) -> list[RawMatch]:
    """Every non-overlapping ``==...==`` span, delimiters kept."""
    return [
        RawMatch(source_text=match.group(0), kind=MatchKind.HIGHLIGHT)
        for match in HIGHLIGHT_PATTERN.finditer(text)
    ]


def extract_cue_lines(text: str) -> list[RawMatch]:
    """Every ``prompt::answer`` line."""
    return [
        RawMatch(source_text=line, kind=MatchKind.CUE_LINE)
        for line in split_lines(text)
        if split_cue_line(line) is not None
    ]


def extract_trigger_lines(
    text: str, triggers: Iterable[str] | Sequence[TriggerPattern]
) -> list[RawMatch]:
    """Every line starting with a configured trigger word; one match per line."""
    patterns = _as_patterns(triggers)
    if not patterns:
        return []

    matches: list[RawMatch] = []
    for line in split_lines(text):
        found = first_matching_trigger(line, patterns)
        if found is not None:
            matches.append(
                RawMatch(
                    source_text=line, kind=MatchKind.TRIGGER_LINE, trigger_word=found[0]
                )
            )
    return matches


def extract(
    text: str,
    triggers: Iterable[str],
    *,
    include_highlights: bool = True,
    include_cues: bool = True,
) -> list[RawMatch]:
    """Run every enabled extraction mode and concatenate the results.

    Order: highlights, cue lines, trigger lines.
    """
    if not text:
        return []

    matches: list[RawMatch] = []
    if include_highlights:
        matches.extend(extract_highlights(text))
    if include_cues:
        matches.extend(extract_cue_lines(text))
    matches.extend(extract_trigger_lines(text, triggers))
    return matches


def _as_patterns(
    triggers: Iterable[str] | Sequence[TriggerPattern],
) -> list[TriggerPattern]:
    items = list(triggers)
    if items and isinstance(items[0], tuple):
        return items  # type: ignore[return-value]
    return compile_triggers(items)  # type: ignore[arg-type]
