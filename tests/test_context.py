"""Tests for heading and preamble resolution."""

from obsidian_anki_triggers.models import Context
from obsidian_anki_triggers.obsidian.context import (
    find_heading,
    format_preamble,
    locate_anchor_line,
    resolve_context,
)

NOTE = """# Title
intro line

## Section
   ### Indented Sub
body with ==x==
#NotAHeading
####### seven hashes
tail ==y==
"""


def test_nearest_heading_above_match() -> None:
    context = resolve_context(NOTE, "==x==", "notes.md")

    assert context == Context(source_label="notes.md", heading="Indented Sub")


def test_non_headings_are_skipped() -> None:
    assert resolve_context(NOTE, "==y==", "notes.md").heading == "Indented Sub"


def test_no_heading_before_match() -> None:
    assert resolve_context("first\n==x==\n# Later", "==x==", "n.md").heading is None


def test_heading_line_itself_is_not_used() -> None:
    text = "# Top\n## Has ==x== inside"

    assert resolve_context(text, "==x==", "n.md").heading == "Top"


def test_first_occurrence_wins() -> None:
    text = "# One\nsame line\n# Two\nsame line"

    assert resolve_context(text, "same line", "n.md").heading == "One"


def test_missing_anchor() -> None:
    lines = NOTE.split("\n")

    assert locate_anchor_line(lines, "not present") is None
    assert resolve_context(NOTE, "not present", "n.md").heading is None


def test_find_heading_scans_upward() -> None:
    lines = ["# A", "x", "## B", "y", "z"]

    assert find_heading(lines, 4) == "B"
    assert find_heading(lines, 2) == "A"
    assert find_heading(lines, 0) is None


def test_format_preamble() -> None:
    assert format_preamble(Context("notes.md", "Defs")) == "notes.md\n-> Defs"
    assert format_preamble(Context("notes.md")) == "notes.md"
