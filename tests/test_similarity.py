"""Tests for similarity strategies."""

import pytest

from obsidian_anki_triggers.sync.similarity import (
    ContainmentSimilarity,
    NormalizedEqualitySimilarity,
    normalize_text,
)


def test_normalize_text() -> None:
    assert normalize_text("  Hello,   World!\n") == "hello world"
    assert normalize_text("a<br>b") == "a br b"


@pytest.mark.parametrize(
    ("new", "existing", "expected"),
    [
        ("A car is a vehicle.", "a car is a vehicle", True),
        ("short", "short text", False),
        (
            "A car is a road vehicle with four wheels",
            "A car is a road vehicle with four wheels and an engine",
            True,
        ),
        ("A bike has two wheels and pedals", "A boat floats on the water surface", False),
    ],
)
def test_containment(new: str, existing: str, expected: bool) -> None:
    assert ContainmentSimilarity().is_similar(new, existing) is expected


def test_normalized_equality_is_stricter() -> None:
    long_text = "A car is a road vehicle with four wheels"
    longer_text = long_text + " and an engine"

    assert NormalizedEqualitySimilarity().is_similar(long_text, long_text.upper())
    assert not NormalizedEqualitySimilarity().is_similar(long_text, longer_text)
