"""Strategies deciding whether two field values are "the same" card."""

import re
from abc import ABC, abstractmethod

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")

CONTAINMENT_MIN_LENGTH = 20


def normalize_text(text: str) -> str:
    """Lowercase, replace punctuation with spaces and collapse whitespace."""
    text = _PUNCTUATION.sub(" ", text.lower())
    return _WHITESPACE.sub(" ", text).strip()


class SimilarityStrategy(ABC):
    """Decides whether a new field value matches an existing one."""

    @abstractmethod
    def is_similar(self, new_value: str, existing_value: str) -> bool:
        """Return True when both values describe the same card."""


class ContainmentSimilarity(SimilarityStrategy):
    """Equal after normalization, or one long value containing the other.

    Containment accepts some false positives: a long answer that quotes a
    shorter existing one is treated as identical.
    """

    def __init__(self, min_length: int = CONTAINMENT_MIN_LENGTH):
        self.min_length = min_length

    def is_similar(self, new_value: str, existing_value: str) -> bool:
        a = normalize_text(new_value)
        b = normalize_text(existing_value)
        if a == b:
            return True
        if len(a) > self.min_length and len(b) > self.min_length:
            return a in b or b in a
        return False


class NormalizedEqualitySimilarity(SimilarityStrategy):
    """Equal after normalization only."""

    def is_similar(self, new_value: str, existing_value: str) -> bool:
        return normalize_text(new_value) == normalize_text(existing_value)
