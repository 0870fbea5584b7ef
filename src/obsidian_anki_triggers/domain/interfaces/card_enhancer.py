"""Interface for AI card enhancement."""

from abc import ABC, abstractmethod

from obsidian_anki_triggers.models import Card


class ICardEnhancer(ABC):
    """Best-effort rewriting of a batch of cards.

    Implementations must never raise: on any failure they return the input
    cards unchanged.
    """

    @abstractmethod
    def enhance(self, cards: list[Card], context: str) -> list[Card]:
        """Return enhanced cards, one per input card, in the same order."""
