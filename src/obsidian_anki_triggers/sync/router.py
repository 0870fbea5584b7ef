"""Group cards into buckets, one per trigger word (and Anki deck)."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from obsidian_anki_triggers.models import Card
from obsidian_anki_triggers.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RoutingResult:
    buckets: dict[str, list[Card]] = field(default_factory=dict)
    unattributed: list[Card] = field(default_factory=list)

    @property
    def routed_count(self) -> int:
        return sum(len(cards) for cards in self.buckets.values())


def attribute_trigger(card: Card, triggers: Sequence[str]) -> str | None:
    """Trigger word for ``card``.

    Trigger-line cards keep the word they matched. Other cards take the first
    configured word found, case-insensitively, in their prompt or answer.
    """
    if card.trigger_word:
        return card.trigger_word

    haystack = f"{card.prompt} {card.answer}".lower()
    for word in triggers:
        if word.lower() in haystack:
            return word
    return None


def route(
    cards: Sequence[Card],
    triggers: Sequence[str],
    fallback_bucket: str | None = None,
) -> RoutingResult:
    """Partition cards into ordered buckets.

    Cards with no trigger go to ``fallback_bucket`` when one is given and are
    reported as unattributed otherwise.
    """
    result = RoutingResult()
    for card in cards:
        bucket = attribute_trigger(card, triggers) or fallback_bucket
        if bucket is None:
            result.unattributed.append(card)
            continue
        result.buckets.setdefault(bucket, []).append(card)

    if result.unattributed:
        logger.warning(
            "cards_unattributed",
            count=len(result.unattributed),
            hint="set fallback_deck to sync them",
        )

    logger.debug(
        "cards_routed",
        buckets=list(result.buckets),
        routed=result.routed_count,
        unattributed=len(result.unattributed),
    )
    return result
