"""Routing, reconciliation and reporting for Anki synchronization."""

from .engine import SyncEngine
from .pipeline import generate_cards, generate_cards_for_folders
from .reconciler import DeckReconciler, MatchState
from .report import SyncReport
from .router import RoutingResult, route
from .similarity import (
    ContainmentSimilarity,
    NormalizedEqualitySimilarity,
    SimilarityStrategy,
)

__all__ = [
    "ContainmentSimilarity",
    "DeckReconciler",
    "MatchState",
    "NormalizedEqualitySimilarity",
    "RoutingResult",
    "SimilarityStrategy",
    "SyncEngine",
    "SyncReport",
    "generate_cards",
    "generate_cards_for_folders",
    "route",
]
