"""Domain layer: interfaces the pipeline depends on."""

from .interfaces import IAnkiClient, ICardEnhancer, IDocument, IDocumentSource

__all__ = [
    "IAnkiClient",
    "ICardEnhancer",
    "IDocument",
    "IDocumentSource",
]
