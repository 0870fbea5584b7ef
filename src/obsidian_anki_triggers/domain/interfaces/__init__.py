"""Domain interfaces package."""

from .anki_client import IAnkiClient
from .card_enhancer import ICardEnhancer
from .document import IDocument, IDocumentSource

__all__ = [
    "IAnkiClient",
    "ICardEnhancer",
    "IDocument",
    "IDocumentSource",
]
