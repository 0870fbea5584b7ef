"""AI agents that post-process generated cards."""

from .card_enhancer import LLMCardEnhancer

__all__ = ["LLMCardEnhancer"]
