"""LLM providers used for optional card enhancement."""

from .base import BaseLLMProvider
from .factory import ProviderFactory
from .ollama import OllamaProvider
from .openrouter import OpenRouterProvider

__all__ = [
    "BaseLLMProvider",
    "OllamaProvider",
    "OpenRouterProvider",
    "ProviderFactory",
]
