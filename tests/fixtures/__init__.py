"""Test fixtures package."""

from .mock_anki_client import MockAnkiClient
from .mock_llm_provider import MockLLMProvider

__all__ = [
    "MockAnkiClient",
    "MockLLMProvider",
]
