"""Mock LLM provider for testing."""

import json
from typing import Any

from obsidian_anki_triggers.exceptions import ProviderConnectionError
from obsidian_anki_triggers.providers.base import BaseLLMProvider


class MockLLMProvider(BaseLLMProvider):
    """Mock implementation of LLM provider for testing.

    Returns ``default_response`` (a JSON string) for every call and records
    the calls it receives.
    """

    def __init__(self, default_response: str | dict[str, Any] | None = None):
        """Initialize mock provider."""
        super().__init__()
        if isinstance(default_response, dict):
            default_response = json.dumps(default_response)
        self.default_response = default_response or '{"cards": []}'
        self.call_history: list[tuple[str, dict[str, Any]]] = []
        self.should_fail = False
        self.fail_message = "Mock LLM provider failure"

    def generate(
        self,
        model: str,
        prompt: str,
        system: str = "",
        temperature: float = 0.7,
        format: str = "",
    ) -> dict[str, Any]:
        """Generate a completion."""
        self.call_history.append(
            (
                "generate",
                {
                    "model": model,
                    "prompt": prompt,
                    "system": system,
                    "temperature": temperature,
                    "format": format,
                },
            )
        )

        if self.should_fail:
            raise ProviderConnectionError(self.fail_message)

        return {"response": self.default_response, "model": model, "finish_reason": "stop"}

    def check_connection(self) -> bool:
        return not self.should_fail

    def list_models(self) -> list[str]:
        return ["mock-model"]
