"""Base LLM provider interface."""

import json
from abc import ABC, abstractmethod
from typing import Any, cast

from obsidian_anki_triggers.utils.logging import get_logger

logger = get_logger(__name__)


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers.

    Providers only need to implement ``generate``, ``check_connection`` and
    ``list_models``; ``generate_json`` is shared.
    """

    def __init__(self, **kwargs: Any):
        """Initialize the provider with configuration parameters.

        Args:
            **kwargs: Provider-specific configuration options
        """
        self.config = kwargs
        logger.debug(
            "provider_initialized",
            provider=self.__class__.__name__,
            config=self._safe_config_for_logging(),
        )

    def _safe_config_for_logging(self) -> dict[str, Any]:
        """Return config with sensitive data redacted for logging."""
        safe_config = self.config.copy()
        for key in ["api_key", "token", "password"]:
            if safe_config.get(key):
                safe_config[key] = "***REDACTED***"
        return safe_config

    @abstractmethod
    def generate(
        self,
        model: str,
        prompt: str,
        system: str = "",
        temperature: float = 0.7,
        format: str = "",
    ) -> dict[str, Any]:
        """Generate a completion from the LLM.

        Args:
            model: Model identifier (e.g., "qwen3:8b", "openai/gpt-4o-mini")
            prompt: User prompt
            system: System prompt (optional)
            temperature: Sampling temperature (0.0-1.0)
            format: Response format ("json" for structured output)

        Returns:
            Response dictionary with at least a 'response' key containing the text

        Raises:
            ProviderError: On network, HTTP or API errors
        """

    def generate_json(
        self,
        model: str,
        prompt: str,
        system: str = "",
        temperature: float = 0.7,
    ) -> dict[str, Any]:
        """Generate and parse a JSON object.

        Raises:
            ValueError: If the response is empty or not a JSON object
        """
        result = self.generate(
            model=model,
            prompt=prompt,
            system=system,
            temperature=temperature,
            format="json",
        )

        response_text = result.get("response") or "{}"
        try:
            parsed = json.loads(response_text)
        except json.JSONDecodeError:
            logger.error(
                "json_parse_error",
                provider=self.__class__.__name__,
                response_text=response_text[:500],
            )
            raise

        if not isinstance(parsed, dict) or not parsed:
            logger.error(
                "empty_json_response",
                provider=self.__class__.__name__,
                response_text=response_text[:500],
            )
            msg = f"LLM returned an empty or non-object JSON response: {response_text[:200]}"
            raise ValueError(msg)

        return cast("dict[str, Any]", parsed)

    @abstractmethod
    def check_connection(self) -> bool:
        """Check if the provider is accessible and healthy."""

    @abstractmethod
    def list_models(self) -> list[str]:
        """List models available from the provider."""

    def close(self) -> None:
        """Release network resources (no-op by default)."""

    def get_provider_name(self) -> str:
        return self.__class__.__name__.replace("Provider", "")
