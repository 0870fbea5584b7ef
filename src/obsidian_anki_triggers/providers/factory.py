"""Provider factory for creating LLM provider instances."""

from typing import Any

from obsidian_anki_triggers.config import Config
from obsidian_anki_triggers.utils.logging import get_logger

from .base import BaseLLMProvider
from .ollama import OllamaProvider
from .openrouter import OpenRouterProvider

logger = get_logger(__name__)


class ProviderFactory:
    """Creates the provider named in the configuration."""

    PROVIDER_MAP: dict[str, type[BaseLLMProvider]] = {
        "ollama": OllamaProvider,
        "openrouter": OpenRouterProvider,
    }

    @classmethod
    def create_provider(cls, provider_type: str, **kwargs: Any) -> BaseLLMProvider:
        """Create a provider instance based on type.

        Raises:
            ValueError: If provider_type is not supported
        """
        provider_type_lower = provider_type.lower()
        if provider_type_lower not in cls.PROVIDER_MAP:
            available = ", ".join(sorted(cls.PROVIDER_MAP))
            msg = f"Unsupported provider type: {provider_type}. Available providers: {available}"
            raise ValueError(msg)

        # None means "use the provider's default"
        options = {key: value for key, value in kwargs.items() if value is not None}
        logger.debug("creating_provider", provider_type=provider_type_lower)
        return cls.PROVIDER_MAP[provider_type_lower](**options)

    @classmethod
    def create_from_config(cls, config: Config) -> BaseLLMProvider:
        return cls.create_provider(
            config.llm_provider,
            base_url=config.llm_base_url,
            api_key=config.llm_api_key,
            timeout=config.llm_timeout,
        )
