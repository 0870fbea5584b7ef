"""Ollama provider implementation (local and cloud)."""

import contextlib
import time
from types import TracebackType
from typing import Any, Literal, cast

import httpx

from obsidian_anki_triggers.exceptions import ProviderConnectionError, ProviderError
from obsidian_anki_triggers.utils.logging import get_logger

from .base import BaseLLMProvider

logger = get_logger(__name__)

DEFAULT_OLLAMA_URL = "http://localhost:11434"


class OllamaProvider(BaseLLMProvider):
    """Ollama LLM provider.

    Configuration:
        base_url: API endpoint URL (default: http://localhost:11434)
        api_key: API key for Ollama Cloud (optional)
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        base_url: str = DEFAULT_OLLAMA_URL,
        api_key: str | None = None,
        timeout: float = 120.0,
        **kwargs: Any,
    ):
        super().__init__(base_url=base_url, api_key=api_key, timeout=timeout, **kwargs)

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        self.client = httpx.Client(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            headers=headers,
        )

    def close(self) -> None:
        """Close HTTP client and cleanup resources."""
        if hasattr(self, "client") and self.client:
            try:
                self.client.close()
            except Exception as e:
                logger.warning("ollama_client_cleanup_failed", base_url=self.base_url, error=str(e))

    def __enter__(self) -> "OllamaProvider":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> Literal[False]:
        self.close()
        return False

    def __del__(self) -> None:
        with contextlib.suppress(Exception):
            self.close()

    def check_connection(self) -> bool:
        """Check if Ollama is running and accessible."""
        try:
            response = self.client.get(f"{self.base_url}/api/tags")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("ollama_connection_check_failed", base_url=self.base_url, error=str(e))
            return False

    def list_models(self) -> list[str]:
        """List locally available models."""
        try:
            response = self.client.get(f"{self.base_url}/api/tags")
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("ollama_list_models_error", error=str(e))
            return []
        return [model["name"] for model in response.json().get("models", [])]

    def generate(
        self,
        model: str,
        prompt: str,
        system: str = "",
        temperature: float = 0.7,
        format: str = "",
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model,
            "prompt": prompt,
            "stream": False,
            "options": {"temperature": temperature},
        }
        if system:
            payload["system"] = system
        if format:
            payload["format"] = format

        request_start = time.time()
        logger.debug("ollama_generate_request", model=model, prompt_length=len(prompt))

        try:
            response = self.client.post(f"{self.base_url}/api/generate", json=payload)
            response.raise_for_status()
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            msg = f"Cannot reach Ollama at {self.base_url}: {e}"
            raise ProviderConnectionError(
                msg, suggestion="Start Ollama with 'ollama serve'"
            ) from e
        except httpx.HTTPStatusError as e:
            msg = f"HTTP {e.response.status_code} from Ollama: {e.response.text[:200]}"
            raise ProviderError(msg, context={"model": model}) from e
        except httpx.HTTPError as e:
            msg = f"HTTP error calling Ollama: {e}"
            raise ProviderError(msg, context={"model": model}) from e

        result = cast("dict[str, Any]", response.json())
        logger.debug(
            "ollama_generate_success",
            model=model,
            duration=round(time.time() - request_start, 2),
            response_length=len(result.get("response", "")),
        )
        return result
