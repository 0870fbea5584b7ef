"""OpenRouter provider implementation (OpenAI-compatible chat completions)."""

import contextlib
import time
from types import TracebackType
from typing import Any, Literal

import httpx

from obsidian_anki_triggers.exceptions import (
    ConfigurationError,
    ProviderConnectionError,
    ProviderError,
)
from obsidian_anki_triggers.utils.logging import get_logger

from .base import BaseLLMProvider

logger = get_logger(__name__)

DEFAULT_OPENROUTER_URL = "https://openrouter.ai/api/v1"


class OpenRouterProvider(BaseLLMProvider):
    """OpenRouter LLM provider."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = DEFAULT_OPENROUTER_URL,
        timeout: float = 120.0,
        site_name: str = "obsidian-anki-triggers",
        **kwargs: Any,
    ):
        if not api_key:
            msg = "OpenRouter API key is required"
            raise ConfigurationError(
                msg, suggestion="Set llm_api_key or ANKI_TRIGGERS_LLM_API_KEY"
            )

        super().__init__(api_key=api_key, base_url=base_url, timeout=timeout, **kwargs)

        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "X-Title": site_name,
        }
        self.client = httpx.Client(
            timeout=httpx.Timeout(timeout, connect=10.0),
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
            headers=headers,
        )

    def close(self) -> None:
        if hasattr(self, "client") and self.client:
            try:
                self.client.close()
            except Exception as e:
                logger.warning("openrouter_client_cleanup_failed", error=str(e))

    def __enter__(self) -> "OpenRouterProvider":
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
        try:
            response = self.client.get(f"{self.base_url}/models")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("openrouter_connection_check_failed", error=str(e))
            return False

    def list_models(self) -> list[str]:
        try:
            response = self.client.get(f"{self.base_url}/models")
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("openrouter_list_models_error", error=str(e))
            return []
        return [model["id"] for model in response.json().get("data", [])]

    def generate(
        self,
        model: str,
        prompt: str,
        system: str = "",
        temperature: float = 0.7,
        format: str = "",
    ) -> dict[str, Any]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        payload: dict[str, Any] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
        }
        if format == "json":
            payload["response_format"] = {"type": "json_object"}

        request_start = time.time()
        try:
            response = self.client.post(f"{self.base_url}/chat/completions", json=payload)
            response.raise_for_status()
        except (httpx.TimeoutException, httpx.ConnectError) as e:
            msg = f"Cannot reach OpenRouter: {e}"
            raise ProviderConnectionError(msg) from e
        except httpx.HTTPStatusError as e:
            msg = f"HTTP {e.response.status_code} from OpenRouter: {e.response.text[:200]}"
            raise ProviderError(msg, context={"model": model}) from e
        except httpx.HTTPError as e:
            msg = f"HTTP error calling OpenRouter: {e}"
            raise ProviderError(msg, context={"model": model}) from e

        data = response.json()
        choices = data.get("choices") or []
        if not choices:
            msg = f"OpenRouter returned no choices for model {model}"
            raise ProviderError(msg, context={"model": model})

        completion = choices[0].get("message", {}).get("content") or ""
        logger.debug(
            "openrouter_generate_success",
            model=model,
            duration=round(time.time() - request_start, 2),
            response_length=len(completion),
        )
        return {
            "response": completion,
            "finish_reason": choices[0].get("finish_reason"),
            "usage": data.get("usage", {}),
        }
