"""Unit tests for LLM providers.

Tests cover:
- Provider factory creation
- Ollama and OpenRouter request/response handling
- JSON parsing in the base provider
"""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from obsidian_anki_triggers.config import Config
from obsidian_anki_triggers.exceptions import (
    ConfigurationError,
    ProviderConnectionError,
    ProviderError,
)
from obsidian_anki_triggers.providers.factory import ProviderFactory
from obsidian_anki_triggers.providers.ollama import OllamaProvider
from obsidian_anki_triggers.providers.openrouter import OpenRouterProvider

OLLAMA_URL = "http://localhost:11434"
OPENROUTER_URL = "https://openrouter.ai/api/v1"


# Factory


def test_factory_creates_ollama_provider():
    provider = ProviderFactory.create_provider("OLLAMA", base_url=OLLAMA_URL)
    assert isinstance(provider, OllamaProvider)
    assert provider.base_url == OLLAMA_URL


def test_factory_drops_none_options():
    provider = ProviderFactory.create_provider("ollama", base_url=None, api_key=None)
    assert provider.base_url == OLLAMA_URL


def test_factory_raises_error_for_invalid_provider():
    with pytest.raises(ValueError, match="Unsupported provider type"):
        ProviderFactory.create_provider("gemini")


def test_factory_from_config():
    config = Config(llm_provider="openrouter", llm_api_key="sk-test", llm_timeout=5)
    provider = ProviderFactory.create_from_config(config)
    assert isinstance(provider, OpenRouterProvider)
    assert provider.timeout == 5


def test_openrouter_requires_api_key():
    with pytest.raises(ConfigurationError, match="API key"):
        OpenRouterProvider()


# Ollama


@respx.mock
def test_ollama_generate_payload():
    route = respx.post(f"{OLLAMA_URL}/api/generate").mock(
        return_value=httpx.Response(200, json={"response": '{"cards": []}', "done": True})
    )

    with OllamaProvider() as provider:
        result = provider.generate("qwen3:8b", "hi", system="sys", temperature=0.1, format="json")

    assert result["response"] == '{"cards": []}'
    sent = json.loads(route.calls.last.request.content)
    assert sent["system"] == "sys"
    assert sent["format"] == "json"
    assert sent["stream"] is False
    assert sent["options"] == {"temperature": 0.1}


@respx.mock
def test_ollama_connection_error():
    respx.post(f"{OLLAMA_URL}/api/generate").mock(side_effect=httpx.ConnectError("refused"))

    with OllamaProvider() as provider, pytest.raises(ProviderConnectionError):
        provider.generate("m", "p")


@respx.mock
def test_ollama_http_error():
    respx.post(f"{OLLAMA_URL}/api/generate").mock(
        return_value=httpx.Response(404, text="model not found")
    )

    with OllamaProvider() as provider, pytest.raises(ProviderError, match="HTTP 404"):
        provider.generate("m", "p")


@respx.mock
def test_ollama_list_models():
    respx.get(f"{OLLAMA_URL}/api/tags").mock(
        return_value=httpx.Response(200, json={"models": [{"name": "a"}, {"name": "b"}]})
    )

    with OllamaProvider() as provider:
        assert provider.list_models() == ["a", "b"]
        assert provider.check_connection() is True


@respx.mock
def test_generate_json_parses_object():
    respx.post(f"{OLLAMA_URL}/api/generate").mock(
        return_value=httpx.Response(200, json={"response": '{"cards": [{"index": 0}]}'})
    )

    with OllamaProvider() as provider:
        assert provider.generate_json("m", "p") == {"cards": [{"index": 0}]}


@respx.mock
def test_generate_json_rejects_non_object():
    respx.post(f"{OLLAMA_URL}/api/generate").mock(
        return_value=httpx.Response(200, json={"response": "[1, 2]"})
    )

    with OllamaProvider() as provider, pytest.raises(ValueError):
        provider.generate_json("m", "p")


# OpenRouter


@respx.mock
def test_openrouter_generate():
    route = respx.post(f"{OPENROUTER_URL}/chat/completions").mock(
        return_value=httpx.Response(
            200,
            json={
                "choices": [{"message": {"content": "{}"}, "finish_reason": "stop"}],
                "usage": {"total_tokens": 3},
            },
        )
    )

    with OpenRouterProvider(api_key="sk-test") as provider:
        result = provider.generate("m", "p", system="s", format="json")

    assert result == {"response": "{}", "finish_reason": "stop", "usage": {"total_tokens": 3}}
    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer sk-test"
    sent = json.loads(request.content)
    assert sent["response_format"] == {"type": "json_object"}
    assert [message["role"] for message in sent["messages"]] == ["system", "user"]


@respx.mock
def test_openrouter_without_choices():
    respx.post(f"{OPENROUTER_URL}/chat/completions").mock(
        return_value=httpx.Response(200, json={"choices": []})
    )

    with OpenRouterProvider(api_key="sk-test") as provider, pytest.raises(
        ProviderError, match="no choices"
    ):
        provider.generate("m", "p")
