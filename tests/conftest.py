"""Pytest configuration and fixtures for the test suite."""

import os
from collections.abc import Callable
from typing import Any

import pytest

from obsidian_anki_triggers.config import Config
from obsidian_anki_triggers.obsidian.documents import TextDocument
from tests.fixtures import MockAnkiClient, MockLLMProvider

DEFINITIONS_NOTE = """# Vehicles

## Car
definition: A car is a road vehicle with four wheels.

## Bike
definition: A bike is a vehicle with two wheels and pedals.

## Boat
definition: A boat is a vessel that floats on water.

## Plane
definition: A plane is an aircraft with fixed wings.

## Train
definition: A train is a series of connected railway cars.
"""


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch, tmp_path):
    """Keep tests independent of the developer's env vars and config files."""
    for key in list(os.environ):
        if key.startswith("ANKI_TRIGGERS_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def mock_anki_client():
    """Provide an in-memory Anki client."""
    return MockAnkiClient()


@pytest.fixture
def mock_llm_provider():
    """Provide a mock LLM provider."""
    return MockLLMProvider()


@pytest.fixture
def make_config(tmp_path) -> Callable[..., Config]:
    """Build a Config rooted at a temporary vault."""

    def _make(**overrides: Any) -> Config:
        values: dict[str, Any] = {
            "vault_path": tmp_path,
            "vault_name": "vault",
            "triggers": ["definition"],
            "log_dir": tmp_path / "logs",
        }
        values.update(overrides)
        return Config(**values)

    return _make


@pytest.fixture
def config(make_config) -> Config:
    return make_config()


@pytest.fixture
def definitions_document() -> TextDocument:
    """Five trigger lines, each under its own heading."""
    return TextDocument(DEFINITIONS_NOTE, "vehicles.md")
