"""Configuration entrypoint (re-exported from split modules)."""

from .config_loader import load_config
from .config_settings import (
    Config,
    ExistingNoteBehavior,
    ExportFormat,
    ExtractionMode,
    LLMProviderName,
)

__all__ = [
    "Config",
    "ExistingNoteBehavior",
    "ExportFormat",
    "ExtractionMode",
    "LLMProviderName",
    "load_config",
]
