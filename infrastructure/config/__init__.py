"""
Configuration management: models, loading, and validation.

Handles:
- AppConfig: Main application configuration
- Provider configs: OpenAI, Anthropic, Grok settings
- Taxonomy seed loading from JSON

The loader module performs file I/O; models are pure Pydantic classes.
"""

from infrastructure.config.loader import (
    load_app_config,
    load_provider_config,
    load_taxonomy_seed,
)
from infrastructure.config.models import (
    AnalysisConfig,
    AnthropicConfig,
    # Main config
    AppConfig,
    GrokConfig,
    # Provider configs
    OpenAIConfig,
    # Enums
    Provider,
    ProviderConfig,
    ProviderModelConfig,
    StorageConfig,
    TranscriptsConfig,
)

__all__ = [
    # Main config (most commonly used)
    "AppConfig",
    "load_app_config",
    # Enums
    "Provider",
    # Sections
    "StorageConfig",
    "TranscriptsConfig",
    "AnalysisConfig",
    # Provider configs
    "OpenAIConfig",
    "AnthropicConfig",
    "GrokConfig",
    "ProviderModelConfig",
    "ProviderConfig",
    # Loaders
    "load_provider_config",
    "load_taxonomy_seed",
]
