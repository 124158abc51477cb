"""
Infrastructure layer: External dependencies and I/O boundaries.

Contains adapters for:
- LLM providers (OpenAI, Anthropic, Grok, Mock)
- Configuration loading (YAML, JSON seed, environment)
- Prompt template management (disk, Opik)
- Document storage (JSON files, in-memory)
- Transcript sources (local files, cache)
- Observability (logging, tracing)

This is the only layer that performs I/O operations.
"""

# Most commonly used - exposed at top level for convenience
from infrastructure.config import (
    AppConfig,
    Provider,
    load_app_config,
)
from infrastructure.providers import ProviderAdapter, make_adapter

__all__ = [
    # Provider adapters (most commonly used)
    "make_adapter",
    "ProviderAdapter",
    # Configuration (most commonly used)
    "load_app_config",
    "AppConfig",
    "Provider",
]
