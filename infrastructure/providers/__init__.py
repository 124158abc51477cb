"""
LLM provider adapters.

Implements the adapter pattern for different LLM backends:
- OpenAI (Responses API, JSON mode)
- Anthropic (Messages API with prompt caching)
- Grok (xAI, OpenAI-compatible chat completions over httpx)
- Mock (for testing)

Concrete provider modules are imported lazily by the factory, so their SDKs are
only needed for the provider actually configured.
"""

from infrastructure.providers.base import ProviderAdapter
from infrastructure.providers.factory import make_adapter
from infrastructure.providers.mock import MockAdapter

__all__ = [
    "ProviderAdapter",
    "MockAdapter",
    "make_adapter",
]
