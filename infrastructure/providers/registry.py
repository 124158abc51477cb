"""Provider -> adapter class registry, filled by provider modules at import time."""

import logging

from infrastructure.config.models import Provider

from .base import ProviderAdapter

logger = logging.getLogger(__name__)

_ADAPTERS: dict[Provider, type[ProviderAdapter]] = {}


def register_adapter(provider: Provider, adapter_cls: type[ProviderAdapter], *, override: bool = False) -> None:
    """
    Register ``adapter_cls`` as the adapter for ``provider``.

    Registering the same class twice is a no-op (e.g. a re-imported module);
    registering a different class requires ``override=True``.
    """
    existing = _ADAPTERS.get(provider)
    if existing is adapter_cls:
        return
    if existing is not None and not override:
        raise RuntimeError(
            f"provider={provider.value} already uses {existing.__name__}; "
            f"pass override=True to replace it with {adapter_cls.__name__}"
        )
    _ADAPTERS[provider] = adapter_cls
    logger.debug("Registered %s for provider=%s", adapter_cls.__name__, provider.value)


def get_adapter_class(provider: Provider) -> type[ProviderAdapter] | None:
    return _ADAPTERS.get(provider)


def registered_providers() -> list[str]:
    return sorted(p.value for p in _ADAPTERS)
