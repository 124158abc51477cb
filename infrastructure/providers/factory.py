"""Factory for creating provider adapters."""

import importlib
import logging
from typing import Any

from domain.errors import ConfigError
from infrastructure.config.models import AppConfig, Provider

from .base import ProviderAdapter
from .mock import MockAdapter
from .registry import get_adapter_class, registered_providers

logger = logging.getLogger(__name__)


def _import_provider_module(provider: Provider) -> None:
    """
    Import ``infrastructure/providers/<provider.value>.py`` so it registers its adapter.

    The Provider enum value MUST match the module filename.
    """
    module_name = f"{__package__}.{provider.value}"
    try:
        importlib.import_module(module_name)
    except ModuleNotFoundError as e:
        if getattr(e, "name", None) == module_name:
            raise ConfigError(
                f"No provider module found for provider='{provider.value}'. "
                f"Expected file: infrastructure/providers/{provider.value}.py"
            ) from e
        raise


def make_adapter(
    cfg: AppConfig,
    *,
    use_mock: bool = False,
    mock_reply: str | dict[str, Any] | None = None,
) -> ProviderAdapter:
    """
    Create the adapter for ``cfg.provider``.

    Args:
        cfg: Application configuration containing provider settings
        use_mock: If True, use the MockAdapter regardless of cfg
        mock_reply: Optional canned reply for the MockAdapter

    Returns:
        An instance of ProviderAdapter for the configured provider.

    Raises:
        ConfigError: If no adapter is available for the provider, or the adapter
            cannot be built from the configuration (missing params, missing API key).
    """
    if use_mock:
        return MockAdapter(cfg=cfg, reply=mock_reply)

    adapter_cls = get_adapter_class(cfg.provider)
    if adapter_cls is None:
        _import_provider_module(cfg.provider)
        adapter_cls = get_adapter_class(cfg.provider)

    if adapter_cls is None:
        raise ConfigError(
            f"Provider '{cfg.provider.value}' did not register an adapter "
            f"(registered: {registered_providers()})."
        )

    logger.debug("Creating %s for model=%s", adapter_cls.__name__, cfg.model)
    return adapter_cls.from_cfg(cfg)  # type: ignore[attr-defined]
