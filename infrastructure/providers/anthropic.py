"""Anthropic provider adapter with prompt caching support."""

import logging
from typing import Any

from anthropic import Anthropic, AnthropicError
from opik.integrations.anthropic import track_anthropic

from domain.errors import ConfigError
from domain.schemas import LlmCallResult
from infrastructure.config.models import AppConfig, Provider

from .base import ProviderAdapter
from .registry import register_adapter

logger = logging.getLogger(__name__)


def anthropic_token_usage(usage: Any, cache_ttl: str | None = None) -> dict[str, int]:
    """
    Normalize Anthropic usage into input/output/total token counts.

    ``input_tokens`` reported by the API only counts tokens after the last cache
    breakpoint, so cache writes and reads are added back in. When the per-TTL
    breakdown of cache writes is present it wins over the reported total.
    """
    uncached = int(getattr(usage, "input_tokens", 0) or 0)
    cache_creation_total = int(getattr(usage, "cache_creation_input_tokens", 0) or 0)
    cache_read = int(getattr(usage, "cache_read_input_tokens", 0) or 0)
    output_tokens = int(getattr(usage, "output_tokens", 0) or 0)

    breakdown = getattr(usage, "cache_creation", None)
    if isinstance(breakdown, dict):
        created_5m = int(breakdown.get("ephemeral_5m_input_tokens", 0) or 0)
        created_1h = int(breakdown.get("ephemeral_1h_input_tokens", 0) or 0)
    elif breakdown is not None:
        created_5m = int(getattr(breakdown, "ephemeral_5m_input_tokens", 0) or 0)
        created_1h = int(getattr(breakdown, "ephemeral_1h_input_tokens", 0) or 0)
    else:
        created_5m = created_1h = 0

    if created_5m + created_1h > 0:
        if 0 < cache_creation_total != created_5m + created_1h:
            logger.warning(
                "Anthropic cache_creation mismatch: cache_creation_input_tokens=%d but breakdown_sum=%d",
                cache_creation_total,
                created_5m + created_1h,
            )
        cache_creation_total = created_5m + created_1h
    elif cache_creation_total > 0:
        if cache_ttl == "1h":
            created_1h = cache_creation_total
        else:
            created_5m = cache_creation_total

    input_tokens = uncached + cache_creation_total + cache_read
    return {
        "input_tokens": input_tokens,
        "output_tokens": output_tokens,
        "total_tokens": input_tokens + output_tokens,
        "cache_read_tokens": cache_read,
        "cache_write_5m_tokens": created_5m,
        "cache_write_1h_tokens": created_1h,
    }


class AnthropicAdapter(ProviderAdapter):
    """Adapter for Anthropic Messages API with prompt caching."""

    supports_json_mode: bool = False
    supports_prompt_caching: bool = True

    @classmethod
    def from_cfg(cls, cfg: AppConfig) -> "AnthropicAdapter":
        if cfg.anthropic is None:
            raise ConfigError("Provider=anthropic but cfg.anthropic is missing")
        try:
            client: Any = track_anthropic(Anthropic())
        except AnthropicError as e:
            raise ConfigError(f"Anthropic client could not be created (is ANTHROPIC_API_KEY set?): {e}") from e
        return cls(cfg=cfg, client=client)

    def _send(self, *, system_text: str, user_text: str) -> LlmCallResult:
        provider_cfg = self.cfg.anthropic
        if provider_cfg is None:
            raise ValueError("AnthropicAdapter requires cfg.anthropic")

        # Only include cache_control when ttl is set; some SDK/API versions reject ttl=None.
        system_block: dict[str, Any] = {"type": "text", "text": system_text}
        if provider_cfg.cache_ttl:
            system_block["cache_control"] = {"type": "ephemeral", "ttl": provider_cfg.cache_ttl}

        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": provider_cfg.max_tokens,
            "system": [system_block],
            "messages": [{"role": "user", "content": [{"type": "text", "text": user_text}]}],
        }
        if provider_cfg.temperature is not None:
            kwargs["temperature"] = provider_cfg.temperature
        if provider_cfg.service_tier is not None:
            kwargs["service_tier"] = provider_cfg.service_tier

        message = self.client.messages.create(**kwargs)

        raw_text = "".join(getattr(block, "text", "") for block in message.content)
        usage = anthropic_token_usage(message.usage, provider_cfg.cache_ttl)
        logger.debug(
            "Anthropic cache: read=%d write_5m=%d write_1h=%d",
            usage["cache_read_tokens"],
            usage["cache_write_5m_tokens"],
            usage["cache_write_1h_tokens"],
        )

        return LlmCallResult(
            raw_text=raw_text,
            provider=self.provider.value,
            model_id=str(getattr(message, "model", None) or self.model),
            input_tokens=usage["input_tokens"],
            output_tokens=usage["output_tokens"],
            total_tokens=usage["total_tokens"],
        )


register_adapter(Provider.ANTHROPIC, AnthropicAdapter)
