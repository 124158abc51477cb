"""OpenAI provider adapter (Responses API, JSON mode)."""

import json
import logging
from typing import Any

from openai import OpenAI, OpenAIError
from opik.integrations.openai import track_openai

from domain.errors import ConfigError
from domain.schemas import LlmCallResult
from infrastructure.config.models import AppConfig, Provider

from .base import ProviderAdapter
from .registry import register_adapter

logger = logging.getLogger(__name__)


class OpenAIAdapter(ProviderAdapter):
    """Adapter for the OpenAI Responses API with prompt caching."""

    supports_prompt_caching: bool = True

    @classmethod
    def from_cfg(cls, cfg: AppConfig) -> "OpenAIAdapter":
        if cfg.openai is None:
            raise ConfigError("Provider=openai but cfg.openai is missing")
        try:
            client: Any = track_openai(OpenAI())
        except OpenAIError as e:
            raise ConfigError(f"OpenAI client could not be created (is OPENAI_API_KEY set?): {e}") from e
        return cls(cfg=cfg, client=client)

    def _send(self, *, system_text: str, user_text: str) -> LlmCallResult:
        provider_cfg = self.cfg.openai
        if provider_cfg is None:
            raise ValueError("OpenAIAdapter requires cfg.openai")

        # Build kwargs defensively: some SDK versions reject explicit None values.
        kwargs: dict[str, Any] = {
            "model": self.model,
            "instructions": system_text,
            "input": user_text,
            "text": {"format": {"type": "json_object"}},
        }
        if provider_cfg.service_tier is not None:
            kwargs["service_tier"] = provider_cfg.service_tier
        if provider_cfg.temperature is not None:
            kwargs["temperature"] = provider_cfg.temperature
        if provider_cfg.max_output_tokens is not None:
            kwargs["max_output_tokens"] = provider_cfg.max_output_tokens
        if provider_cfg.prompt_cache_key is not None:
            kwargs["prompt_cache_key"] = provider_cfg.prompt_cache_key
        if provider_cfg.prompt_cache_retention is not None:
            kwargs["prompt_cache_retention"] = provider_cfg.prompt_cache_retention

        response = self.client.responses.create(**kwargs)
        raw_text = response.output_text or ""

        usage = response.usage
        input_tokens = int(getattr(usage, "input_tokens", 0) or 0)
        output_tokens = int(getattr(usage, "output_tokens", 0) or 0)
        total_tokens = int(getattr(usage, "total_tokens", input_tokens + output_tokens) or 0)

        details = getattr(usage, "input_tokens_details", None)
        cached = int(getattr(details, "cached_tokens", 0) or 0) if details is not None else 0
        logger.debug("OpenAI cached input tokens: %d of %d", cached, input_tokens)

        parsed_json: dict[str, Any] | None = None
        try:
            loaded = json.loads(raw_text)
            parsed_json = loaded if isinstance(loaded, dict) else None
        except json.JSONDecodeError:
            logger.debug("OpenAI reply is not bare JSON; leaving it to the extraction parser")

        return LlmCallResult(
            raw_text=raw_text,
            parsed_json=parsed_json,
            provider=self.provider.value,
            model_id=str(getattr(response, "model", None) or self.model),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=total_tokens,
        )


register_adapter(Provider.OPENAI, OpenAIAdapter)
