import logging
import os
from typing import Any

import httpx

from domain.errors import ConfigError
from domain.schemas import LlmCallResult
from infrastructure.config.models import AppConfig, Provider

from .base import ProviderAdapter
from .registry import register_adapter

logger = logging.getLogger(__name__)


class GrokAdapter(ProviderAdapter):
    """
    xAI Grok backend using the OpenAI-compatible endpoint: POST /chat/completions

    - JSON mode via ``response_format={"type": "json_object"}``
    - Token usage comes from ``usage.prompt_tokens`` / ``usage.completion_tokens``
    """

    @classmethod
    def from_cfg(cls, cfg: AppConfig) -> "GrokAdapter":
        if cfg.grok is None:
            raise ConfigError("Provider=grok but cfg.grok is missing")
        api_key = os.environ.get(cfg.grok.api_key_env)
        if not api_key:
            raise ConfigError(f"Environment variable {cfg.grok.api_key_env} is not set (required for provider=grok)")
        client = httpx.Client(
            base_url=cfg.grok.base_url.rstrip("/"),
            timeout=cfg.grok.timeout_s,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
        )
        return cls(cfg=cfg, client=client)

    def _send(self, *, system_text: str, user_text: str) -> LlmCallResult:
        grok_cfg = self.cfg.grok
        if grok_cfg is None:
            raise ValueError("GrokAdapter requires cfg.grok")

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_text},
                {"role": "user", "content": user_text},
            ],
            "response_format": {"type": "json_object"},
        }
        if grok_cfg.temperature is not None:
            payload["temperature"] = grok_cfg.temperature
        if grok_cfg.max_tokens is not None:
            payload["max_tokens"] = grok_cfg.max_tokens

        resp = self.client.post("/chat/completions", json=payload)
        resp.raise_for_status()
        data = resp.json()

        choices = data.get("choices") or []
        raw_text = ((choices[0].get("message") or {}).get("content") or "") if choices else ""

        usage = data.get("usage") or {}
        input_tokens = int(usage.get("prompt_tokens", 0) or 0)
        output_tokens = int(usage.get("completion_tokens", 0) or 0)
        total_tokens = int(usage.get("total_tokens", input_tokens + output_tokens) or 0)

        return LlmCallResult(
            raw_text=raw_text,
            provider=self.provider.value,
            model_id=str(data.get("model") or self.model),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=total_tokens,
        )


register_adapter(Provider.GROK, GrokAdapter)
