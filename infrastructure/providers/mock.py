"""Mock provider adapter for testing."""

import json
import logging
from typing import Any

from domain.extraction.examples import example_analysis_result
from domain.schemas import LlmCallResult
from infrastructure.config.models import AppConfig
from infrastructure.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)


class MockAdapter(ProviderAdapter):
    """Mock adapter for testing without real API calls."""

    def __init__(self, *, cfg: AppConfig, reply: str | dict[str, Any] | None = None) -> None:
        super().__init__(cfg=cfg, client=None)
        if reply is None:
            reply = example_analysis_result().to_wire()
        self.reply_text = reply if isinstance(reply, str) else json.dumps(reply, ensure_ascii=False)
        self.prompts: list[str] = []
        logger.info("Initialized Mock adapter (no real API calls will be made)")

    def _send(self, *, system_text: str, user_text: str) -> LlmCallResult:
        """Record the prompt and return the canned reply."""
        self.prompts.append(user_text)
        input_tokens = (len(system_text) + len(user_text)) // 4  # Rough approximation
        output_tokens = len(self.reply_text) // 4
        return LlmCallResult(
            raw_text=self.reply_text,
            provider="mock",
            model_id=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
        )
