"""Base adapter interface for LLM providers."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any

from opik import track

from domain.errors import LanguageModelError
from domain.schemas import LlmCallResult
from infrastructure.config.models import AppConfig, Provider
from infrastructure.observability import annotate_current_span, get_log_context

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that extracts structured data from video transcripts. "
    "Always respond with valid JSON only, no additional text."
)


class ProviderAdapter(ABC):
    """
    Abstract base class for LLM provider adapters.
    Common interface for provider backends (OpenAI, Anthropic, Grok, etc.).

    All concrete adapters must implement:
    - _send(): one API call returning the raw reply and token usage
    """

    provider: Provider
    cfg: AppConfig
    client: Any

    supports_json_mode: bool = True
    supports_prompt_caching: bool = False

    def __init__(self, *, cfg: AppConfig, client: Any) -> None:
        self.cfg = cfg
        self.provider = cfg.provider
        self.client = client

    @property
    def model(self) -> str:
        return self.cfg.model

    def _opik_usage(self, *, input_tokens: int, output_tokens: int, total_tokens: int) -> dict[str, int]:
        # Opik dashboard expects OpenAI-style keys
        return {
            "prompt_tokens": int(input_tokens),
            "completion_tokens": int(output_tokens),
            "total_tokens": int(total_tokens),
        }

    @track(type="llm", name="llm.call", capture_input=False)
    def call(self, prompt_text: str) -> LlmCallResult:
        """
        Send one composed prompt and return the raw reply with usage metadata.

        No retry is attempted.

        Raises:
            LanguageModelError: If the provider call fails or returns an empty reply.
        """
        started = time.perf_counter()
        try:
            result = self._send(system_text=SYSTEM_PROMPT, user_text=prompt_text)
        except LanguageModelError:
            raise
        except Exception as e:
            raise LanguageModelError(
                f"{self.provider.value} call failed: {e}",
                {"provider": self.provider.value, "model": self.model},
            ) from e
        duration_ms = int((time.perf_counter() - started) * 1000)

        if not result.raw_text.strip():
            raise LanguageModelError(
                f"{self.provider.value} returned an empty reply",
                {"provider": self.provider.value, "model": self.model},
            )

        result = result.model_copy(update={"duration_ms": duration_ms})

        annotate_current_span(
            provider=result.provider,
            model=result.model_id,
            usage=self._opik_usage(
                input_tokens=result.input_tokens,
                output_tokens=result.output_tokens,
                total_tokens=result.total_tokens,
            ),
            metadata={"duration_ms": duration_ms, **get_log_context()},
        )
        logger.info(
            "%s - total_tokens=%d (in=%d, out=%d), %d ms",
            result.provider,
            result.total_tokens,
            result.input_tokens,
            result.output_tokens,
            duration_ms,
        )
        return result

    @abstractmethod
    def _send(self, *, system_text: str, user_text: str) -> LlmCallResult:
        """
        Make one provider API call.

        Args:
            system_text: System instructions
            user_text: The composed prompt

        Returns:
            LlmCallResult (``duration_ms`` is filled in by :meth:`call`)
        """
        raise NotImplementedError
