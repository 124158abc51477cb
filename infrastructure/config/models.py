"""Configuration models (Pydantic classes)."""

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from infrastructure.constants import (
    ANALYSES_DIRNAME,
    LOGS_DIRNAME,
    PROMPTS_DIR,
    PROVIDERS_DIR,
    TAXONOMY_DIRNAME,
    TAXONOMY_SEED_FILE,
    TRANSCRIPTS_DIRNAME,
)


class Provider(str, Enum):
    """Supported LLM providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GROK = "grok"


class OpenAIConfig(BaseModel):
    """OpenAI-specific configuration."""

    service_tier: str | None = None
    temperature: int | float | None = None
    max_output_tokens: int | None = None
    prompt_cache_key: str | None = None
    prompt_cache_retention: str | None = None


class AnthropicConfig(BaseModel):
    """Anthropic-specific configuration."""

    service_tier: str | None = None
    temperature: int | float | None = None
    max_tokens: int
    cache_ttl: str | None = None


class GrokConfig(BaseModel):
    """xAI Grok configuration (OpenAI-compatible chat completions endpoint)."""

    base_url: str = "https://api.x.ai/v1"
    api_key_env: str = "XAI_API_KEY"
    timeout_s: float = 120.0
    temperature: int | float | None = None
    max_tokens: int | None = None


class ProviderModelConfig(BaseModel):
    """Per-model configuration."""

    params: dict[str, Any] = Field(default_factory=dict)


class ProviderConfig(BaseModel):
    """Provider-level configuration."""

    provider: Provider
    models: dict[str, ProviderModelConfig]


class StorageConfig(BaseModel):
    """Root directory of the JSON document store."""

    root: Path

    @property
    def taxonomy_dir(self) -> Path:
        return self.root / TAXONOMY_DIRNAME

    @property
    def analyses_dir(self) -> Path:
        return self.root / ANALYSES_DIRNAME

    @property
    def transcripts_dir(self) -> Path:
        return self.root / TRANSCRIPTS_DIRNAME

    @property
    def logs_dir(self) -> Path:
        return self.root / LOGS_DIRNAME


class TranscriptsConfig(BaseModel):
    source_dir: Path | None = Field(
        default=None,
        description="Directory of <video_id>.json transcript files. Required to analyze anything.",
    )
    cache: bool = Field(default=True, description="Cache fetched transcripts under storage.root.")


class AnalysisConfig(BaseModel):
    preferred_languages: list[str] = Field(default_factory=lambda: ["en"])
    handler_timeout_s: float | None = Field(
        default=30.0,
        description="Deadline per post-analysis handler. None disables the deadline.",
    )

    @field_validator("preferred_languages")
    @classmethod
    def _non_empty_languages(cls, v: list[str]) -> list[str]:
        langs = [s.strip() for s in v if s and s.strip()]
        if not langs:
            raise ValueError("analysis.preferred_languages must name at least one language")
        return langs

    @field_validator("handler_timeout_s")
    @classmethod
    def _positive_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("analysis.handler_timeout_s must be positive (or null)")
        return v


class AppConfig(BaseModel):
    """
    Runtime configuration.
    - Loaded from app.yaml
    - Validated and enriched by configuration loader
    - Consumed by provider adapters, stores and the CLI
    """

    provider: Provider = Field(default=Provider.OPENAI, description="LLM provider backend to use.")
    model: str = Field(..., description="Model identifier for the selected provider.")

    # Prompt handling
    prompts_root: Path = Field(
        default_factory=lambda: PROMPTS_DIR,
        description="Root directory containing prompt templates.",
    )
    prompts_register_in_opik: bool = Field(
        default=False,
        description="Register prompts in Opik library. If False, load from disk only.",
    )

    taxonomy_seed_file: Path = Field(default_factory=lambda: TAXONOMY_SEED_FILE)

    storage: StorageConfig
    transcripts: TranscriptsConfig = Field(default_factory=TranscriptsConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)

    # Provider config (resolved by loader)
    openai: OpenAIConfig | None = None
    anthropic: AnthropicConfig | None = None
    grok: GrokConfig | None = None

    providers_dir: Path = Field(default_factory=lambda: PROVIDERS_DIR)
    provider_model: ProviderModelConfig = Field(default_factory=ProviderModelConfig)

    @model_validator(mode="after")
    def _validate(self) -> "AppConfig":
        if not self.model.strip():
            raise ValueError("model must be a non-empty string")
        if getattr(self, self.provider.value) is None:
            raise ValueError(f"Provider={self.provider.value} but its '{self.provider.value}' params are missing")
        return self
