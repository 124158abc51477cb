"""Configuration loading from YAML/JSON files."""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from domain.errors import ConfigError
from domain.taxonomy.loader import parse_taxonomy_seed
from domain.taxonomy.models import TaxonomySpecification
from infrastructure.config.models import AppConfig, Provider, ProviderConfig, ProviderModelConfig
from infrastructure.constants import PROMPTS_DIR, PROVIDERS_DIR, TAXONOMY_SEED_FILE

from .registry import PARAM_MODEL_BY_PROVIDER

logger = logging.getLogger(__name__)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file and return as dict."""
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ConfigError(f"Expected YAML dict in {path}, got {type(data)}")

    return data


def load_taxonomy_seed(path: Path) -> TaxonomySpecification | None:
    """
    Load the baseline taxonomy seed from a JSON file.

    This function handles file I/O, then delegates parsing to domain layer.

    Returns:
        The parsed seed, or None when the file does not exist (a missing seed is not fatal).

    Raises:
        ValueError: If the file exists but is not a valid seed definition
    """
    if not path.exists():
        logger.warning("Taxonomy seed file not found at %s; continuing without a seed.", path)
        return None

    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Taxonomy seed is not valid JSON: {path}") from e

    return parse_taxonomy_seed(data)


def load_provider_config(providers_dir: Path, provider: Provider) -> ProviderConfig:
    """
    Load a provider YAML (e.g., configs/providers/openai.yaml) into a ProviderConfig.

    Args:
        providers_dir: Directory containing provider YAML files
        provider: Provider enum value

    Returns:
        ProviderConfig with per-model params

    Raises:
        ConfigError: If YAML is missing required keys or has invalid types
    """
    path = providers_dir / f"{provider.value}.yaml"
    data = _load_yaml(path)

    if "provider" not in data:
        raise ConfigError(f"Provider YAML missing required key 'provider': {path}")
    try:
        file_provider = Provider(data["provider"])
    except ValueError as e:
        raise ConfigError(f"Invalid provider value {data.get('provider')!r} in {path}") from e

    if file_provider is not provider:
        raise ConfigError(f"Provider YAML mismatch: expected {provider.value}, got {file_provider.value} in {path}")

    models_raw = data.get("models") or {}
    if not isinstance(models_raw, dict) or not models_raw:
        raise ConfigError(f"Provider YAML missing/invalid 'models' mapping: {path}")

    models: dict[str, ProviderModelConfig] = {
        str(model_name): ProviderModelConfig(params=dict((block or {}).get("params") or {}))
        for model_name, block in models_raw.items()
    }

    return ProviderConfig(provider=file_provider, models=models)


def load_app_config(config_path: Path) -> AppConfig:
    """
    Load app.yaml and construct a fully-resolved AppConfig.

    Conventions (required for adding providers):
    - The Provider enum value must match the AppConfig field name used for provider-specific params.
      Example: Provider.GROK.value == "grok" -> AppConfig.grok: GrokConfig | None.

    Raises:
        ConfigError: On any missing or invalid setting. Callers treat this as fatal.
    """
    raw = _load_yaml(config_path)

    for key in ("provider", "model"):
        if not str(raw.get(key) or "").strip():
            raise ConfigError(f"app.yaml missing required key: {key}")

    storage = raw.get("storage") or {}
    if not isinstance(storage, dict) or not str(storage.get("root") or "").strip():
        raise ConfigError("app.yaml missing required key: storage.root (taxonomy storage location)")

    try:
        provider = Provider(str(raw["provider"]).strip().lower())
    except ValueError as e:
        raise ConfigError(
            f"Unknown provider {raw['provider']!r}. Supported: {[p.value for p in Provider]}"
        ) from e
    model = str(raw["model"]).strip()

    providers_dir = Path(raw.get("providers_dir", str(PROVIDERS_DIR)))
    prov_cfg = load_provider_config(providers_dir, provider)
    if model not in prov_cfg.models:
        raise ConfigError(
            f"Model '{model}' not found in {providers_dir / (provider.value + '.yaml')}. "
            f"Available: {list(prov_cfg.models.keys())}"
        )

    provider_model = prov_cfg.models[model]

    # Bind provider params using the registry
    param_model_cls = PARAM_MODEL_BY_PROVIDER.get(provider)
    if param_model_cls is None:
        raise ConfigError(f"No param model registered for provider: {provider.value}")
    if provider.value not in AppConfig.model_fields:
        raise ConfigError(
            f"AppConfig has no field '{provider.value}'. "
            f"Add `{provider.value}: <YourProviderConfig> | None = None` to AppConfig "
            f"(field name must match Provider.value)."
        )

    try:
        cfg = AppConfig(
            provider=provider,
            model=model,
            prompts_root=Path(raw.get("prompts_root", str(PROMPTS_DIR))),
            prompts_register_in_opik=bool(raw.get("prompts_register_in_opik", False)),
            taxonomy_seed_file=Path(raw.get("taxonomy_seed_file", str(TAXONOMY_SEED_FILE))),
            storage=storage,
            transcripts=raw.get("transcripts") or {},
            analysis=raw.get("analysis") or {},
            providers_dir=providers_dir,
            provider_model=provider_model,
            **{provider.value: param_model_cls(**(provider_model.params or {}))},
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}: {e}") from e

    logger.debug("Loaded config from %s (provider=%s, model=%s)", config_path, provider.value, model)
    return cfg
