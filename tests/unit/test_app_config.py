import json
from pathlib import Path

import pytest

from domain.errors import ConfigError
from domain.taxonomy.version import TaxonomyVersion
from infrastructure.config import AnalysisConfig, Provider, load_app_config, load_taxonomy_seed


def _write_providers(root: Path) -> Path:
    providers = root / "providers"
    providers.mkdir()
    (providers / "openai.yaml").write_text(
        "provider: openai\nmodels:\n  gpt-test:\n    params:\n      temperature: 0.1\n",
        encoding="utf-8",
    )
    (providers / "anthropic.yaml").write_text(
        "provider: anthropic\nmodels:\n  claude-test:\n    params:\n      temperature: 0.1\n",
        encoding="utf-8",
    )
    return providers


def _write_app(root: Path, body: str) -> Path:
    path = root / "app.yaml"
    path.write_text(f"providers_dir: {root / 'providers'}\n{body}", encoding="utf-8")
    return path


def test_loads_and_binds_provider_params(tmp_path: Path) -> None:
    _write_providers(tmp_path)
    path = _write_app(
        tmp_path,
        "provider: openai\nmodel: gpt-test\nstorage:\n  root: store\n"
        "analysis:\n  preferred_languages: [en, de]\n  handler_timeout_s: 5\n",
    )

    cfg = load_app_config(path)

    assert cfg.provider is Provider.OPENAI
    assert cfg.model == "gpt-test"
    assert cfg.openai is not None and cfg.openai.temperature == 0.1
    assert cfg.anthropic is None
    assert cfg.storage.taxonomy_dir == Path("store") / "taxonomy"
    assert cfg.analysis.preferred_languages == ["en", "de"]
    assert cfg.analysis.handler_timeout_s == 5
    assert cfg.transcripts.source_dir is None


@pytest.mark.parametrize(
    "body",
    [
        "provider: openai\nmodel: gpt-test\n",
        "provider: openai\nmodel: gpt-test\nstorage:\n  root: ''\n",
        "provider: openai\nstorage:\n  root: store\n",
        "provider: ollama\nmodel: gpt-test\nstorage:\n  root: store\n",
        "provider: openai\nmodel: unknown-model\nstorage:\n  root: store\n",
        "provider: openai\nmodel: gpt-test\nstorage:\n  root: store\nanalysis:\n  preferred_languages: []\n",
        "provider: openai\nmodel: gpt-test\nstorage:\n  root: store\nanalysis:\n  handler_timeout_s: 0\n",
    ],
)
def test_invalid_configuration_is_a_config_error(tmp_path: Path, body: str) -> None:
    _write_providers(tmp_path)
    with pytest.raises(ConfigError):
        load_app_config(_write_app(tmp_path, body))


def test_provider_params_failing_validation_is_a_config_error(tmp_path: Path) -> None:
    # anthropic params require max_tokens
    _write_providers(tmp_path)
    path = _write_app(tmp_path, "provider: anthropic\nmodel: claude-test\nstorage:\n  root: store\n")
    with pytest.raises(ConfigError):
        load_app_config(path)


def test_missing_config_file_is_a_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_app_config(tmp_path / "absent.yaml")


def test_handler_timeout_can_be_disabled() -> None:
    assert AnalysisConfig(handler_timeout_s=None).handler_timeout_s is None


def test_seed_file_loading(tmp_path: Path) -> None:
    path = tmp_path / "seed.json"
    assert load_taxonomy_seed(path) is None

    path.write_text(json.dumps({"id": "v1.2", "taxonomy": {"healing": {}}}), encoding="utf-8")
    seed = load_taxonomy_seed(path)
    assert seed is not None and seed.version == TaxonomyVersion(1, 2)

    path.write_text("{", encoding="utf-8")
    with pytest.raises(ValueError):
        load_taxonomy_seed(path)
