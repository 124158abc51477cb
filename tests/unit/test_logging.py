import contextvars
import logging
from pathlib import Path

import pytest

from domain.taxonomy.version import TaxonomyVersion
from infrastructure.observability import clear_video_context, configure_logging, get_log_context, set_log_context
from infrastructure.observability.logging import ContextInjectFilter


def _record() -> logging.LogRecord:
    return logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)


@pytest.fixture
def restore_root_handlers():
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    yield
    for h in root.handlers:
        if h not in saved[0]:
            h.close()
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])


def test_filter_injects_video_provider_model_and_taxonomy_version() -> None:
    def run() -> logging.LogRecord:
        set_log_context(video_id="abc", provider="openai", model="gpt-4.1-mini", taxonomy_version=TaxonomyVersion(1, 2))
        record = _record()
        ContextInjectFilter().filter(record)
        return record

    record = contextvars.copy_context().run(run)

    assert (record.video, record.provider, record.model, record.tax) == ("abc", "openai", "gpt-4.1-mini", "v1.2")


def test_clear_video_context_keeps_provider_info() -> None:
    def run() -> dict[str, str]:
        set_log_context(video_id="abc", provider="grok", model="grok-3", taxonomy_version="v2.0")
        clear_video_context()
        return get_log_context()

    ctx = contextvars.copy_context().run(run)

    assert ctx["video_id"] == "-"
    assert ctx["taxonomy_version"] == "-"
    assert (ctx["provider"], ctx["model"]) == ("grok", "grok-3")


def test_file_log_lines_carry_provider_and_model(tmp_path: Path, restore_root_handlers) -> None:
    log_file = tmp_path / "logs" / "run.log"

    def run() -> None:
        configure_logging(log_file=log_file, console_level=logging.CRITICAL)
        set_log_context(request_id_full="req-1", video_id="vid9", provider="anthropic", model="claude-x")
        logging.getLogger("analysis").info("extracted")
        for h in logging.getLogger().handlers:
            h.flush()

    contextvars.copy_context().run(run)

    line = [ln for ln in log_file.read_text(encoding="utf-8").splitlines() if ln.endswith("| extracted")][0]
    assert "v=vid9" in line
    assert "p=anthropic m=claude-x" in line
    assert "t=-" in line
