"""
Logging setup with contextvars-based metadata injection.

- Adds the request tag and the video id into every log line (via contextvars).
- File lines also carry the provider, the model and the taxonomy version in effect.
- Supports console-only logging OR console + rotating file logs.
- Tunes noisy third-party library loggers (httpx, openai, anthropic, etc.).
"""

import contextvars
import hashlib
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from opik import opik_context

# Context variables for dynamic log metadata
cv_request_tag = contextvars.ContextVar("request_tag", default="-")
cv_video_id = contextvars.ContextVar("video_id", default="-")

# Printed in the file log only; console lines stay short
cv_taxonomy_version = contextvars.ContextVar("taxonomy_version", default="-")
cv_provider = contextvars.ContextVar("provider", default="-")
cv_model = contextvars.ContextVar("model", default="-")
cv_request_id_full = contextvars.ContextVar("request_id_full", default="-")  # metadata only


def make_request_tag(request_id_full: str, length: int = 8) -> str:
    """
    Stable short tag derived from the full request id.
    Uses BLAKE2s for collision resistance.
    """
    h = hashlib.blake2s(request_id_full.encode("utf-8"), digest_size=8).hexdigest()
    return h[:length]


class ContextInjectFilter(logging.Filter):
    """Inject context variables into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.req = cv_request_tag.get() or "-"
        record.video = cv_video_id.get() or "-"
        record.tax = cv_taxonomy_version.get() or "-"
        record.provider = cv_provider.get() or "-"
        record.model = cv_model.get() or "-"
        return True


def set_log_context(
    *,
    request_id_full: str | None = None,
    video_id: str | None = None,
    provider: str | None = None,
    model: str | None = None,
    taxonomy_version: object | None = None,
) -> None:
    """Update logging context (thread-safe via contextvars)."""
    if request_id_full is not None:
        cv_request_id_full.set(str(request_id_full))
        cv_request_tag.set(make_request_tag(str(request_id_full)))
    if video_id is not None:
        cv_video_id.set(str(video_id))
    if provider is not None:
        cv_provider.set(str(provider))
    if model is not None:
        cv_model.set(str(model))
    if taxonomy_version is not None:
        cv_taxonomy_version.set(str(taxonomy_version))


def get_log_context() -> dict[str, str]:
    """
    Return the current context in a convenient dict form.

    Useful for attaching consistent metadata to traces and persisted documents.
    """
    return {
        "request_tag": str(cv_request_tag.get() or "-"),
        "request_id_full": str(cv_request_id_full.get() or "-"),
        "video_id": str(cv_video_id.get() or "-"),
        "taxonomy_version": str(cv_taxonomy_version.get() or "-"),
        "provider": str(cv_provider.get() or "-"),
        "model": str(cv_model.get() or "-"),
    }


def clear_video_context() -> None:
    """Reset per-video context to default (keep request and provider info)."""
    cv_video_id.set("-")
    cv_taxonomy_version.set("-")


def annotate_current_span(**kwargs: Any) -> None:
    """Attach data to the active Opik span; no-op when tracing is off or no span is open."""
    if opik_context.get_current_span_data() is None:
        return
    opik_context.update_current_span(**kwargs)


def configure_logging(
    *,
    log_file: Path | None = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
    max_bytes: int = 10_000_000,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Configure application logging with contextvars support.

    Args:
        log_file: Path to log file (None = console only)
        console_level: Minimum level for console output (default: INFO)
        file_level: Minimum level for file output (default: DEBUG)
        max_bytes: Max log file size before rotation
        backup_count: Number of backup files to keep
    """
    # Clear existing handlers to avoid duplicate logs if called multiple times
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)  # keep root permissive; handlers enforce levels

    console_fmt = "%(asctime)s [%(levelname)s] r=%(req)s v=%(video)s | %(message)s"
    file_fmt = (
        "%(asctime)s [%(levelname)s] %(name)s | r=%(req)s v=%(video)s t=%(tax)s "
        "p=%(provider)s m=%(model)s | %(message)s"
    )

    console_formatter = logging.Formatter(console_fmt, datefmt="%H:%M:%S")
    file_formatter = logging.Formatter(file_fmt, datefmt="%Y-%m-%d %H:%M:%S")

    ctx_filter = ContextInjectFilter()

    ch = logging.StreamHandler()
    ch.setLevel(console_level)
    ch.setFormatter(console_formatter)
    ch.addFilter(ctx_filter)
    root.addHandler(ch)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        fh.setLevel(file_level)
        fh.setFormatter(file_formatter)
        fh.addFilter(ctx_filter)
        root.addHandler(fh)

    # Reduce noise from HTTP libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    # LLM provider SDKs
    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("anthropic").setLevel(logging.WARNING)

    logging.getLogger("opik").setLevel(logging.INFO)

    logging.getLogger(__name__).info(
        "Logging configured (console_level=%s, file=%s)",
        logging.getLevelName(console_level),
        str(log_file) if log_file is not None else "None",
    )
