"""
CLI entrypoint for taxonomy-constrained transcript analysis.

This script performs the following steps:
- loads .env and configs/app.yaml (any configuration error is fatal)
- reconciles the taxonomy store with the shipped seed
- wires the prompt pipeline, the provider adapter and the post-analysis handlers
- analyzes each requested video and persists successful analyses
- logs a summary and exits non-zero if any analysis failed
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv
from opik import track

from application import (
    AnalysisOrchestrator,
    OutputPromptComposer,
    PostAnalysisPipeline,
    PromptPipeline,
    ProposalIntegratorHandler,
    TaxonomyEvolutionHandler,
    TaxonomyPromptComposer,
    TaxonomyStore,
    TranscriptPromptComposer,
)
from application.constants import EXIT_ANALYSIS_FAILED, EXIT_CONFIG_ERROR, EXIT_OK, LOG_FILENAME
from domain.errors import ConfigError
from infrastructure.config import AppConfig, load_app_config, load_taxonomy_seed
from infrastructure.constants import APP_CONFIG_FILE
from infrastructure.observability import configure_logging, make_request_tag, set_log_context
from infrastructure.prompting import PromptManager
from infrastructure.providers import make_adapter
from infrastructure.storage import (
    JsonFileAnalysisRepository,
    JsonFileTaxonomyRepository,
    JsonFileTranscriptRepository,
    validate_document_id,
)
from infrastructure.transcripts import CachingTranscriptSource, LocalTranscriptSource, TranscriptSource

logger = logging.getLogger(__name__)

LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Extract achievements from video transcripts with an evolving taxonomy")
    p.add_argument("video_ids", nargs="+", help="One or more video ids to analyze")
    p.add_argument(
        "--config",
        type=str,
        default=str(APP_CONFIG_FILE),
        help="Path to app.yaml (default: configs/app.yaml)",
    )
    p.add_argument(
        "--env",
        type=str,
        default=".env",
        help="Path to .env file (default: .env; skipped if missing)",
    )
    p.add_argument(
        "--mock",
        action="store_true",
        help="Use Mock adapter instead of calling a real provider.",
    )
    p.add_argument(
        "--skip-existing",
        action="store_true",
        help="Skip videos that already have a stored analysis.",
    )
    p.add_argument("--console-level", type=str, default="INFO", choices=LEVELS, help="Console log level")
    p.add_argument("--file-level", type=str, default="DEBUG", choices=LEVELS, help="File log level")
    p.add_argument(
        "--log-file",
        type=str,
        default=None,
        help=f"Log file path (default: <storage.root>/logs/{LOG_FILENAME})",
    )
    return p.parse_args(argv)


def _build_transcript_source(cfg: AppConfig) -> TranscriptSource:
    if cfg.transcripts.source_dir is None:
        raise ConfigError("app.yaml missing required key: transcripts.source_dir")
    source: TranscriptSource = LocalTranscriptSource(cfg.transcripts.source_dir)
    if cfg.transcripts.cache:
        source = CachingTranscriptSource(source, JsonFileTranscriptRepository(cfg.storage.transcripts_dir))
    return source


def _partition_ids(ids: list[str]) -> tuple[list[str], list[str]]:
    """Split CLI ids into unique usable ids and ids that cannot name a stored document."""
    seen: set[str] = set()
    valid: list[str] = []
    invalid: list[str] = []
    for raw in ids:
        try:
            vid = validate_document_id(raw)
        except ValueError:
            invalid.append(raw)
            continue
        if vid not in seen:
            seen.add(vid)
            valid.append(vid)
    return valid, invalid


@track(
    name="Transcript.analysis",
    type="general",
    metadata={"task": "transcript_achievement_extraction"},
    capture_input=False,
    capture_output=False,
    flush=True,
)
def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    console_level = getattr(logging, args.console_level)
    configure_logging(console_level=console_level)

    env_file = Path(args.env)
    if env_file.exists():
        load_dotenv(env_file, override=True)
    else:
        logger.debug("No env file at %s; using process environment", env_file)

    try:
        cfg = load_app_config(Path(args.config))
        transcripts = _build_transcript_source(cfg)
        llm = make_adapter(cfg, use_mock=bool(args.mock))
    except ConfigError as e:
        logger.critical("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR

    log_path = Path(args.log_file) if args.log_file else cfg.storage.logs_dir / LOG_FILENAME
    configure_logging(log_file=log_path, console_level=console_level, file_level=getattr(logging, args.file_level))

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    provider_name = "mock_provider" if args.mock else cfg.provider.value
    request_id = f"{ts}_{provider_name}_{cfg.model}"
    set_log_context(request_id_full=request_id, provider=provider_name, model=cfg.model)
    logger.info("Starting request %s (tag=%s)", request_id, make_request_tag(request_id))

    store = TaxonomyStore(
        JsonFileTaxonomyRepository(cfg.storage.taxonomy_dir),
        seed_loader=lambda: load_taxonomy_seed(cfg.taxonomy_seed_file),
    )
    store.initialize()

    prompts = PromptManager(cfg.prompts_root, register_in_opik=cfg.prompts_register_in_opik)
    orchestrator = AnalysisOrchestrator(
        prompts=PromptPipeline(
            [
                TaxonomyPromptComposer(store, prompts),
                TranscriptPromptComposer(transcripts, prompts, cfg.analysis.preferred_languages),
                OutputPromptComposer(prompts),
            ]
        ),
        llm=llm,
        handlers=PostAnalysisPipeline(
            [ProposalIntegratorHandler(), TaxonomyEvolutionHandler(store)],
            timeout_s=cfg.analysis.handler_timeout_s,
        ),
        store=store,
    )
    analyses = JsonFileAnalysisRepository(cfg.storage.analyses_dir)

    video_ids, failed = _partition_ids(args.video_ids)
    for bad in failed:
        logger.error("Skipping invalid video id %r", bad)

    succeeded: list[str] = []
    skipped: list[str] = []
    try:
        for video_id in video_ids:
            if args.skip_existing and analyses.exists(video_id):
                logger.info("Skipping %s: analysis already stored", video_id)
                skipped.append(video_id)
                continue

            outcome = orchestrator.analyze(video_id)
            if not outcome.success or outcome.analysis is None:
                failed.append(video_id)
                continue

            try:
                analyses.upsert(outcome.analysis)
            except (OSError, ValueError) as e:
                logger.error("Failed to persist analysis for %s: %s", video_id, e)
                failed.append(video_id)
                continue

            succeeded.append(video_id)
            if outcome.handler_failures:
                logger.warning("%s analyzed with handler failures: %s", video_id, outcome.handler_failures)
    finally:
        if isinstance(transcripts, CachingTranscriptSource):
            transcripts.close()

    latest = store.get_latest()
    logger.info(
        "Done: %d analyzed, %d failed, %d skipped. Taxonomy at %s.",
        len(succeeded),
        len(failed),
        len(skipped),
        latest.version if latest is not None else "none",
    )
    if failed:
        logger.info("Failed videos: %s", ", ".join(failed))
    logger.info("Detailed log: %s", log_path)
    return EXIT_ANALYSIS_FAILED if failed else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
