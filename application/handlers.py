"""Post-analysis side-effect handlers and the pipeline that isolates them."""

import contextvars
import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field

from application.integration import ProposalIntegrator
from application.taxonomy_store import TaxonomyStore
from domain.errors import TaxonomyStoreError
from domain.schemas import AnalysisResult
from domain.taxonomy.merger import merge_proposals
from domain.taxonomy.version import TaxonomyVersion

logger = logging.getLogger(__name__)


class HandlerTimeoutError(Exception):
    """A handler did not finish within the pipeline deadline."""


@dataclass
class AnalysisContext:
    """Per-request data shared by handlers."""

    subject_id: str
    taxonomy_version: TaxonomyVersion | None = None
    failures: list[str] = field(default_factory=list)


class AnalysisHandler(ABC):
    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    def handle(self, result: AnalysisResult, context: AnalysisContext) -> None:
        raise NotImplementedError


class PostAnalysisPipeline:
    """
    Run handlers sequentially, in registration order.

    A handler that raises, or that exceeds ``timeout_s``, is logged and recorded
    in ``context.failures``; the next handler runs regardless. A timed-out
    handler is abandoned, not cancelled: it keeps running on a daemon thread,
    which never holds up interpreter exit.
    """

    def __init__(self, handlers: Sequence[AnalysisHandler], *, timeout_s: float | None = None):
        self.handlers = list(handlers)
        self.timeout_s = timeout_s

    def run(self, result: AnalysisResult, context: AnalysisContext) -> AnalysisContext:
        for handler in self.handlers:
            try:
                self._run_one(handler, result, context)
            except HandlerTimeoutError as e:
                logger.error("%s; continuing", e)
                context.failures.append(f"{handler.name}: {e}")
            except Exception as e:
                logger.exception("Handler %s failed for %s; continuing", handler.name, context.subject_id)
                context.failures.append(f"{handler.name}: {type(e).__name__}: {e}")
        return context

    def _run_one(self, handler: AnalysisHandler, result: AnalysisResult, context: AnalysisContext) -> None:
        if self.timeout_s is None:
            handler.handle(result, context)
            return

        errors: list[Exception] = []

        def target() -> None:
            try:
                handler.handle(result, context)
            except Exception as e:
                errors.append(e)

        # copy_context keeps the log context (video id) inside the worker thread
        worker = threading.Thread(
            target=contextvars.copy_context().run,
            args=(target,),
            name=f"handler-{handler.name}",
            daemon=True,
        )
        worker.start()
        worker.join(self.timeout_s)
        if worker.is_alive():
            raise HandlerTimeoutError(f"Handler {handler.name} exceeded {self.timeout_s}s for {context.subject_id}")
        if errors:
            raise errors[0]


class ProposalIntegratorHandler(AnalysisHandler):
    def __init__(self, integrator: ProposalIntegrator | None = None):
        self.integrator = integrator or ProposalIntegrator()

    def handle(self, result: AnalysisResult, context: AnalysisContext) -> None:
        if not result.proposals:
            return
        applied = self.integrator.integrate(result)
        logger.info("Integrated %d of %d proposal(s) into achievements", applied, len(result.proposals))


class TaxonomyEvolutionHandler(AnalysisHandler):
    """
    Merge the result's proposals into the latest taxonomy and persist the new version.

    Read-merge-save runs under one lock per handler instance, so an evolution
    still running for an earlier request (e.g. one abandoned after its deadline)
    is never raced for the same next version. A failed save is logged as a
    warning; the proposals stay on the result.
    """

    def __init__(self, store: TaxonomyStore):
        self.store = store
        self._evolve_lock = threading.Lock()

    def handle(self, result: AnalysisResult, context: AnalysisContext) -> None:
        if not result.proposals:
            return
        proposals = list(result.proposals)

        with self._evolve_lock:
            current = self.store.get_latest()
            if current is None:
                logger.warning("No taxonomy in store; cannot evolve from proposals of %s", context.subject_id)
                return

            merged, changes = merge_proposals(current, proposals, proposed_from_id=context.subject_id)
            if merged is None:
                logger.debug("Proposals of %s produced no taxonomy change", context.subject_id)
                return

            try:
                self.store.save(merged)
            except TaxonomyStoreError as e:
                logger.warning("Taxonomy %s not persisted (%d changes): %s", merged.version, len(changes), e)
                return

        context.taxonomy_version = merged.version
        logger.info("Taxonomy evolved to %s: %s", merged.version, "; ".join(changes))
