import os
import subprocess
import sys
import textwrap
import threading
import time
from pathlib import Path

from application.handlers import (
    AnalysisContext,
    AnalysisHandler,
    PostAnalysisPipeline,
    TaxonomyEvolutionHandler,
)
from application.taxonomy_store import TaxonomyStore
from domain.schemas import AnalysisResult
from domain.taxonomy.models import CategoryNode, Proposal, TaxonomySpecification
from domain.taxonomy.version import TaxonomyVersion
from infrastructure.storage.memory import InMemoryTaxonomyRepository


class Recording(AnalysisHandler):
    def __init__(self, label: str, log: list[str]):
        self.label = label
        self.log = log

    @property
    def name(self) -> str:
        return self.label

    def handle(self, result, context) -> None:
        self.log.append(self.label)


class Failing(AnalysisHandler):
    def handle(self, result, context) -> None:
        raise RuntimeError("boom")


class Blocking(AnalysisHandler):
    def __init__(self):
        self.release = threading.Event()

    def handle(self, result, context) -> None:
        self.release.wait(5)


def _result_with_proposal() -> AnalysisResult:
    return AnalysisResult(
        proposals=[Proposal(domain="healing", group={"neurological": CategoryNode(subcategories=["tinnitus"])})]
    )


def _store(repo=None) -> TaxonomyStore:
    healing = {"physical_health": {"subcategories": ["obesity"]}}
    seed = TaxonomySpecification(version="v1.0", taxonomy={"healing": healing})
    return TaxonomyStore(repo or InMemoryTaxonomyRepository(), lambda: seed)


def test_failing_handler_does_not_stop_the_next() -> None:
    log: list[str] = []
    pipeline = PostAnalysisPipeline([Recording("h1", log), Failing(), Recording("h2", log)])

    context = pipeline.run(AnalysisResult(), AnalysisContext(subject_id="vid"))

    assert log == ["h1", "h2"]
    assert len(context.failures) == 1
    assert context.failures[0].startswith("Failing: RuntimeError")


def test_failures_are_isolated_with_a_deadline_too() -> None:
    log: list[str] = []
    pipeline = PostAnalysisPipeline([Recording("h1", log), Failing(), Recording("h2", log)], timeout_s=5)

    context = pipeline.run(AnalysisResult(), AnalysisContext(subject_id="vid"))

    assert log == ["h1", "h2"]
    assert len(context.failures) == 1


def test_slow_handler_is_abandoned_after_deadline() -> None:
    log: list[str] = []
    slow = Blocking()
    pipeline = PostAnalysisPipeline([slow, Recording("after", log)], timeout_s=0.05)

    try:
        context = pipeline.run(AnalysisResult(), AnalysisContext(subject_id="vid"))
    finally:
        slow.release.set()

    assert log == ["after"]
    assert len(context.failures) == 1
    assert "exceeded" in context.failures[0]


def test_evolution_handler_saves_merged_taxonomy() -> None:
    repo = InMemoryTaxonomyRepository()
    store = _store(repo)
    context = AnalysisContext(subject_id="vid-7")

    TaxonomyEvolutionHandler(store).handle(_result_with_proposal(), context)

    latest = store.get_latest()
    assert latest.version == TaxonomyVersion(1, 1)
    assert latest.taxonomy["healing"]["neurological"].subcategories == ["tinnitus"]
    assert latest.proposed_from_id == "vid-7"
    assert context.taxonomy_version == TaxonomyVersion(1, 1)


def test_evolution_handler_without_proposals_writes_nothing() -> None:
    repo = InMemoryTaxonomyRepository()
    store = _store(repo)
    store.initialize()
    context = AnalysisContext(subject_id="vid")

    TaxonomyEvolutionHandler(store).handle(AnalysisResult(), context)

    assert repo.upsert_count == 1
    assert context.taxonomy_version is None


def test_evolution_save_failure_is_absorbed() -> None:
    class ReadOnly(InMemoryTaxonomyRepository):
        def upsert(self, doc):
            if self.upsert_count:
                raise OSError("read-only")
            super().upsert(doc)

    store = _store(ReadOnly())
    context = AnalysisContext(subject_id="vid")
    result = _result_with_proposal()

    context = PostAnalysisPipeline([TaxonomyEvolutionHandler(store)]).run(result, context)

    assert context.failures == []
    assert context.taxonomy_version is None
    assert store.get_latest().version == TaxonomyVersion(1, 0)
    assert len(result.proposals) == 1


REPO_ROOT = Path(__file__).resolve().parents[2]

HUNG_HANDLER_SCRIPT = textwrap.dedent(
    """
    import time

    from application.handlers import AnalysisContext, AnalysisHandler, PostAnalysisPipeline
    from domain.schemas import AnalysisResult


    class Hung(AnalysisHandler):
        def handle(self, result, context):
            time.sleep(30)


    context = PostAnalysisPipeline([Hung()], timeout_s=0.1).run(AnalysisResult(), AnalysisContext(subject_id="vid"))
    assert len(context.failures) == 1, context.failures
    print("pipeline returned")
    """
)


def test_abandoned_handler_does_not_hold_up_process_exit() -> None:
    env = {**os.environ, "PYTHONPATH": str(REPO_ROOT), "OPIK_TRACK_DISABLE": "true"}

    started = time.monotonic()
    proc = subprocess.run(
        [sys.executable, "-c", HUNG_HANDLER_SCRIPT],
        cwd=REPO_ROOT,
        env=env,
        capture_output=True,
        text=True,
        timeout=25,
    )
    elapsed = time.monotonic() - started

    assert proc.returncode == 0, proc.stderr
    assert "pipeline returned" in proc.stdout
    assert elapsed < 15


def test_concurrent_evolutions_do_not_overwrite_each_other() -> None:
    class SlowRepository(InMemoryTaxonomyRepository):
        def upsert(self, doc):
            time.sleep(0.05)
            super().upsert(doc)

    store = _store(SlowRepository())
    store.initialize()
    handler = TaxonomyEvolutionHandler(store)
    results = [
        _proposal_result("neurological", "tinnitus"),
        _proposal_result("cancer", "remission"),
    ]
    barrier = threading.Barrier(len(results))

    def evolve(result: AnalysisResult, subject_id: str) -> None:
        barrier.wait()
        handler.handle(result, AnalysisContext(subject_id=subject_id))

    threads = [threading.Thread(target=evolve, args=(r, f"vid-{i}")) for i, r in enumerate(results)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(5)

    latest = store.get_latest()
    assert latest.version == TaxonomyVersion(1, 2)
    assert {"neurological", "cancer"} <= set(latest.taxonomy["healing"])


def _proposal_result(category: str, subcategory: str) -> AnalysisResult:
    return AnalysisResult(
        proposals=[Proposal(domain="healing", group={category: CategoryNode(subcategories=[subcategory])})]
    )
