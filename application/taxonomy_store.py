"""Versioned taxonomy store with seed reconciliation."""

import logging
import threading
from collections.abc import Callable

from domain.errors import TaxonomyStoreError
from domain.taxonomy.models import TaxonomyDocument, TaxonomySpecification
from domain.taxonomy.version import TaxonomyVersion
from infrastructure.storage.base import TaxonomyRepository

logger = logging.getLogger(__name__)

INITIAL_CHANGE = "Initial taxonomy version"

SeedLoader = Callable[[], TaxonomySpecification | None]


class TaxonomyStore:
    """
    Taxonomy documents over a :class:`TaxonomyRepository`.

    "Latest" is the document with the highest version. Before the first read,
    the store reconciles itself with the baseline seed shipped with the
    deployment (see :meth:`initialize`).
    """

    def __init__(self, repository: TaxonomyRepository, seed_loader: SeedLoader):
        self.repository = repository
        self.seed_loader = seed_loader
        self._seed_lock = threading.Lock()
        self._seeded = False

    @property
    def initialized(self) -> bool:
        return self._seeded

    def initialize(self) -> None:
        """
        Reconcile the store with the seed. Runs at most once per process.

        1. Store empty and seed available: save the seed as the initial document.
        2. Store non-empty: save the seed only if its version is strictly greater.
        3. No seed available: nothing to write.

        Each of these is a definitive outcome. A failed save (or an unreadable
        seed) leaves the store uninitialized so the next call tries again.
        """
        if self._seeded:
            return
        with self._seed_lock:
            if self._seeded:
                return
            self._seeded = self._reconcile_seed()

    def _reconcile_seed(self) -> bool:
        try:
            seed = self.seed_loader()
        except (OSError, ValueError) as e:
            logger.error("Taxonomy seed could not be loaded; will retry on next read: %s", e)
            return False

        if seed is None:
            logger.warning("No taxonomy seed available; skipping seeding.")
            return True

        try:
            latest = self._latest_stored()
        except TaxonomyStoreError as e:
            logger.error("Could not read taxonomy store during seeding: %s", e)
            return False

        if latest is None:
            changes = [INITIAL_CHANGE]
        elif seed.version > latest.version:
            changes = [f"Seed upgrade to {seed.version}"]
        else:
            logger.info("Taxonomy store at %s; seed %s is not newer.", latest.version, seed.version)
            return True

        doc = TaxonomyDocument(specification=seed, changes=changes)
        try:
            self.save(doc)
        except TaxonomyStoreError as e:
            logger.error("Failed to save taxonomy seed %s; will retry on next read: %s", seed.version, e)
            return False

        logger.info("Seeded taxonomy %s (%s)", seed.version, changes[0])
        return True

    def _latest_stored(self) -> TaxonomyDocument | None:
        try:
            docs = self.repository.list_documents()
        except Exception as e:
            raise TaxonomyStoreError(f"Failed to list taxonomy documents: {e}") from e
        return max(docs, key=lambda d: d.version, default=None)

    def get_latest(self) -> TaxonomyDocument | None:
        """Highest-version document, or None when the store is empty."""
        self.initialize()
        return self._latest_stored()

    def get_by_version(self, version: TaxonomyVersion | str) -> TaxonomyDocument | None:
        if not isinstance(version, TaxonomyVersion):
            version = TaxonomyVersion.parse(version)
        try:
            return self.repository.get(str(version))
        except Exception as e:
            raise TaxonomyStoreError(f"Failed to read taxonomy {version}: {e}") from e

    def save(self, doc: TaxonomyDocument) -> None:
        """
        Upsert ``doc`` keyed by its version id.

        Raises:
            TaxonomyStoreError: If the repository write fails.
        """
        try:
            self.repository.upsert(doc)
        except Exception as e:
            raise TaxonomyStoreError(f"Failed to save taxonomy {doc.version}: {e}", {"id": doc.id}) from e
        logger.debug("Saved taxonomy %s", doc.version)
