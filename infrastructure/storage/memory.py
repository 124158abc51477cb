"""In-process taxonomy repository (documents are stored in wire form)."""

import threading
from typing import Any

from domain.taxonomy.models import TaxonomyDocument

from .base import TaxonomyRepository


class InMemoryTaxonomyRepository(TaxonomyRepository):
    def __init__(self) -> None:
        self._docs: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()
        self.upsert_count = 0

    def get(self, doc_id: str) -> TaxonomyDocument | None:
        with self._lock:
            data = self._docs.get(doc_id)
        return TaxonomyDocument.from_wire(data) if data is not None else None

    def list_documents(self) -> list[TaxonomyDocument]:
        with self._lock:
            items = list(self._docs.values())
        return [TaxonomyDocument.from_wire(d) for d in items]

    def upsert(self, doc: TaxonomyDocument) -> None:
        with self._lock:
            self._docs[doc.id] = doc.to_wire()
            self.upsert_count += 1
