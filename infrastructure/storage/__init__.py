"""
Document storage: repository interfaces and JSON-file / in-memory implementations.
"""

from infrastructure.storage.base import AnalysisRepository, TaxonomyRepository, TranscriptRepository
from infrastructure.storage.json_files import (
    JsonFileAnalysisRepository,
    JsonFileTaxonomyRepository,
    JsonFileTranscriptRepository,
    validate_document_id,
)
from infrastructure.storage.memory import InMemoryTaxonomyRepository

__all__ = [
    "TaxonomyRepository",
    "AnalysisRepository",
    "TranscriptRepository",
    "JsonFileTaxonomyRepository",
    "JsonFileAnalysisRepository",
    "JsonFileTranscriptRepository",
    "InMemoryTaxonomyRepository",
    "validate_document_id",
]
