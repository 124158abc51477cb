"""Parsing of language-model replies into typed analysis results."""

from domain.extraction.parser import parse_analysis_envelope, parse_extraction_response, strip_code_fence

__all__ = [
    "parse_extraction_response",
    "parse_analysis_envelope",
    "strip_code_fence",
]
