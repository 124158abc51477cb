"""Turn a model reply into a typed AnalysisResult."""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from domain.errors import ExtractionParseError
from domain.schemas import AnalysisResult
from domain.taxonomy.models import Proposal

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```[A-Za-z0-9_-]*\s*\n(?P<body>.*?)\n?\s*```\s*$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove a surrounding Markdown code fence (```json ... ```), if any."""
    m = _FENCE_RE.match(text)
    return m.group("body") if m else text.strip()


def _load_json(text: str) -> Any:
    body = strip_code_fence(text)
    if not body:
        raise ExtractionParseError("Model reply is empty")
    try:
        return json.loads(body)
    except json.JSONDecodeError as e:
        raise ExtractionParseError(
            "Model reply is not valid JSON",
            {"error": str(e), "preview": body[:200]},
        ) from e


def parse_proposals(raw: Any) -> list[Proposal]:
    """
    Decode ``proposals.taxonomy`` items.

    A malformed item is dropped with a warning; a malformed container is a parse error.
    """
    if raw is None:
        return []
    if not isinstance(raw, dict):
        raise ExtractionParseError("'proposals' must be a JSON object")

    items = raw.get("taxonomy")
    if items is None:
        return []
    if not isinstance(items, list):
        raise ExtractionParseError("'proposals.taxonomy' must be a JSON array")

    proposals: list[Proposal] = []
    for i, item in enumerate(items):
        try:
            proposals.append(Proposal.from_wire(item))
        except (ValueError, ValidationError) as e:
            logger.warning("Dropping malformed taxonomy proposal #%d: %s", i, e)
    return proposals


def parse_analysis_envelope(data: Any) -> AnalysisResult:
    """
    Map a decoded reply envelope onto AnalysisResult.

    Missing achievements, practices and proposals default to empty lists, missing
    scores to 0.0 and a missing timeframe to None.

    Raises:
        ExtractionParseError: If the top level is not an object, ``analysis`` is
            missing or not an object, or a field fails validation.
    """
    if not isinstance(data, dict):
        raise ExtractionParseError(f"Model reply must be a JSON object, got {type(data).__name__}")

    analysis = data.get("analysis")
    if not isinstance(analysis, dict):
        raise ExtractionParseError("Model reply is missing the 'analysis' object")

    proposals = parse_proposals(data.get("proposals"))

    fields = {k: v for k, v in analysis.items() if k != "proposals"}
    try:
        result = AnalysisResult.model_validate(fields)
    except ValidationError as e:
        raise ExtractionParseError(
            "Model reply does not match the analysis schema",
            {"errors": e.errors(include_url=False, include_context=False)},
        ) from e

    result.proposals = proposals
    return result


def parse_extraction_response(payload: str | dict[str, Any]) -> AnalysisResult:
    """
    Parse a model reply (raw text or already-decoded JSON) into an AnalysisResult.

    No partial result is produced: any envelope-level problem raises.

    Raises:
        ExtractionParseError: On invalid JSON or an unexpected envelope shape.
    """
    data = _load_json(payload) if isinstance(payload, str) else payload
    result = parse_analysis_envelope(data)
    logger.debug(
        "Parsed reply: %d achievements, %d practices, %d proposals",
        len(result.achievements),
        len(result.practices),
        len(result.proposals),
    )
    return result
