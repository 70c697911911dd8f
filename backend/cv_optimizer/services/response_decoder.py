"""
Response Decoder — pull one AnalysisResult out of a raw model completion.

The model is told to answer with bare JSON but regularly wraps it in prose or
markdown code fences. Decoding:
  • strip every ``` fence marker (with or without a language tag)
  • slice from the first "{" to the last "}" inclusive
  • parse as JSON, then validate the shape against AnalysisResult

Stray braces outside the real object (e.g. an example snippet before it) will
mis-bracket the slice. That case is not detected.
"""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from cv_optimizer.exceptions import MalformedJsonError, NoJsonFoundError, SchemaMismatchError
from cv_optimizer.models.analysis_models import AnalysisResult

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"```[A-Za-z0-9_+-]*")


def extract_json_object(raw_text: str | None) -> dict:
    """Return the parsed JSON object embedded in ``raw_text``."""
    cleaned = _CODE_FENCE.sub("", raw_text or "").strip()

    first = cleaned.find("{")
    last = cleaned.rfind("}")
    if first == -1 or last == -1 or last <= first:
        logger.warning(f"No JSON object in model response ({len(cleaned)} chars)")
        raise NoJsonFoundError("No JSON object found in the model response")

    try:
        return json.loads(cleaned[first : last + 1])
    except json.JSONDecodeError as e:
        logger.warning(f"Malformed JSON in model response: {e.msg} at pos {e.pos}")
        raise MalformedJsonError(f"Model returned malformed JSON: {e}") from e


def decode(raw_text: str | None) -> AnalysisResult:
    """Decode a raw analysis completion into a validated AnalysisResult."""
    data = extract_json_object(raw_text)

    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        logger.warning(f"Model response failed schema validation: {fields}")
        raise SchemaMismatchError(
            f"Model response is missing or has invalid fields: {', '.join(fields)}",
            fields=fields,
        ) from e
