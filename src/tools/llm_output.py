"""Helpers that turn raw model text into a StatusCodeExplanation."""

import json
import logging
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError

from src.models.status_code_models import StatusCodeExplanation

logger = logging.getLogger(__name__)

_OPENING_FENCE = re.compile(r"^```[\w-]*[ \t]*\r?\n?")
_CLOSING_FENCE = re.compile(r"\r?\n?```$")


def strip_code_fences(text: str) -> str:
    """Remove a leading ``` / ```json fence and a trailing ``` fence."""
    text = text.strip()
    text = _OPENING_FENCE.sub("", text, count=1)
    text = _CLOSING_FENCE.sub("", text, count=1)
    return text.strip()


def extract_json_object(text: str) -> Optional[Dict[str, Any]]:
    """Parse a JSON object out of model output.

    Tries the fence-stripped text first, then the outermost {...} span for
    answers that wrap the object in prose.
    """
    if not text:
        return None

    cleaned = strip_code_fences(text)
    candidates = [cleaned]
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start != -1 and end > start and (start, end) != (0, len(cleaned) - 1):
        candidates.append(cleaned[start:end + 1])

    for candidate in candidates:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(parsed, dict):
            return parsed
    return None


def parse_explanation(text: str, code: int) -> Optional[StatusCodeExplanation]:
    """Build an explanation from model output, or None if the output is unusable.

    The code is always set to the requested one, whatever the model answered.
    """
    data = extract_json_object(text)
    if data is None:
        logger.warning(f"Model output for status code {code} did not contain a JSON object")
        return None

    data["code"] = code
    try:
        return StatusCodeExplanation.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Model output for status code {code} failed validation: {e}")
        return None
