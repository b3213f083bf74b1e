"""
Structured Review Extraction

Turns raw model output into the {"reviews": [...]} contract, scraping a
JSON object out of surrounding prose when the model did not answer with
bare JSON.
"""

import json
import logging
import re
from typing import Any, List

from pydantic import ValidationError

from ..models.review import AIReviewItem, AIReviewResponse


logger = logging.getLogger(__name__)

CODE_FENCE_PATTERN = re.compile(r'```(?:json)?\s*(.*?)```', re.DOTALL | re.IGNORECASE)
JSON_OBJECT_PATTERN = re.compile(r'\{.*\}', re.DOTALL)


class ParseError(ValueError):
    """Model output does not hold a valid reviews structure"""


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    fence_match = CODE_FENCE_PATTERN.search(text)
    if fence_match:
        try:
            return json.loads(fence_match.group(1).strip())
        except json.JSONDecodeError:
            pass

    object_match = JSON_OBJECT_PATTERN.search(text)
    if object_match:
        try:
            return json.loads(object_match.group(0))
        except json.JSONDecodeError:
            pass

    raise ParseError("No JSON object found in model output")


def extract_structured_reviews(text: str) -> List[AIReviewItem]:
    """
    Extract review items from model output.

    Args:
        text: Raw model output

    Returns:
        List of AIReviewItem (empty when the model found no issues)

    Raises:
        ParseError: If no valid {"reviews": [...]} object can be recovered
    """
    if text is None or not text.strip():
        raise ParseError("Empty model output")

    data = _load_json(text.strip())

    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object, got {type(data).__name__}")

    try:
        response = AIReviewResponse.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"Invalid reviews structure: {e.error_count()} errors") from e

    logger.debug(f"Extracted {len(response.reviews)} review items")
    return response.reviews
