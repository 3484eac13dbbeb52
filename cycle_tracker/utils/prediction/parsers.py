"""
Parsing functions for prediction service responses.
"""
import json
import math
import re
from datetime import datetime
from numbers import Number
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from cycle_tracker.models.prediction import Prediction
from cycle_tracker.services.constants import (
    MAX_INSIGHTS,
    MAX_TIPS,
    DEFAULT_CONFIDENCE,
    MIN_CONFIDENCE,
    MAX_CONFIDENCE
)
from cycle_tracker.services.exceptions import (
    EmptyResponseError,
    InvalidJSONError,
    InvalidPredictionFormatError
)

THINK_BLOCK = re.compile(r"<think>.*?</think>", re.DOTALL)
CODE_FENCE = re.compile(r"```(?:json)?\s*")

REQUIRED_FIELDS = ("nextPeriodDate", "predictedCycleLength")


def extract_content(payload: Any) -> str:
    """
    Find the completion text in a chat completion response.

    Tries choices[0].message.content, then choices[0].text, then output.

    Args:
        payload: Decoded JSON response body

    Returns:
        Completion text, or an empty string if none is present
    """
    if not isinstance(payload, dict):
        return ""

    choices = payload.get("choices") or []
    first = choices[0] if isinstance(choices, list) and choices else {}
    if not isinstance(first, dict):
        first = {}
    message = first.get("message") if isinstance(first.get("message"), dict) else {}

    for candidate in (message.get("content"), first.get("text"), payload.get("output")):
        if isinstance(candidate, str) and candidate:
            return candidate
    return ""


def clean_response(text: str) -> str:
    """
    Strip reasoning blocks and markdown code fences from completion text.

    Example:
        >>> clean_response('<think>hmm</think>```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    cleaned = THINK_BLOCK.sub("", text).strip()
    return CODE_FENCE.sub("", cleaned).strip()


def _to_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, Number):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _clamp_confidence(value: Any) -> float:
    number = _to_number(value)
    if number is None:
        return DEFAULT_CONFIDENCE
    return min(max(number, MIN_CONFIDENCE), MAX_CONFIDENCE)


def _string_list(value: Any, limit: int) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value[:limit]]


def parse_prediction(content: str, data_hash: str, generated_at: datetime) -> Prediction:
    """
    Parse completion text into a Prediction.

    Args:
        content: Raw completion text
        data_hash: Fingerprint of the cycle data the request was built from
        generated_at: Timestamp to record on the prediction

    Returns:
        Validated Prediction

    Raises:
        EmptyResponseError: If nothing is left after cleaning
        InvalidJSONError: If the text is not a JSON object
        InvalidPredictionFormatError: If required fields are missing or invalid
    """
    cleaned = clean_response(content)
    if len(cleaned) < 5:
        raise EmptyResponseError("Model returned empty content after cleaning")

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        raise InvalidJSONError("Invalid JSON from model")

    if not isinstance(parsed, dict):
        raise InvalidJSONError("Invalid JSON from model: expected an object")

    missing = [
        name for name in REQUIRED_FIELDS
        if parsed.get(name) is None or parsed.get(name) == ""
    ]
    if missing:
        raise InvalidPredictionFormatError(
            f"Invalid prediction format: missing required fields ({', '.join(missing)})"
        )

    cycle_length = _to_number(parsed["predictedCycleLength"])
    if cycle_length is None:
        raise InvalidPredictionFormatError(
            "Invalid prediction format: predictedCycleLength is not a number"
        )

    fields: Dict[str, Any] = {
        "next_period_date": parsed["nextPeriodDate"],
        "predicted_cycle_length": int(math.floor(cycle_length + 0.5)),
        "fertile_window_start": parsed.get("fertileWindowStart") or None,
        "fertile_window_end": parsed.get("fertileWindowEnd") or None,
        "insights": _string_list(parsed.get("insights"), MAX_INSIGHTS),
        "tips": _string_list(parsed.get("tips"), MAX_TIPS),
        "confidence": _clamp_confidence(parsed.get("confidence")),
        "generated_at": generated_at,
        "data_hash": data_hash
    }

    try:
        return Prediction(**fields)
    except ValidationError as e:
        invalid = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
        raise InvalidPredictionFormatError(
            f"Invalid prediction format: invalid value for {', '.join(invalid)}"
        )
