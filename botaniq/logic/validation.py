"""Payload validation for account and survey requests.

Schema checks run before any datastore work begins. Pydantic failures are
translated into the service's `ValidationError` with the message the API
contract exposes; per-answer coercion lives here too so the submission
engine can name the offending question.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from botaniq.errors import ValidationError
from botaniq.models.session import AccountCredentials
from botaniq.models.survey import ANSWER_MAX, ANSWER_MIN, SurveySubmission

MISSING_CREDENTIALS = "Missing username or password"
INVALID_SURVEY_PAYLOAD = "Invalid survey payload"


def parse_credentials(payload: Any) -> AccountCredentials:
    if not isinstance(payload, dict):
        raise ValidationError(MISSING_CREDENTIALS)
    try:
        return AccountCredentials.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(MISSING_CREDENTIALS) from exc


def parse_submission(payload: Any) -> SurveySubmission:
    if not isinstance(payload, dict):
        raise ValidationError(INVALID_SURVEY_PAYLOAD)
    try:
        return SurveySubmission.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(INVALID_SURVEY_PAYLOAD) from exc


def _to_int(raw: Any) -> int | None:
    # bool is an int subclass; true/false are not answers
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) and raw.is_integer() else None
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            as_float = float(text)
        except ValueError:
            return None
        return int(as_float) if math.isfinite(as_float) and as_float.is_integer() else None
    return None


def coerce_answer_value(question_id: str, raw: Any) -> int:
    """Return `raw` as an integer answer in the closed range, or raise.

    Accepts ints, integral floats and strings holding either; everything
    else, and any value outside the range, is rejected.
    """
    value = _to_int(raw)
    if value is None or value < ANSWER_MIN or value > ANSWER_MAX:
        raise ValidationError(f"Invalid answer for {question_id}")
    return value


__all__ = [
    "MISSING_CREDENTIALS",
    "INVALID_SURVEY_PAYLOAD",
    "parse_credentials",
    "parse_submission",
    "coerce_answer_value",
]
