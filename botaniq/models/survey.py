"""Pydantic models for survey submission payloads and results.

Answer values stay untyped here; coercion to an integer in the closed
range is done per question by the submission engine so the error can name
the offending question.
"""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

ANSWER_MIN = 0
ANSWER_MAX = 5
QUESTION_ID_MAX_LENGTH = 64


class SurveySubmission(BaseModel):
    session_code: str = Field(min_length=1)
    answers: Dict[str, Any]

    @field_validator("answers")
    @classmethod
    def answers_must_be_non_empty(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        if not v:
            raise ValueError("answers must contain at least one question")
        for question_id in v:
            if not question_id or len(question_id) > QUESTION_ID_MAX_LENGTH:
                raise ValueError(f"question id must be 1..{QUESTION_ID_MAX_LENGTH} characters")
        return v


class SubmissionResult(BaseModel):
    total_score: int


class SubmissionEnvelope(BaseModel):
    success: bool = True
    total_score: int
    message: str = "Survey submitted successfully"


__all__ = [
    "ANSWER_MIN",
    "ANSWER_MAX",
    "QUESTION_ID_MAX_LENGTH",
    "SurveySubmission",
    "SubmissionResult",
    "SubmissionEnvelope",
]
