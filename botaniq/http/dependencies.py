"""FastAPI dependencies wiring the datastore handle into the logic layer."""

from __future__ import annotations

import json
from typing import Any

from fastapi import Request
from sqlalchemy.engine import Engine

from botaniq.errors import ValidationError
from botaniq.logic.accounts import AccountManager
from botaniq.logic.survey_submission import SurveySubmissionEngine


def get_datastore(request: Request) -> Engine:
    return request.app.state.engine


def get_account_manager(request: Request) -> AccountManager:
    return AccountManager(get_datastore(request))


def get_submission_engine(request: Request) -> SurveySubmissionEngine:
    return SurveySubmissionEngine(get_datastore(request))


async def read_json_body(request: Request, invalid_message: str) -> Any:
    """Decode the request body as JSON, mapping malformed input to ValidationError."""
    raw = await request.body()
    if not raw:
        raise ValidationError(invalid_message)
    try:
        return json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError(invalid_message) from exc


__all__ = [
    "get_datastore",
    "get_account_manager",
    "get_submission_engine",
    "read_json_body",
]
