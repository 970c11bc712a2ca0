"""Survey submission endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool

from botaniq.http.dependencies import get_submission_engine, read_json_body
from botaniq.logic.survey_submission import SurveySubmissionEngine
from botaniq.logic.validation import INVALID_SURVEY_PAYLOAD, parse_submission
from botaniq.models.survey import SubmissionEnvelope

router = APIRouter(prefix="/api/survey")


@router.post(
    "/submit",
    summary="Submit, score and complete a session's survey",
    response_model=SubmissionEnvelope,
)
async def submit_survey(request: Request, engine: SurveySubmissionEngine = Depends(get_submission_engine)):
    payload = await read_json_body(request, INVALID_SURVEY_PAYLOAD)
    submission = parse_submission(payload)
    result = await run_in_threadpool(engine.submit, submission.session_code, submission.answers)
    return SubmissionEnvelope(total_score=result.total_score)


__all__ = ["router", "submit_survey"]
