"""Account creation, login and session status endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from botaniq.http.dependencies import get_account_manager, read_json_body
from botaniq.logic.accounts import AccountManager
from botaniq.logic.validation import MISSING_CREDENTIALS, parse_credentials
from botaniq.models.session import SessionEnvelope, SessionStatusEnvelope

router = APIRouter(prefix="/api/session")


@router.post(
    "/create",
    summary="Create an account and issue its session code",
    status_code=201,
    response_model=SessionEnvelope,
)
async def create_account(request: Request, manager: AccountManager = Depends(get_account_manager)):
    payload = await read_json_body(request, MISSING_CREDENTIALS)
    creds = parse_credentials(payload)
    info = await run_in_threadpool(manager.create_account, creds.username, creds.password)
    body = SessionEnvelope(session_code=info.session_code, survey_completed=info.survey_completed)
    return JSONResponse(body.model_dump(), status_code=201)


@router.post(
    "/login",
    summary="Log in and resume the existing session",
    response_model=SessionEnvelope,
)
async def login(request: Request, manager: AccountManager = Depends(get_account_manager)):
    payload = await read_json_body(request, MISSING_CREDENTIALS)
    creds = parse_credentials(payload)
    info = await run_in_threadpool(manager.login, creds.username, creds.password)
    return SessionEnvelope(session_code=info.session_code, survey_completed=info.survey_completed)


@router.get(
    "/{session_code}",
    summary="Report whether the session's survey is completed",
    response_model=SessionStatusEnvelope,
)
def session_status(session_code: str, manager: AccountManager = Depends(get_account_manager)):
    info = manager.session_status(session_code)
    return SessionStatusEnvelope(
        session_code=info.session_code,
        survey_completed=info.survey_completed,
        total_score=info.total_score,
    )


__all__ = ["router", "create_account", "login", "session_status"]
