"""Failure envelopes and global exception handlers.

Every API failure is rendered as ``{"success": false, "message": ...}`` with
the status carried by the error. Datastore and unexpected errors are logged
here and reach the caller only as a generic message.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from botaniq.errors import InternalError, SurveyServiceError

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Internal server error"


def failure_response(status: int, message: str) -> JSONResponse:
    return JSONResponse({"success": False, "message": message}, status_code=status)


async def handle_service_error(request: Request, exc: SurveyServiceError) -> JSONResponse:
    if isinstance(exc, InternalError):
        logger.error(
            "service_error path=%s cause=%r",
            request.url.path,
            exc.__cause__,
        )
    else:
        logger.info("request_rejected path=%s status=%s message=%s", request.url.path, exc.status, exc.message)
    return failure_response(exc.status, exc.message)


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(
        {"success": False, "message": message},
        status_code=int(exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Body shapes are validated inside the routes; this covers path/query params
    return failure_response(400, "Invalid request")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return failure_response(500, GENERIC_FAILURE)


__all__ = [
    "GENERIC_FAILURE",
    "failure_response",
    "handle_service_error",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
