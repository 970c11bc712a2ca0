"""Error taxonomy for the session and survey service.

Each error carries the HTTP status and the user-facing message that the API
boundary renders as ``{"success": false, "message": ...}``. Business rule
violations are raised by `botaniq/logic/` and never crash the process;
`InternalError` wraps datastore failures and hides their detail from callers.
"""

from __future__ import annotations


class SurveyServiceError(Exception):
    status: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(SurveyServiceError):
    status = 400
    default_message = "Invalid request payload"


class ConflictError(SurveyServiceError):
    status = 400
    default_message = "Username already taken"


class AuthError(SurveyServiceError):
    status = 401
    default_message = "Incorrect password"


class NotFoundError(SurveyServiceError):
    status = 401
    default_message = "User not found"


class InvalidSessionError(SurveyServiceError):
    status = 400
    default_message = "Invalid session code"


class AlreadySubmittedError(SurveyServiceError):
    status = 400
    default_message = "Survey already submitted"


class InternalError(SurveyServiceError):
    """Datastore or connectivity failure; the message shown to callers is generic."""

    status = 500
    default_message = "Server database error"


__all__ = [
    "SurveyServiceError",
    "ValidationError",
    "ConflictError",
    "AuthError",
    "NotFoundError",
    "InvalidSessionError",
    "AlreadySubmittedError",
    "InternalError",
]
