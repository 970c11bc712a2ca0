"""Account/session lifecycle: signup, login and completion status.

The manager receives its datastore handle explicitly; pass an Engine bound
to an in-memory SQLite database to exercise it without PostgreSQL.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from botaniq.db.base import connect, transaction
from botaniq.errors import (
    AuthError,
    ConflictError,
    InternalError,
    InvalidSessionError,
    NotFoundError,
    ValidationError,
)
from botaniq.logic import repository_sessions as repo
from botaniq.logic.validation import parse_credentials
from botaniq.models.session import SessionInfo

logger = logging.getLogger(__name__)

SESSION_CODE_LENGTH = 8


def generate_session_code() -> str:
    """Return an 8-character uppercase alphanumeric code drawn from uuid4."""
    return uuid.uuid4().hex[:SESSION_CODE_LENGTH].upper()


class AccountManager:
    def __init__(self, engine: Engine, code_factory: Callable[[], str] = generate_session_code) -> None:
        self.engine = engine
        self.code_factory = code_factory

    def create_account(self, username: str, password: str) -> SessionInfo:
        creds = parse_credentials({"username": username, "password": password})
        session_code = self.code_factory()
        try:
            with transaction(self.engine, "account.create") as conn:
                repo.insert_session(conn, creds.username, creds.password, session_code)
                row = repo.get_session_by_code(conn, session_code)
        except IntegrityError as exc:
            # Unique violation on username (or, rarely, a colliding session code)
            logger.info("account.create_conflict username=%s", creds.username)
            raise ConflictError("Username already taken") from exc
        except SQLAlchemyError as exc:
            logger.error("account.create_failed", exc_info=True)
            raise InternalError() from exc
        if row is None:
            raise InternalError()
        logger.info("account.created session_code=%s", row["session_code"])
        return SessionInfo(session_code=row["session_code"], survey_completed=row["survey_completed"])

    def login(self, username: str, password: str) -> SessionInfo:
        creds = parse_credentials({"username": username, "password": password})
        try:
            with connect(self.engine) as conn:
                row = repo.get_session_by_username(conn, creds.username)
        except SQLAlchemyError as exc:
            logger.error("account.login_failed", exc_info=True)
            raise InternalError() from exc
        if row is None:
            raise NotFoundError("User not found")
        # Stored verbatim; no hashing in this service
        if row["password_hash"] != creds.password:
            logger.info("account.login_rejected session_code=%s", row["session_code"])
            raise AuthError("Incorrect password")
        return SessionInfo(session_code=row["session_code"], survey_completed=row["survey_completed"])

    def session_status(self, session_code: str) -> SessionInfo:
        """Report whether the survey for `session_code` is already completed."""
        if not isinstance(session_code, str) or not session_code.strip():
            raise ValidationError("Missing session code")
        code = session_code.strip()
        try:
            with connect(self.engine) as conn:
                row = repo.get_session_by_code(conn, code)
                total = repo.get_score(conn, code) if row and row["survey_completed"] else None
        except SQLAlchemyError as exc:
            logger.error("account.status_failed", exc_info=True)
            raise InternalError() from exc
        if row is None:
            raise InvalidSessionError("Invalid session code")
        return SessionInfo(
            session_code=row["session_code"],
            survey_completed=row["survey_completed"],
            total_score=total,
        )


__all__ = ["AccountManager", "generate_session_code", "SESSION_CODE_LENGTH"]
