"""Survey submission: validate, score and persist a batch exactly once.

A submission is one transaction. The session row is read (row-locked on
PostgreSQL), answers are coerced and summed, then answers, score and the
completion flag are written together. The flag flip is conditional on the
flag still being false, so two racing submissions cannot both commit. Any
failure rolls everything back; a failed attempt leaves no rows behind and
the session still open.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from botaniq.db.base import transaction
from botaniq.errors import AlreadySubmittedError, InternalError, InvalidSessionError
from botaniq.logic import repository_sessions as repo
from botaniq.logic.validation import coerce_answer_value, parse_submission
from botaniq.models.survey import SubmissionResult

logger = logging.getLogger(__name__)


class SurveySubmissionEngine:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def submit(self, session_code: str, answers: Mapping[str, Any]) -> SubmissionResult:
        submission = parse_submission({"session_code": session_code, "answers": answers})
        code = submission.session_code
        try:
            with transaction(self.engine, "survey.submit") as conn:
                session = repo.get_session_by_code(conn, code, for_update=True)
                if session is None:
                    raise InvalidSessionError("Invalid session code")
                if session["survey_completed"]:
                    raise AlreadySubmittedError("Survey already submitted")

                validated: list[tuple[str, int]] = []
                total_score = 0
                for question_id, raw_value in submission.answers.items():
                    value = coerce_answer_value(question_id, raw_value)
                    total_score += value
                    validated.append((question_id, value))

                repo.insert_answers(conn, code, validated)
                repo.insert_score(conn, code, total_score)
                if repo.mark_completed(conn, code) != 1:
                    # Another submission completed this session first
                    raise AlreadySubmittedError("Survey already submitted")
        except IntegrityError as exc:
            # Score/answer primary key hit: a concurrent submission won the race
            logger.info("survey.submit_conflict session_code=%s", code)
            raise AlreadySubmittedError("Survey already submitted") from exc
        except SQLAlchemyError as exc:
            logger.error("survey.submit_failed session_code=%s", code, exc_info=True)
            raise InternalError() from exc

        logger.info(
            "survey.submitted session_code=%s answers=%s total_score=%s",
            code,
            len(validated),
            total_score,
        )
        return SubmissionResult(total_score=total_score)


__all__ = ["SurveySubmissionEngine"]
