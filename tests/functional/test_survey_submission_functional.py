"""Functional tests for the survey submission transaction.

Covers scoring, exactly-once completion, full-batch atomicity on invalid
answers, unknown sessions, answer coercion rules and the optimistic guard
that rejects a submission losing a race to a concurrent one.
"""

from __future__ import annotations

import threading

import pytest
from sqlalchemy import text as sql_text
from sqlalchemy.exc import OperationalError

from botaniq.errors import AlreadySubmittedError, InternalError, InvalidSessionError, ValidationError
from botaniq.logic import repository_sessions as repo
from botaniq.logic.accounts import AccountManager
from botaniq.logic.survey_submission import SurveySubmissionEngine
from botaniq.logic.validation import coerce_answer_value


def _rows(engine, table: str, code: str) -> int:
    with engine.connect() as conn:
        return int(
            conn.execute(
                sql_text(f"SELECT COUNT(*) FROM {table} WHERE session_code = :c"), {"c": code}
            ).scalar()
        )


def _answers(engine, code: str) -> dict[str, int]:
    with engine.connect() as conn:
        rows = conn.execute(
            sql_text("SELECT question_id, answer_value FROM survey_answers WHERE session_code = :c"),
            {"c": code},
        ).fetchall()
    return {str(r[0]): int(r[1]) for r in rows}


def _score(engine, code: str):
    with engine.connect() as conn:
        return repo.get_score(conn, code)


@pytest.fixture()
def session_code(accounts) -> str:
    return accounts.create_account("participant", "pw").session_code


def test_total_score_is_sum_of_answers(submissions, engine, session_code):
    result = submissions.submit(session_code, {"q1": 3, "q2": 5, "q3": 0})

    assert result.total_score == 8
    assert _answers(engine, session_code) == {"q1": 3, "q2": 5, "q3": 0}
    assert _score(engine, session_code) == 8


def test_submit_flips_completion(submissions, accounts, session_code):
    submissions.submit(session_code, {"q1": 1})

    assert accounts.login("participant", "pw").survey_completed is True
    status = accounts.session_status(session_code)
    assert status.survey_completed is True
    assert status.total_score == 1


def test_second_submission_is_rejected_and_first_results_kept(submissions, engine, session_code):
    submissions.submit(session_code, {"q1": 2, "q2": 2})

    with pytest.raises(AlreadySubmittedError) as excinfo:
        submissions.submit(session_code, {"q1": 5, "q2": 5, "q3": 5})

    assert excinfo.value.message == "Survey already submitted"
    assert _answers(engine, session_code) == {"q1": 2, "q2": 2}
    assert _score(engine, session_code) == 4


@pytest.mark.parametrize("bad_value", [6, -1, "7", 2.5, "abc", "", None, True, [1], {"v": 1}])
def test_invalid_answer_persists_nothing(submissions, accounts, engine, session_code, bad_value):
    with pytest.raises(ValidationError) as excinfo:
        submissions.submit(session_code, {"q1": 4, "q2": bad_value, "q3": 1})

    assert excinfo.value.message == "Invalid answer for q2"
    assert _rows(engine, "survey_answers", session_code) == 0
    assert _rows(engine, "survey_scores", session_code) == 0
    assert accounts.session_status(session_code).survey_completed is False


def test_failed_attempt_leaves_session_submittable(submissions, engine, session_code):
    with pytest.raises(ValidationError):
        submissions.submit(session_code, {"q1": 9})

    result = submissions.submit(session_code, {"q1": 5, "q2": 4})

    assert result.total_score == 9
    assert _rows(engine, "survey_answers", session_code) == 2


def test_unknown_session_is_invalid_regardless_of_answers(submissions):
    with pytest.raises(InvalidSessionError):
        submissions.submit("NOPE0000", {"q1": 3})
    with pytest.raises(InvalidSessionError):
        submissions.submit("NOPE0000", {"q1": 99})


@pytest.mark.parametrize(
    "code,answers",
    [("", {"q1": 1}), (None, {"q1": 1}), ("ABCD1234", {}), ("ABCD1234", None), ("ABCD1234", [1, 2])],
)
def test_malformed_submission_is_validation_error(submissions, code, answers):
    with pytest.raises(ValidationError) as excinfo:
        submissions.submit(code, answers)
    assert excinfo.value.message == "Invalid survey payload"


@pytest.mark.parametrize(
    "raw,expected",
    [(0, 0), (5, 5), ("3", 3), (" 4 ", 4), (2.0, 2), ("1.0", 1)],
)
def test_answer_coercion_accepts_integral_values(raw, expected):
    assert coerce_answer_value("q", raw) == expected


def test_lost_race_is_rejected_and_rolled_back(engine, monkeypatch):
    manager = AccountManager(engine)
    code = manager.create_account("racer", "pw").session_code

    real_get = repo.get_session_by_code

    def stale_read(conn, session_code, for_update=False):
        # Simulates a competing transaction that completes the session
        # between our read and our conditional update.
        row = real_get(conn, session_code, for_update=for_update)
        conn.execute(
            sql_text("UPDATE sessions SET survey_completed = :t WHERE session_code = :c"),
            {"t": True, "c": session_code},
        )
        return row

    monkeypatch.setattr(repo, "get_session_by_code", stale_read)

    with pytest.raises(AlreadySubmittedError):
        SurveySubmissionEngine(engine).submit(code, {"q1": 3})

    monkeypatch.undo()
    assert _rows(engine, "survey_answers", code) == 0
    assert _rows(engine, "survey_scores", code) == 0
    # The competing update ran inside the rolled-back transaction too
    assert manager.session_status(code).survey_completed is False


def test_datastore_failure_during_submit_is_internal_error(submissions, accounts, engine, session_code, monkeypatch):
    def failing_insert_score(conn, code, total_score):
        raise OperationalError("INSERT INTO survey_scores", {}, Exception("disk I/O error"))

    monkeypatch.setattr(repo, "insert_score", failing_insert_score)

    with pytest.raises(InternalError) as excinfo:
        submissions.submit(session_code, {"q1": 2, "q2": 3})

    assert excinfo.value.message == "Server database error"
    monkeypatch.undo()
    assert _rows(engine, "survey_answers", session_code) == 0
    assert _rows(engine, "survey_scores", session_code) == 0
    assert accounts.session_status(session_code).survey_completed is False


def test_concurrent_submissions_on_single_connection_engine_stay_atomic(engine, monkeypatch):
    manager = AccountManager(engine)
    code_a = manager.create_account("first", "pw").session_code
    code_b = manager.create_account("second", "pw").session_code
    paused = threading.Event()
    release = threading.Event()
    real_insert_score = repo.insert_score

    def slow_insert_score(conn, code, total_score):
        # Hold the first submission open after its answers are written
        if code == code_a:
            paused.set()
            release.wait(timeout=5)
        real_insert_score(conn, code, total_score)

    monkeypatch.setattr(repo, "insert_score", slow_insert_score)
    submitter = SurveySubmissionEngine(engine)
    failures: dict[str, Exception] = {}

    def run(name, code, answers):
        try:
            submitter.submit(code, answers)
        except Exception as exc:
            failures[name] = exc

    first = threading.Thread(target=run, args=("first", code_a, {"q1": 3, "q2": 4}))
    second = threading.Thread(target=run, args=("second", code_b, {"q1": 9}))
    first.start()
    assert paused.wait(timeout=5)
    second.start()
    second.join(timeout=0.5)
    # The second transaction waits for the first instead of sharing its connection
    assert second.is_alive()
    release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    monkeypatch.undo()
    assert "first" not in failures
    assert isinstance(failures.get("second"), ValidationError)
    assert _answers(engine, code_a) == {"q1": 3, "q2": 4}
    assert _score(engine, code_a) == 7
    assert manager.session_status(code_a).survey_completed is True
    assert _rows(engine, "survey_answers", code_b) == 0
    assert manager.session_status(code_b).survey_completed is False


def test_alice_scenario(engine):
    manager = AccountManager(engine, code_factory=lambda: "ABCD1234")

    created = manager.create_account("alice", "pw1")
    assert created.session_code == "ABCD1234"
    assert created.survey_completed is False

    result = SurveySubmissionEngine(engine).submit("ABCD1234", {"q1": 5, "q2": 4})
    assert result.total_score == 9

    again = manager.login("alice", "pw1")
    assert again.session_code == "ABCD1234"
    assert again.survey_completed is True
