"""Session, answer and score data access helpers.

Encapsulates the SQL for the three survey tables to keep the account and
submission components free of inline statements. Every helper runs on the
caller's Connection so it joins the caller's transaction.
"""

from __future__ import annotations

from typing import Iterable, Mapping

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection


def _session_row(row: Mapping | None) -> dict | None:
    if row is None:
        return None
    return {
        "session_code": str(row["session_code"]),
        "username": str(row["username"]),
        "password_hash": str(row["password_hash"]),
        "survey_completed": bool(row["survey_completed"]),
    }


def insert_session(conn: Connection, username: str, password: str, session_code: str) -> None:
    conn.execute(
        sql_text(
            """
            INSERT INTO sessions (username, password_hash, session_code, survey_completed)
            VALUES (:username, :password, :code, :completed)
            """
        ),
        {"username": username, "password": password, "code": session_code, "completed": False},
    )


def get_session_by_username(conn: Connection, username: str) -> dict | None:
    row = conn.execute(
        sql_text(
            "SELECT session_code, username, password_hash, survey_completed "
            "FROM sessions WHERE username = :username"
        ),
        {"username": username},
    ).mappings().fetchone()
    return _session_row(row)


def get_session_by_code(conn: Connection, session_code: str, for_update: bool = False) -> dict | None:
    """Fetch a session row; `for_update` row-locks it where the dialect supports it."""
    stmt = (
        "SELECT session_code, username, password_hash, survey_completed "
        "FROM sessions WHERE session_code = :code"
    )
    # SQLite serialises writers at the database level and has no FOR UPDATE
    if for_update and conn.dialect.name != "sqlite":
        stmt += " FOR UPDATE"
    row = conn.execute(sql_text(stmt), {"code": session_code}).mappings().fetchone()
    return _session_row(row)


def insert_answers(conn: Connection, session_code: str, answers: Iterable[tuple[str, int]]) -> None:
    params = [
        {"code": session_code, "qid": question_id, "value": value}
        for question_id, value in answers
    ]
    if not params:
        return
    conn.execute(
        sql_text(
            """
            INSERT INTO survey_answers (session_code, question_id, answer_value)
            VALUES (:code, :qid, :value)
            """
        ),
        params,
    )


def insert_score(conn: Connection, session_code: str, total_score: int) -> None:
    conn.execute(
        sql_text("INSERT INTO survey_scores (session_code, total_score) VALUES (:code, :total)"),
        {"code": session_code, "total": total_score},
    )


def mark_completed(conn: Connection, session_code: str) -> int:
    """Flip survey_completed only if it is still false; return rows affected."""
    result = conn.execute(
        sql_text(
            """
            UPDATE sessions
            SET survey_completed = :done
            WHERE session_code = :code AND survey_completed = :pending
            """
        ),
        {"done": True, "pending": False, "code": session_code},
    )
    return int(result.rowcount or 0)


def get_score(conn: Connection, session_code: str) -> int | None:
    row = conn.execute(
        sql_text("SELECT total_score FROM survey_scores WHERE session_code = :code"),
        {"code": session_code},
    ).fetchone()
    return int(row[0]) if row is not None else None


__all__ = [
    "insert_session",
    "get_session_by_username",
    "get_session_by_code",
    "insert_answers",
    "insert_score",
    "mark_completed",
    "get_score",
]
