"""Pydantic models for account/session payloads and results."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class AccountCredentials(BaseModel):
    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)


class SessionInfo(BaseModel):
    session_code: str
    survey_completed: bool
    # Only populated by status lookups on completed sessions
    total_score: Optional[int] = None


class SessionEnvelope(BaseModel):
    success: bool = True
    session_code: str
    survey_completed: bool


class SessionStatusEnvelope(SessionEnvelope):
    total_score: Optional[int] = None


__all__ = [
    "AccountCredentials",
    "SessionInfo",
    "SessionEnvelope",
    "SessionStatusEnvelope",
]
