"""APIRouter registration for the session and survey service."""

from __future__ import annotations

from fastapi import APIRouter

from botaniq.routes.health import router as health_router
from botaniq.routes.sessions import router as sessions_router
from botaniq.routes.survey import router as survey_router

api_router = APIRouter()
api_router.include_router(sessions_router, tags=["Sessions"])
api_router.include_router(survey_router, tags=["Survey"])
api_router.include_router(health_router, tags=["Health"])

__all__ = ["api_router"]
