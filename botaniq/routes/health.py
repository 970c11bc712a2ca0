"""Liveness endpoint with a datastore probe."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from botaniq.db.base import ping
from botaniq.http.dependencies import get_datastore

router = APIRouter()


@router.get("/health", summary="Service and datastore health")
def health(engine=Depends(get_datastore)):
    if ping(engine):
        return {"status": "ok", "db": True}
    return JSONResponse({"status": "degraded", "db": False}, status_code=503)


__all__ = ["router", "health"]
