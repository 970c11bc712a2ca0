"""FastAPI application package for the BOTANIQ session and survey service.

This package exposes a small FastAPI application factory. It wires only
cross-cutting concerns (request-id middleware and failure envelopes) and
mounts the API routers. Business logic lives in `botaniq/logic/` and route
handlers in `botaniq/routes/`.
"""

from __future__ import annotations

from botaniq.main import create_app

__all__ = ["create_app"]
