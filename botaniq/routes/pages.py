"""HTML page routes served from the static directory.

`StaticFiles(html=True)` only resolves directories to `index.html`, so the
named pages get explicit extension-less routes.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse

PAGES = ("orientation", "survey")


def _page_endpoint(page: Path):
    def serve_page() -> FileResponse:
        return FileResponse(page, media_type="text/html")

    return serve_page


def build_pages_router(static_dir: Path) -> APIRouter:
    """Return a router exposing `/<name>` for each `<name>.html` present."""
    router = APIRouter()
    for name in PAGES:
        page = static_dir / f"{name}.html"
        if page.is_file():
            router.add_api_route(f"/{name}", _page_endpoint(page), methods=["GET"], include_in_schema=False)
    return router


__all__ = ["build_pages_router", "PAGES"]
