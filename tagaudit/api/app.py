"""FastAPI application factory.

Routers
-------
    /api/analyze  fetch a page and report its script/style/image resources
    /health       liveness probe

Static front end
----------------
When ``settings.static_dir`` points at an existing directory, its files are
served from ``/`` and any other GET falls back to its ``index.html`` so the
single-page front end can handle the route.
"""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from tagaudit.config import settings
from tagaudit.log import configure_logging

from tagaudit.api.routers import analyze as analyze_router


def _mount_static_site(app: FastAPI, static_dir: Path) -> None:
    root = static_dir.resolve()
    index = root / "index.html"

    @app.get("/{full_path:path}", include_in_schema=False)
    def static_site(full_path: str) -> FileResponse:
        candidate = (root / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(root):
            return FileResponse(candidate)
        if not index.is_file():
            raise HTTPException(status_code=404, detail="Not Found")
        return FileResponse(index)


def create_app(static_dir: Path | None = None) -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    configure_logging()

    app = FastAPI(
        title="Tag Audit API",
        description=(
            "Fetches a web page, lists the scripts, stylesheets and images it "
            "loads, estimates their sizes and splits them into first- and "
            "third-party resources."
        ),
        version="0.1.0",
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(analyze_router.router, prefix="/api", tags=["analyze"])

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    # Catch-all route, so it must be registered last.
    static_dir = static_dir if static_dir is not None else settings.static_dir
    if static_dir is not None and static_dir.is_dir():
        _mount_static_site(app, static_dir)

    return app


# Module-level instance used by uvicorn:
#   uvicorn tagaudit.api.app:app --reload
app = create_app()
