"""FastAPI application factory for the aisast dashboard API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from aisast import __version__
from aisast.config import AisastConfig
from aisast.errors import AisastError, InputError
from aisast.pipeline import ScanPipeline
from aisast.session.store import SessionStore
from aisast.sonarqube import SonarQubeClient

logger = logging.getLogger(__name__)


def create_app(
    config: AisastConfig | None = None,
    pipeline: ScanPipeline | None = None,
    store: SessionStore | None = None,
    sonarqube: SonarQubeClient | None = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    config = config or AisastConfig.load()

    app = FastAPI(
        title="aisast",
        version=__version__,
        docs_url="/api/docs",
    )

    # Shared objects live in app state; nothing module-global
    app.state.config = config
    app.state.pipeline = pipeline or ScanPipeline(config)
    app.state.store = store or SessionStore(max_sessions=config.web.max_sessions)
    app.state.sonarqube = sonarqube or SonarQubeClient(config.sonarqube)

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"error": "Invalid request body", "message": str(exc.errors())},
        )

    @app.exception_handler(InputError)
    async def invalid_input(request: Request, exc: InputError) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content={"error": "Invalid input", "message": str(exc)},
        )

    @app.exception_handler(AisastError)
    async def upstream_failure(request: Request, exc: AisastError) -> JSONResponse:
        logger.error("Request to %s failed: %s", request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Request failed", "message": str(exc)},
        )

    # Register API routers
    from aisast.web.api.fixes import router as fixes_router
    from aisast.web.api.model import router as model_router
    from aisast.web.api.scans import router as scans_router
    from aisast.web.api.sessions import router as sessions_router
    from aisast.web.api.sonarqube import router as sonarqube_router

    app.include_router(scans_router, prefix="/api")
    app.include_router(fixes_router, prefix="/api")
    app.include_router(sessions_router, prefix="/api")
    app.include_router(model_router, prefix="/api")
    app.include_router(sonarqube_router, prefix="/api")

    return app
