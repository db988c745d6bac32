"""FastAPI application factory and lifecycle management."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from matsearch import __version__
from matsearch.api.deps import set_engine
from matsearch.api.v1.router import router as v1_router
from matsearch.config.settings import Settings
from matsearch.core.engine import MaterialsSearchEngine
from matsearch.models.query import InvalidQueryError
from matsearch.observability.logging import setup_logging

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MATSEARCH_CONFIG"
_DEFAULT_CONFIG = "matsearch-config.yaml"


def _settings_from_environment() -> Settings:
    """Settings for a process started by uvicorn's factory mode.

    ``matsearch serve`` exports the path of its ``--config`` file in
    ``MATSEARCH_CONFIG``; without it, ``matsearch-config.yaml`` in the working
    directory is used when present, and plain environment variables otherwise.
    """
    config_path = Path(os.environ.get(CONFIG_ENV_VAR) or _DEFAULT_CONFIG)
    if config_path.exists():
        settings = Settings.from_yaml(config_path)
    else:
        settings = Settings()
    setup_logging(settings.observability)
    if config_path.exists():
        logger.info("Loaded configuration from %s", config_path)
    return settings


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the MatSearch HTTP application.

    The engine is created and initialised in the lifespan, so adapters open
    their clients inside the server's event loop.

    Args:
        settings: Application settings. Read from the environment when omitted.
    """
    if settings is None:
        settings = _settings_from_environment()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting MatSearch v%s", __version__)

        engine = MaterialsSearchEngine(settings)
        await engine.initialize()
        set_engine(engine)
        app.state.settings = settings
        app.state.engine = engine

        logger.info("MatSearch is ready to serve requests on port %d", settings.server.port)
        try:
            yield
        finally:
            logger.info("Shutting down MatSearch...")
            set_engine(None)
            await engine.shutdown()

    app = FastAPI(
        title="MatSearch",
        description=(
            "Aggregated materials search: one ranked, deduplicated and paginated result set "
            "over a local dataset and a remote property service."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        logger.info(
            "%s %s -> %d (%d ms)",
            request.method,
            request.url.path,
            response.status_code,
            int((time.monotonic() - start) * 1000),
        )
        return response

    @app.exception_handler(InvalidQueryError)
    async def invalid_query_handler(request: Request, exc: InvalidQueryError) -> JSONResponse:
        logger.info("Rejected query %s: %s", request.url.query, exc)
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    app.include_router(v1_router, prefix="/v1")

    return app
