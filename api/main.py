from __future__ import annotations

import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import ApiError, api_error_handler, powchain_error_handler
from api.routes import get_api_router
from powchain import __version__
from powchain.core.config import Config
from powchain.core.exceptions import ConfigError, PowchainError
from powchain.core.log import configure_logging


def create_app(config: Config | None = None) -> FastAPI:
    start = time.monotonic()
    config = config or Config.load(Path.cwd())
    configure_logging(config.logging)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.started_at = start

        # Expose config/chain in app state for dependency injection + tests.
        app.state.config = getattr(app.state, "config", None) or config

        if getattr(app.state, "chain_service", None) is None:
            from powchain.service import ChainService

            app.state.chain_service = ChainService.from_config(app.state.config)

        yield

    openapi_tags = [
        {"name": "health", "description": "Liveness, version metadata and mining counters."},
        {"name": "chain", "description": "Read, extend, validate and tamper with the chain."},
    ]

    app = FastAPI(
        title="powchain API",
        description="Hash-linked, proof-of-work ledger",
        version=__version__,
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )
    app.state.started_at = start
    app.state.config = config

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(PowchainError, powchain_error_handler)

    # CORS: only enable if origins explicitly configured
    if config.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(get_api_router())
    return app


# Module-level app for uvicorn (e.g. `uvicorn api.main:app`).
# Guarded so test imports don't crash on a broken config file.
try:
    app = create_app()
except ConfigError:
    app = None
