"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.responses import Response

from nock_multisig import __version__
from nock_multisig.api.middleware.cors import setup_cors
from nock_multisig.api.v1 import v1_router
from nock_multisig.config.settings import AppConfig
from nock_multisig.errors.multisig_errors import MultisigError
from nock_multisig.metrics.collector import MultisigMetrics

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown logging; the service holds no other state."""
    config: AppConfig = app.state.config
    logger.info(
        "Multisig service started (duplicate keys: %s, verify digests: %s)",
        config.policy.duplicate_keys,
        config.policy.verify_digests,
    )
    yield
    logger.info("Multisig service stopped")


def create_app(*, config: AppConfig | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        config: Optional AppConfig. If *None*, a default config is created
            from environment variables.
    """
    if config is None:
        config = AppConfig()

    app = FastAPI(
        title="nock-multisig",
        version=__version__,
        description="M-of-N multisig transaction builder for Nockchain notes",
        debug=config.debug,
        lifespan=_lifespan,
    )

    app.state.config = config
    app.state.metrics = MultisigMetrics()

    # -- Middleware --
    setup_cors(app, config.server.cors_origins)

    # -- Error handler --
    @app.exception_handler(MultisigError)
    async def _multisig_error_handler(request: Request, exc: MultisigError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "message": exc.message},
        )

    # -- Base routes --
    @app.get("/health", tags=["base"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    if config.metrics.enabled:

        @app.get("/metrics", tags=["base"], include_in_schema=False)
        async def metrics_endpoint() -> Response:
            """Prometheus metrics endpoint."""
            return Response(
                content=generate_latest(app.state.metrics.registry),
                media_type="text/plain; version=0.0.4; charset=utf-8",
            )

    # -- Mount v1 API --
    app.include_router(v1_router)

    return app
