"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.responses import Response

from ethwallet import __version__
from ethwallet.api.middleware.cors import setup_cors
from ethwallet.api.v1 import v1_router
from ethwallet.config.settings import AppConfig
from ethwallet.engine.client import WalletEngine
from ethwallet.errors.wallet_errors import WalletError
from ethwallet.metrics.collector import WalletMetrics
from ethwallet.metrics.middleware import PrometheusMiddleware

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialise the engine on startup and shut it down on exit."""
    config: AppConfig = app.state.config
    engine = WalletEngine(config, metrics=app.state.metrics)

    try:
        await engine.initialize()
        app.state.engine = engine
        logger.info("Wallet engine started (ledger %s)", config.ledger.rpc_url)
        yield
    finally:
        await engine.close()
        logger.info("Wallet engine shut down")


def create_app(*, config: AppConfig | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        config: Optional AppConfig. If *None*, it is read from the YAML file
            named by ``ETHWALLET_CONFIG_PATH`` and the environment.
    """
    if config is None:
        config = AppConfig()

    app = FastAPI(
        title="py-ethwallet",
        version=__version__,
        description="Password-protected multi-account Ethereum wallet",
        lifespan=_lifespan,
    )

    app.state.config = config
    app.state.metrics = WalletMetrics() if config.metrics.enabled else None

    # -- Middleware --
    setup_cors(app)
    if app.state.metrics is not None:
        app.add_middleware(PrometheusMiddleware, registry=app.state.metrics.registry)

    # -- Error handler --
    @app.exception_handler(WalletError)
    async def _wallet_error_handler(request: Request, exc: WalletError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "message": exc.message},
        )

    # -- Base routes --
    @app.get("/health", tags=["base"])
    async def health(request: Request) -> dict[str, str]:
        engine: WalletEngine | None = getattr(request.app.state, "engine", None)
        if engine is None:
            return {"status": "starting"}
        return {"status": "ok", **await engine.health_check()}

    @app.get("/metrics", tags=["base"], include_in_schema=False)
    async def metrics_endpoint() -> Response:
        """Prometheus metrics endpoint."""
        metrics: WalletMetrics | None = app.state.metrics
        body = generate_latest(metrics.registry) if metrics else b""
        return Response(
            content=body,
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    # -- Mount v1 API --
    app.include_router(v1_router)

    return app
