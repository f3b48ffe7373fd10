from __future__ import annotations

import logging

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .config import load_wallet_config
from .config.schema import WalletConfig
from .errors import WalletError
from .node.client import NodeClient, retry_policy_from_config
from .node.gateway import NodeGateway
from .routers import health, wallet
from .services.cache import TtlCache
from .util.logging import setup_logging
from .wallet.service import WalletService

logger = logging.getLogger("wallet_core.startup")


def _error_body(exc: WalletError) -> dict:
    body: dict = {"message": exc.message}
    if exc.details:
        body["details"] = exc.details
    return body


def create_app(
    config: WalletConfig | None = None,
    gateway: NodeGateway | None = None,
) -> FastAPI:
    """Build the API.

    ``gateway`` replaces the HTTP node client, which is what tests use.
    """

    setup_logging()
    if config is None:
        config = load_wallet_config().data

    client: NodeClient | None = None
    if gateway is None:
        client = NodeClient(config.node, retry=retry_policy_from_config(config.retry))
        gateway = client
    logger.info(
        "wallet_core starting node=%s cache_enabled=%s retry_attempts=%s",
        config.node.base_url,
        config.cache.enabled,
        config.retry.max_attempts,
    )

    app = FastAPI(title="Wallet Core API")
    app.state.config = config
    app.state.wallet_service = WalletService(
        gateway, cache=TtlCache(config.cache), paging=config.paging
    )

    @app.exception_handler(WalletError)
    async def _wallet_error_handler(request: Request, exc: WalletError) -> JSONResponse:
        level = logging.WARNING if exc.status_code < 500 else logging.ERROR
        logger.log(
            level,
            "request failed",
            extra={"path": request.url.path, "status": exc.status_code, "error": exc.message},
        )
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        # reported as 400 like every other rejected request
        return JSONResponse(
            status_code=400,
            content={"message": "Invalid request.", "details": {"errors": jsonable_encoder(exc.errors())}},
        )

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled request error", extra={"path": request.url.path})
        return JSONResponse(status_code=500, content={"message": "Internal server error."})

    @app.get("/metrics")
    def metrics() -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    if client is not None:

        @app.on_event("shutdown")
        def _close_node_client() -> None:
            client.close()

    app.include_router(health.router)
    app.include_router(wallet.router)
    return app


__all__ = ["create_app"]
