"""FastAPI webhook listener that feeds signals into the executor."""

from __future__ import annotations

import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger

from okx_bridge import __version__
from okx_bridge.core.config import BridgeConfig
from okx_bridge.core.constants import HEALTH_BANNER
from okx_bridge.errors import ErrorKind
from okx_bridge.exchange import OKXClient
from okx_bridge.executor import SignalExecutor
from okx_bridge.models import ErrorDetail, ExecutionResult, ExecutionStatus

HTTP_STATUS_BY_RESULT = {
    ExecutionStatus.EXECUTED: 200,
    ExecutionStatus.UNAUTHORIZED: 401,
    ExecutionStatus.INVALID_SIGNAL: 400,
    ExecutionStatus.UPSTREAM_ERROR: 502,
    ExecutionStatus.ENTRY_FAILED: 502,
    ExecutionStatus.INTERNAL_ERROR: 500,
}


def _respond(result: ExecutionResult) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_STATUS_BY_RESULT[result.status],
        content=result.model_dump(mode="json"),
    )


def create_app(config: BridgeConfig, *, executor: SignalExecutor | None = None) -> FastAPI:
    """Create the webhook application.

    Args:
        config: Bridge configuration
        executor: Optional pre-built executor (primarily for testing). When
            omitted, an OKX client and executor are created on startup and the
            client is closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if executor is not None:
            app.state.executor = executor
            yield
            return

        client = OKXClient(config)
        app.state.executor = SignalExecutor.from_config(config, client)
        mode = "demo" if config.okx_simulated_trading else "live"
        logger.info(f"Webhook bridge ready ({mode} trading, tdMode={config.trade_mode.value})")
        try:
            yield
        finally:
            await client.aclose()
            logger.info("OKX client closed")

    app = FastAPI(title="okx-webhook-bridge", version=__version__, lifespan=lifespan)

    @app.get("/", response_class=PlainTextResponse)
    async def banner() -> str:
        return HEALTH_BANNER

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    @app.post("/webhook")
    async def webhook(request: Request) -> JSONResponse:
        try:
            payload = json.loads(await request.body())
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning(f"Rejected webhook with unparseable body: {exc}")
            return _respond(
                ExecutionResult(
                    status=ExecutionStatus.INVALID_SIGNAL,
                    error=ErrorDetail(
                        kind=ErrorKind.INVALID_SIGNAL, message="Request body is not valid JSON"
                    ),
                )
            )

        if isinstance(payload, dict):
            logger.info(
                "Webhook received: {}",
                {key: value for key, value in payload.items() if key != "secret"},
            )

        result = await request.app.state.executor.execute(payload)
        logger.info(f"Webhook result: {result.status.value}")
        return _respond(result)

    return app
