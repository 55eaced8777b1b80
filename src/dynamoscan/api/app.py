"""
Dynamoscan FastAPI Application

This module initializes and configures the FastAPI application with:
- API routing
- CORS middleware
- Translation of analyzer errors into HTTP responses
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.analyzer import ChainAnalyzer
from ..core.config import Settings, settings as default_settings
from ..data.solana_rpc import SolanaRPCClient
from ..exceptions import InputValidationError, NotExecutableError, UpstreamFetchError
from ..utils.logger import get_logger
from .routes import api_router

logger = get_logger(__name__)


def _error_response(status_code: int, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc)})


def create_application(
    analyzer: Optional[ChainAnalyzer] = None,
    config: Optional[Settings] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        analyzer: Pre-built analyzer; when omitted one is created at startup
            over a ``SolanaRPCClient`` and closed at shutdown
        config: Settings override

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    config = config or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.started_at = time.monotonic()
        if analyzer is not None:
            app.state.analyzer = analyzer
            yield
            return

        logger.info("Solana RPC: %s", config.RPC_URL)
        rpc = SolanaRPCClient(
            config.RPC_URL,
            timeout=config.REQUEST_TIMEOUT,
            max_retries=config.MAX_RETRIES,
        )
        app.state.analyzer = ChainAnalyzer(rpc, config=config)
        try:
            yield
        finally:
            await rpc.close()

    app = FastAPI(
        title="Dynamoscan API",
        description="Heuristic exploit detection for Solana transactions and programs",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.exception_handler(InputValidationError)
    async def input_validation_handler(request: Request, exc: InputValidationError) -> JSONResponse:
        return _error_response(400, exc)

    @app.exception_handler(NotExecutableError)
    async def not_executable_handler(request: Request, exc: NotExecutableError) -> JSONResponse:
        return _error_response(422, exc)

    @app.exception_handler(UpstreamFetchError)
    async def upstream_handler(request: Request, exc: UpstreamFetchError) -> JSONResponse:
        logger.warning("Upstream fetch failed for %s: %s", request.url.path, exc)
        return _error_response(502, exc)

    app.include_router(api_router)
    return app
