"""FastAPI application setup."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tweetboard.api.dependencies import close_service, init_service
from tweetboard.api.models import APIResponse
from tweetboard.api.routes import board
from tweetboard.board import BoardError, NotFoundError
from tweetboard.config import load_config
from tweetboard.logging import setup_logging
from tweetboard.service import Service

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "tweetboard.json"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    service: Service | None = app.state.service
    if service is None:
        setup_logging()
        config = load_config(app.state.config_path)
        service = Service.from_env(config)
    await service.start()
    init_service(service)

    yield
    # Shutdown
    await service.stop()
    close_service()


def create_app(config_path: str | None = None, service: Service | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        config_path: JSON config file. Defaults to TWEETBOARD_CONFIG or
                     'tweetboard.json'.
        service: Prebuilt service, skips config loading.
    """
    app = FastAPI(
        title="tweetboard API",
        description="Status and control of the issue board tweet queue",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store config for lifespan manager
    app.state.config_path = config_path or os.environ.get("TWEETBOARD_CONFIG", DEFAULT_CONFIG_PATH)
    app.state.service = service

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=APIResponse[None](data=None, error=str(exc)).model_dump(),
        )

    @app.exception_handler(BoardError)
    async def board_error_handler(_request: Request, exc: BoardError) -> JSONResponse:
        logger.error("Request failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=APIResponse[None](data=None, error="Board provider error").model_dump(),
        )

    app.include_router(board.router, prefix="/api/v1")

    return app


# Default app instance
app = create_app()
