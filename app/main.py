from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import root_router, router
from app.errors import register_error_handlers
from app.middleware import install_middleware
from logging_config import configure_logging
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    logger.info("Temperature conversion API started; routes under %s", settings.api_root)
    try:
        yield
    finally:
        logger.info("Temperature conversion API shutting down")


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Temperature Conversion API",
        description="High-precision temperature conversion between Celsius, Fahrenheit and Kelvin.",
        version="1.0.0",
        lifespan=lifespan,
    )
    install_middleware(app, settings)
    register_error_handlers(app)
    app.include_router(router, prefix=settings.api_root)
    app.include_router(root_router)
    return app

app = create_app()
