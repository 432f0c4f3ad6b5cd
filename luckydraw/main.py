"""
FastAPI application entrypoint for the lucky-draw entry service.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from luckydraw.api.routes import router as api_router
from luckydraw.core.config import get_settings
from luckydraw.core.logging import configure_logging
from luckydraw.dependencies import get_token_manager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Prime the token manager from the credential record once at startup."""
    token_manager = app.dependency_overrides.get(get_token_manager, get_token_manager)()
    if not await token_manager.load_from_store():
        logger.warning(
            "Starting without Cafe24 credentials; customer lookups will fail "
            "until the credential record is seeded."
        )
    yield


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Cafe24 Lucky Draw",
        version="0.1.0",
        description="Event entry API enriched with Cafe24 customer data.",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
