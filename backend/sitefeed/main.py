"""sitefeed API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map SiteFeedError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, CMS client and build hook client initialized in the lifespan
      and closed on shutdown

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sitefeed.api.error_handlers import register_error_handlers
from sitefeed.api.routes import content, health, webhooks
from sitefeed.config import get_settings
from sitefeed.infrastructure import database
from sitefeed.infrastructure.build_hook_client import (
    close_build_hook_client, init_build_hook_client,
)
from sitefeed.infrastructure.cms_client import close_cms_client, init_cms_client
from sitefeed.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    init_cms_client(settings)
    init_build_hook_client(settings)
    logger.info("sitefeed API started")
    yield
    logger.info("sitefeed API shutting down")
    await close_cms_client()
    await close_build_hook_client()
    if database.db_manager:
        await database.db_manager.dispose()


app = FastAPI(
    title="sitefeed API", version="1.0.0", lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Routes — explicit registration
app.include_router(health.router)
app.include_router(content.router)
app.include_router(webhooks.router)

register_error_handlers(app)
