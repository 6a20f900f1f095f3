"""FarmOps API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly, one router per resource
    - Global error handlers map FarmOpsError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database, AI client and storage client initialized once in the lifespan

Design Decisions:
    - Lifespan over @app.on_event; shutdown closes the storage HTTP pool and the engine
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from farmops.api.error_handlers import register_error_handlers
from farmops.api.routes import (
    ai_insights, dashboard, growth_records, growth_stages, health, uploads,
)
from farmops.config import get_settings
from farmops.infrastructure import database, supabase_storage
from farmops.infrastructure.anthropic_client import init_ai_client
from farmops.infrastructure.database import init_db
from farmops.infrastructure.observability import setup_logging
from farmops.infrastructure.supabase_storage import init_storage

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    init_ai_client(
        settings.anthropic_api_key,
        max_retries=settings.anthropic_max_retries,
        base_delay_ms=settings.anthropic_base_delay_ms,
        max_delay_ms=settings.anthropic_max_delay_ms,
        timeout_seconds=settings.anthropic_timeout_seconds,
    )
    init_storage(
        settings.supabase_url,
        settings.supabase_service_role_key,
        settings.storage_bucket,
        timeout_seconds=settings.storage_timeout_seconds,
    )
    logger.info("FarmOps API started")
    yield
    logger.info("FarmOps API shutting down")
    if supabase_storage.storage_client:
        await supabase_storage.storage_client.aclose()
    if database.db_manager:
        await database.db_manager.dispose()


app = FastAPI(title="FarmOps API", version="1.0.0", lifespan=lifespan)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(ai_insights.router)
app.include_router(dashboard.router)
app.include_router(growth_records.router)
app.include_router(growth_stages.router)
app.include_router(uploads.router)

register_error_handlers(app)
