"""DoConnect API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map DoConnectError -> structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup and disposed on shutdown via lifespan

Design Decisions:
    - Lifespan over @app.on_event
    - Uploaded images served read-only from <storage_root>/uploads when the directory exists
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from doconnect.api.error_handlers import register_error_handlers
from doconnect.api.routes import answers, health, questions
from doconnect.config import get_settings
from doconnect.core.image_parent import UPLOADS_DIR
from doconnect.infrastructure.database import init_db
from doconnect.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("DoConnect API started")
    yield
    await manager.dispose()
    logger.info("DoConnect API shutting down")


app = FastAPI(
    title="DoConnect API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(questions.router)
app.include_router(answers.router)

register_error_handlers(app)

uploads_path = os.path.join(settings.storage_root, UPLOADS_DIR)
if os.path.isdir(uploads_path):
    app.mount(f"/{UPLOADS_DIR}", StaticFiles(directory=uploads_path), name="uploads")
