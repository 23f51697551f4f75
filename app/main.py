"""FastAPI application entry point.

Configures CORS, logging, lifespan events (record store, CV store and the
APScheduler orphan sweep), and router registration.
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging import setup_logging
from app.db.records import RecordStore
from app.routers import candidates, health
from app.scheduler.jobs import shutdown_scheduler, start_scheduler
from app.storage.cv_store import CvStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Open both stores and the scheduler on startup, close them on exit."""
    setup_logging()
    logger.info("Application starting up")

    record_store = RecordStore(settings)
    cv_store = CvStore(settings.UPLOAD_FOLDER)
    record_store.open()
    cv_store.open()
    application.state.record_store = record_store
    application.state.cv_store = cv_store

    start_scheduler(record_store, cv_store, settings)
    try:
        yield
    finally:
        shutdown_scheduler()
        cv_store.close()
        record_store.close()
        logger.info("Application shutting down")


app = FastAPI(
    title="Candidates API",
    description="Job candidate records with CV upload",
    version="0.1.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# CORS Configuration
# ---------------------------------------------------------------------------
_raw_origins = settings.ALLOWED_ORIGINS.strip()
if _raw_origins == "*":
    _allowed_origins: list[str] = ["*"]
else:
    _allowed_origins = [o.strip() for o in _raw_origins.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Router Registration
# ---------------------------------------------------------------------------
app.include_router(health.router, tags=["Health"])
app.include_router(candidates.router, prefix="/api/candidates", tags=["Candidates"])
