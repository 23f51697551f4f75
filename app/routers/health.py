"""Health check endpoint.

Reports record-store connectivity, whether the CV upload folder accepts
writes, and the scheduler state.  Answers 503 when the record store is
unreachable.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from app.db.records import RecordStore, RecordStoreError
from app.routers.dependencies import get_cv_store, get_record_store
from app.scheduler.jobs import is_scheduler_running
from app.storage.cv_store import CvStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(
    records: RecordStore = Depends(get_record_store),
    cvs: CvStore = Depends(get_cv_store),
) -> Any:
    """Return 200 when healthy, 503 when the record store is down."""
    db_status = "disconnected"
    try:
        records.ping()
        db_status = "connected"
    except RecordStoreError:
        logger.warning("Health check: record store unreachable", exc_info=True)

    payload: dict[str, str] = {
        "status": "ok" if db_status == "connected" else "degraded",
        "database": db_status,
        "storage": "writable" if cvs.is_writable() else "unavailable",
        "scheduler": "running" if is_scheduler_running() else "stopped",
    }

    if db_status != "connected":
        return JSONResponse(status_code=503, content=payload)

    return payload
