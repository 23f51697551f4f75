"""Orphan CV sweep.

Deletes stored CV files that no candidate row references.  Orphans appear
when a process dies between the file write and the row insert of a create,
or when a CV delete failed after its row was removed.  Files younger than
``min_age_seconds`` are left alone so an in-flight create is never raced.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any

from app.db.records import RecordStore, RecordStoreError
from app.scheduler.lock import acquire_sweep_lock, release_sweep_lock
from app.storage.cv_store import CvStore, CvStoreError

logger = logging.getLogger(__name__)


def sweep_orphan_cvs(
    records: RecordStore,
    cvs: CvStore,
    min_age_seconds: float,
) -> dict[str, Any]:
    """Delete unreferenced CV files older than *min_age_seconds*.

    Returns
    -------
    Dict with ``status`` (``success``, ``failed`` or ``skipped``), the
    ``deleted`` references and the ``duration_seconds``.
    """
    started_at = datetime.now(timezone.utc)
    if not acquire_sweep_lock(started_at):
        logger.warning("cv_sweep_skipped_already_running")
        return {"status": "skipped", "deleted": [], "duration_seconds": 0.0}

    t0 = time.monotonic()
    deleted: list[str] = []
    status = "success"
    try:
        candidates = cvs.list_references(min_age_seconds=min_age_seconds)
        if candidates:
            referenced = records.list_cv_references()
            for reference in candidates:
                if reference in referenced:
                    continue
                try:
                    if cvs.delete(reference):
                        deleted.append(reference)
                except CvStoreError:
                    status = "partial"
                    logger.warning(
                        "cv_sweep_delete_failed",
                        extra={"reference": reference},
                        exc_info=True,
                    )
    except RecordStoreError as exc:
        status = "failed"
        logger.error("cv_sweep_failed", extra={"error_message": str(exc)})
    finally:
        release_sweep_lock()

    duration = round(time.monotonic() - t0, 2)
    logger.info(
        "cv_sweep_finished",
        extra={
            "status": status,
            "deleted_count": len(deleted),
            "duration_seconds": duration,
        },
    )
    return {"status": status, "deleted": deleted, "duration_seconds": duration}
