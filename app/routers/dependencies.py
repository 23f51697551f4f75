"""FastAPI dependencies resolving the stores opened by the lifespan."""

from fastapi import Request

from app.db.records import RecordStore
from app.storage.cv_store import CvStore


def get_record_store(request: Request) -> RecordStore:
    """Return the record store held on ``app.state``."""
    return request.app.state.record_store


def get_cv_store(request: Request) -> CvStore:
    """Return the CV store held on ``app.state``."""
    return request.app.state.cv_store
