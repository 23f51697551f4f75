"""Candidate CRUD endpoints.

GET    ""               -- list every candidate
GET    "/{id}"          -- one candidate, or {} when the id is unknown
POST   ""               -- multipart create (name, email, phone, cv file)
DELETE "/{id}"          -- idempotent delete, 204
GET    "/{id}/cv"       -- download the stored CV file

Malformed ids and incomplete create requests answer 400 before any store
is touched.  Store failures answer 500.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile
from starlette.responses import FileResponse

from app.db.records import RecordStore, RecordStoreError
from app.models.candidate import Candidate
from app.routers.dependencies import get_cv_store, get_record_store
from app.services.candidates import (
    CandidateNotFoundError,
    CandidateValidationError,
    MalformedCandidateIdError,
    create_candidate,
    delete_candidate,
    get_candidate,
    get_candidate_cv,
    list_candidates,
)
from app.storage.cv_store import CvStore, CvStoreError

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _server_error(operation: str, exc: Exception, candidate_id: str | None = None) -> HTTPException:
    """Log a collaborator failure and build the matching 500 response."""
    logger.error(
        f"{operation}_failed",
        extra={"candidate_id": candidate_id, "error_message": str(exc)},
    )
    return HTTPException(status_code=500, detail=f"Failed to {operation.replace('_', ' ')}")


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get("", response_model=list[Candidate])
def list_candidates_endpoint(
    records: RecordStore = Depends(get_record_store),
) -> list[Candidate]:
    """Return all candidates (possibly an empty list)."""
    try:
        return list_candidates(records)
    except RecordStoreError as exc:
        raise _server_error("list_candidates", exc) from exc


@router.get("/{candidate_id}")
def get_candidate_endpoint(
    candidate_id: str,
    records: RecordStore = Depends(get_record_store),
) -> dict[str, Any]:
    """Return one candidate.

    A well-formed id with no matching record yields ``{}`` and 200.
    """
    try:
        candidate = get_candidate(records, candidate_id)
    except MalformedCandidateIdError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RecordStoreError as exc:
        raise _server_error("get_candidate", exc, candidate_id) from exc

    if candidate is None:
        return {}
    return candidate.model_dump(mode="json")


@router.post("", response_model=Candidate)
def create_candidate_endpoint(
    name: str | None = Form(None),
    email: str | None = Form(None),
    phone: str | None = Form(None),
    cv: UploadFile | str | None = File(None),
    records: RecordStore = Depends(get_record_store),
    cvs: CvStore = Depends(get_cv_store),
) -> Candidate:
    """Create a candidate from a multipart form with an attached CV.

    A ``cv`` sent as a plain form value counts as no file (400).
    """
    upload = cv if isinstance(cv, UploadFile) else None
    try:
        return create_candidate(
            records,
            cvs,
            name=name,
            email=email,
            phone=phone,
            cv_stream=upload.file if upload is not None else None,
            cv_filename=upload.filename if upload is not None else None,
        )
    except CandidateValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except (RecordStoreError, CvStoreError) as exc:
        raise _server_error("create_candidate", exc) from exc


@router.delete("/{candidate_id}", status_code=204)
def delete_candidate_endpoint(
    candidate_id: str,
    records: RecordStore = Depends(get_record_store),
    cvs: CvStore = Depends(get_cv_store),
) -> Response:
    """Delete a candidate.  Unknown well-formed ids also answer 204."""
    try:
        delete_candidate(records, cvs, candidate_id)
    except MalformedCandidateIdError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except RecordStoreError as exc:
        raise _server_error("delete_candidate", exc, candidate_id) from exc
    return Response(status_code=204)


@router.get("/{candidate_id}/cv", response_class=FileResponse)
def download_cv_endpoint(
    candidate_id: str,
    records: RecordStore = Depends(get_record_store),
    cvs: CvStore = Depends(get_cv_store),
) -> FileResponse:
    """Stream the candidate's stored CV file."""
    try:
        path = get_candidate_cv(records, cvs, candidate_id)
    except MalformedCandidateIdError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except CandidateNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except RecordStoreError as exc:
        raise _server_error("download_cv", exc, candidate_id) from exc
    return FileResponse(path, filename=path.name)
