"""Candidate resource operations.

Validates identifiers and create input before touching either store, then
coordinates the record store and the CV store:

* create writes the CV file first and the row second; if the row insert
  fails the file is removed again, so a candidate is only visible once both
  exist.
* delete removes the row, then its CV file.  Deleting an id that is
  well-formed but unknown is a successful no-op.
* fetch of a well-formed unknown id returns ``None`` (the router answers
  ``{}``), never an error.
"""

from __future__ import annotations

import logging
import secrets
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import BinaryIO

from app.core.constants import CANDIDATE_ID_PATTERN, REQUIRED_FIELDS, CV_FIELD
from app.db.records import RecordStore, RecordStoreError
from app.models.candidate import Candidate, CandidateCreate
from app.storage.cv_store import CvStore, CvStoreError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class MalformedCandidateIdError(ValueError):
    """The identifier does not have the 24-hex-character shape."""

    def __init__(self, candidate_id: str) -> None:
        super().__init__(f"Invalid candidate id: {candidate_id!r}")
        self.candidate_id = candidate_id


class CandidateValidationError(ValueError):
    """A create request is missing required fields or the CV file."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__(f"Missing required fields: {', '.join(missing)}")
        self.missing = missing


class CandidateNotFoundError(LookupError):
    """No candidate (or no stored CV) for a well-formed identifier."""


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

def is_valid_candidate_id(candidate_id: str) -> bool:
    """Return True if *candidate_id* is exactly 24 hexadecimal characters."""
    return bool(CANDIDATE_ID_PATTERN.fullmatch(candidate_id or ""))


def new_candidate_id(now: float | None = None) -> str:
    """Generate an id: 8 hex digits of the Unix time + 16 random hex digits."""
    seconds = int(time.time() if now is None else now)
    return f"{seconds & 0xFFFFFFFF:08x}{secrets.token_hex(8)}"


def _require_valid_id(candidate_id: str) -> str:
    """Return the canonical (lower-case) form of a well-formed id."""
    if not is_valid_candidate_id(candidate_id):
        raise MalformedCandidateIdError(candidate_id)
    return candidate_id.lower()


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def list_candidates(records: RecordStore) -> list[Candidate]:
    """Return every stored candidate."""
    return records.find_all()


def get_candidate(records: RecordStore, candidate_id: str) -> Candidate | None:
    """Return the candidate for *candidate_id*, or ``None`` if absent.

    Raises ``MalformedCandidateIdError`` without querying the store when the
    id has the wrong shape.  Hex digits match case-insensitively.
    """
    candidate_id = _require_valid_id(candidate_id)
    return records.find_by_id(candidate_id)


def _clean(value: str | None) -> str:
    return (value or "").strip()


def create_candidate(
    records: RecordStore,
    cvs: CvStore,
    *,
    name: str | None,
    email: str | None,
    phone: str | None,
    cv_stream: BinaryIO | None,
    cv_filename: str | None,
) -> Candidate:
    """Store the CV file and insert a new candidate row.

    Raises ``CandidateValidationError`` before any write if a field is
    missing or blank, or if no file was attached.
    """
    fields = {"name": _clean(name), "email": _clean(email), "phone": _clean(phone)}
    missing = [field for field in REQUIRED_FIELDS if not fields[field]]
    if cv_stream is None or not cv_filename:
        missing.append(CV_FIELD)
    if missing:
        raise CandidateValidationError(missing)

    candidate_id = new_candidate_id()
    reference = cvs.save(cv_stream, cv_filename, prefix=candidate_id)

    row = CandidateCreate(
        id=candidate_id,
        cv=reference,
        created_at=datetime.now(timezone.utc),
        **fields,
    )
    try:
        candidate = records.insert(row)
    except RecordStoreError:
        logger.error(
            "candidate_insert_failed",
            extra={"candidate_id": candidate_id, "cv": reference},
        )
        try:
            cvs.delete(reference)
        except CvStoreError:
            logger.warning(
                "cv_cleanup_failed",
                extra={"candidate_id": candidate_id, "cv": reference},
                exc_info=True,
            )
        raise

    logger.info("candidate_created", extra={"candidate_id": candidate_id, "cv": reference})
    return candidate


def delete_candidate(records: RecordStore, cvs: CvStore, candidate_id: str) -> bool:
    """Delete the candidate and its CV file.

    Returns True if a row was removed, False if the id was unknown.
    A CV file that cannot be removed is logged and left for the orphan sweep.
    """
    candidate_id = _require_valid_id(candidate_id)
    deleted = records.delete_by_id(candidate_id)
    if deleted is None:
        logger.info("candidate_delete_noop", extra={"candidate_id": candidate_id})
        return False

    if deleted.cv:
        try:
            cvs.delete(deleted.cv)
        except CvStoreError:
            logger.warning(
                "cv_delete_failed",
                extra={"candidate_id": candidate_id, "cv": deleted.cv},
                exc_info=True,
            )

    logger.info("candidate_deleted", extra={"candidate_id": candidate_id})
    return True


def get_candidate_cv(records: RecordStore, cvs: CvStore, candidate_id: str) -> Path:
    """Return the path of the candidate's stored CV file.

    Raises ``CandidateNotFoundError`` if the candidate or its file is gone.
    """
    candidate = get_candidate(records, candidate_id)
    if candidate is None:
        raise CandidateNotFoundError(f"Candidate not found: {candidate_id}")
    path = cvs.path_for(candidate.cv) if candidate.cv else None
    if path is None:
        raise CandidateNotFoundError(f"CV file not found for candidate: {candidate_id}")
    return path
