"""Pydantic models for the ``candidates`` table.

``id`` is generated by the application (24 hex characters) rather than by
the database, so the CV file can be named after it before the row exists.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CandidateCreate(BaseModel):
    """Row inserted by the create operation."""
    id: str
    name: str
    email: str
    phone: str
    cv: str
    created_at: datetime


class Candidate(BaseModel):
    """Full candidate record returned from the record store."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    phone: str
    cv: str | None = None  # stored CV file name
    created_at: datetime | None = None
