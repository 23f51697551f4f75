"""Candidate record store backed by a Supabase table.

``RecordStore`` is an explicitly owned handle: the application lifespan
calls :meth:`RecordStore.open` on startup and :meth:`RecordStore.close` on
shutdown, and routes receive the instance through a dependency.  Every
failure of the underlying client is re-raised as ``RecordStoreError``.
"""

from __future__ import annotations

import logging
from typing import Any

from supabase import Client

from app.core.config import Settings, settings
from app.core.constants import CANDIDATE_COLUMNS
from app.db.supabase import create_supabase
from app.models.candidate import Candidate, CandidateCreate

logger = logging.getLogger(__name__)


class RecordStoreError(RuntimeError):
    """The record store could not complete an operation."""


class RecordStore:
    """Insert / find / delete candidate rows in ``config.CANDIDATES_TABLE``."""

    def __init__(self, config: Settings = settings) -> None:
        self._config = config
        self._client: Client | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Create the Supabase client.  Idempotent."""
        if self._client is not None:
            return
        try:
            self._client = create_supabase(self._config)
        except Exception as exc:
            raise RecordStoreError(f"Cannot connect to record store: {exc}") from exc
        logger.info("record_store_opened", extra={"table": self._config.CANDIDATES_TABLE})

    def close(self) -> None:
        """Release the client.  Further calls raise until reopened."""
        if self._client is None:
            return
        self._client = None
        logger.info("record_store_closed")

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def _table(self) -> Any:
        if self._client is None:
            raise RecordStoreError("Record store is not open")
        return self._client.table(self._config.CANDIDATES_TABLE)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def insert(self, row: CandidateCreate) -> Candidate:
        """Insert *row* and return the stored candidate."""
        payload = row.model_dump(mode="json")
        try:
            result = self._table().insert(payload).execute()
        except RecordStoreError:
            raise
        except Exception as exc:
            raise RecordStoreError(f"Insert failed: {exc}") from exc
        stored = result.data[0] if result.data else payload
        return Candidate(**stored)

    def find_by_id(self, candidate_id: str) -> Candidate | None:
        """Return the candidate with *candidate_id*, or ``None``."""
        try:
            result = (
                self._table()
                .select(CANDIDATE_COLUMNS)
                .eq("id", candidate_id)
                .limit(1)
                .execute()
            )
        except RecordStoreError:
            raise
        except Exception as exc:
            raise RecordStoreError(f"Lookup failed: {exc}") from exc
        if not result.data:
            return None
        return Candidate(**result.data[0])

    def find_all(self) -> list[Candidate]:
        """Return every candidate in id (creation) order."""
        try:
            result = self._table().select(CANDIDATE_COLUMNS).order("id").execute()
        except RecordStoreError:
            raise
        except Exception as exc:
            raise RecordStoreError(f"Listing failed: {exc}") from exc
        return [Candidate(**row) for row in result.data or []]

    def delete_by_id(self, candidate_id: str) -> Candidate | None:
        """Delete the candidate with *candidate_id*.

        Returns the deleted candidate, or ``None`` when no row matched.
        """
        try:
            result = self._table().delete().eq("id", candidate_id).execute()
        except RecordStoreError:
            raise
        except Exception as exc:
            raise RecordStoreError(f"Delete failed: {exc}") from exc
        if not result.data:
            return None
        return Candidate(**result.data[0])

    def list_cv_references(self) -> set[str]:
        """Return the CV file names referenced by any candidate."""
        try:
            result = self._table().select("cv").execute()
        except RecordStoreError:
            raise
        except Exception as exc:
            raise RecordStoreError(f"Listing CV references failed: {exc}") from exc
        return {row["cv"] for row in result.data or [] if row.get("cv")}

    def ping(self) -> None:
        """Run a trivial query; raises ``RecordStoreError`` when unreachable."""
        try:
            self._table().select("id").limit(1).execute()
        except RecordStoreError:
            raise
        except Exception as exc:
            raise RecordStoreError(f"Record store unreachable: {exc}") from exc
