"""Shared test fixtures.

Provides an in-memory record store, a ``tmp_path`` CV store, a mock
Supabase client and a FastAPI ``test_client`` wired to the in-memory store.
"""

import os
from collections.abc import Generator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-key")
os.environ["CV_SWEEP_INTERVAL_MINUTES"] = "0"

from app.db.records import RecordStore, RecordStoreError  # noqa: E402
from app.models.candidate import Candidate, CandidateCreate  # noqa: E402
from app.storage.cv_store import CvStore  # noqa: E402


class InMemoryRecordStore(RecordStore):
    """Dict-backed stand-in for the Supabase table.

    ``calls`` records every operation so tests can assert the store was
    not touched; ``fail_inserts`` makes ``insert`` raise.
    """

    def __init__(self) -> None:
        super().__init__()
        self.rows: dict[str, dict] = {}
        self.calls: list[str] = []
        self.fail_inserts = False
        self.reachable = True

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    def insert(self, row: CandidateCreate) -> Candidate:
        self.calls.append("insert")
        if self.fail_inserts:
            raise RecordStoreError("Insert failed: simulated outage")
        data = row.model_dump(mode="json")
        self.rows[row.id] = data
        return Candidate(**data)

    def find_by_id(self, candidate_id: str) -> Candidate | None:
        self.calls.append("find_by_id")
        data = self.rows.get(candidate_id)
        return Candidate(**data) if data else None

    def find_all(self) -> list[Candidate]:
        self.calls.append("find_all")
        return [Candidate(**self.rows[key]) for key in sorted(self.rows)]

    def delete_by_id(self, candidate_id: str) -> Candidate | None:
        self.calls.append("delete_by_id")
        data = self.rows.pop(candidate_id, None)
        return Candidate(**data) if data else None

    def list_cv_references(self) -> set[str]:
        self.calls.append("list_cv_references")
        return {row["cv"] for row in self.rows.values() if row.get("cv")}

    def ping(self) -> None:
        if not self.reachable:
            raise RecordStoreError("Record store unreachable: simulated")


@pytest.fixture()
def memory_store() -> InMemoryRecordStore:
    """Provide an empty in-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture()
def cv_store(tmp_path: Path) -> CvStore:
    """Provide an opened CV store rooted in a temporary directory."""
    store = CvStore(tmp_path / "uploads")
    store.open()
    return store


@pytest.fixture()
def mock_supabase() -> Generator[MagicMock, None, None]:
    """Patch ``create_client`` so record stores open on a mock client."""
    mock_client = MagicMock()
    with patch("app.db.supabase.create_client", return_value=mock_client):
        yield mock_client


@pytest.fixture()
def test_client(
    memory_store: InMemoryRecordStore,
    tmp_path: Path,
    mock_supabase: MagicMock,
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[TestClient, None, None]:
    """Provide a FastAPI TestClient backed by the in-memory record store."""
    from app.core.config import settings
    from app.main import app

    monkeypatch.setattr(settings, "UPLOAD_FOLDER", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "CV_SWEEP_INTERVAL_MINUTES", 0)

    with TestClient(app) as client:
        app.state.record_store = memory_store
        yield client
