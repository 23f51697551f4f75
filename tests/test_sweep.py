"""Unit tests for the orphan CV sweep, its lock and the scheduler."""

from __future__ import annotations

import io
import os
import time
from datetime import datetime, timezone
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

from app.core.config import Settings
from app.storage.cv_store import CvStore

if TYPE_CHECKING:
    from tests.conftest import InMemoryRecordStore


def _age(cv_store: CvStore, reference: str, seconds: float) -> None:
    past = time.time() - seconds
    os.utime(cv_store.root / reference, (past, past))


def _settings(**overrides: object) -> Settings:
    return Settings(SUPABASE_URL="https://test.supabase.co", SUPABASE_KEY="k", **overrides)  # type: ignore[arg-type]


class TestSweepLock:
    """Non-blocking sweep lock."""

    def test_acquire_and_release(self) -> None:
        from app.scheduler.lock import (
            acquire_sweep_lock,
            get_sweep_started_at,
            is_sweep_running,
            release_sweep_lock,
        )

        started = datetime.now(timezone.utc)
        assert acquire_sweep_lock(started) is True
        assert is_sweep_running() is True
        assert get_sweep_started_at() == started

        release_sweep_lock()
        assert is_sweep_running() is False

    def test_second_acquire_fails(self) -> None:
        from app.scheduler.lock import acquire_sweep_lock, release_sweep_lock

        try:
            assert acquire_sweep_lock(datetime.now(timezone.utc)) is True
            assert acquire_sweep_lock(datetime.now(timezone.utc)) is False
        finally:
            release_sweep_lock()

    def test_release_idempotent(self) -> None:
        from app.scheduler.lock import release_sweep_lock

        release_sweep_lock()
        release_sweep_lock()


class TestSweepOrphanCvs:
    """sweep_orphan_cvs deletes only old, unreferenced files."""

    def test_deletes_old_orphans_only(
        self, memory_store: InMemoryRecordStore, cv_store: CvStore
    ) -> None:
        from app.services.candidates import create_candidate
        from app.services.cv_sweep import sweep_orphan_cvs

        candidate = create_candidate(
            memory_store,
            cv_store,
            name="John Doe",
            email="john_doe@gmail.com",
            phone="440789012458",
            cv_stream=io.BytesIO(b"x"),
            cv_filename="cv.pdf",
        )
        old_orphan = cv_store.save(io.BytesIO(b"x"), "o.pdf", prefix="orphan")
        fresh_orphan = cv_store.save(io.BytesIO(b"x"), "f.pdf", prefix="fresh")
        _age(cv_store, candidate.cv, 3600)
        _age(cv_store, old_orphan, 3600)

        result = sweep_orphan_cvs(memory_store, cv_store, min_age_seconds=600)

        assert result["status"] == "success"
        assert result["deleted"] == [old_orphan]
        assert cv_store.path_for(candidate.cv) is not None
        assert cv_store.path_for(fresh_orphan) is not None

    def test_no_files_skips_store(
        self, memory_store: InMemoryRecordStore, cv_store: CvStore
    ) -> None:
        from app.services.cv_sweep import sweep_orphan_cvs

        result = sweep_orphan_cvs(memory_store, cv_store, min_age_seconds=0)

        assert result["deleted"] == []
        assert memory_store.calls == []

    def test_store_failure_keeps_files(self, cv_store: CvStore) -> None:
        """Given the record store is down, nothing is deleted."""
        from app.db.records import RecordStoreError
        from app.services.cv_sweep import sweep_orphan_cvs

        reference = cv_store.save(io.BytesIO(b"x"), "o.pdf", prefix="orphan")
        _age(cv_store, reference, 3600)
        records = MagicMock()
        records.list_cv_references.side_effect = RecordStoreError("down")

        result = sweep_orphan_cvs(records, cv_store, min_age_seconds=0)

        assert result["status"] == "failed"
        assert cv_store.path_for(reference) is not None

    @patch("app.services.cv_sweep.acquire_sweep_lock", return_value=False)
    def test_skipped_when_already_running(
        self, _mock_lock: MagicMock, memory_store: InMemoryRecordStore, cv_store: CvStore
    ) -> None:
        from app.services.cv_sweep import sweep_orphan_cvs

        result = sweep_orphan_cvs(memory_store, cv_store, min_age_seconds=0)

        assert result["status"] == "skipped"

    def test_lock_released_after_run(
        self, memory_store: InMemoryRecordStore, cv_store: CvStore
    ) -> None:
        from app.scheduler.lock import is_sweep_running
        from app.services.cv_sweep import sweep_orphan_cvs

        sweep_orphan_cvs(memory_store, cv_store, min_age_seconds=0)
        assert is_sweep_running() is False


class TestScheduler:
    """Scheduler start / shutdown."""

    @patch("app.scheduler.jobs.scheduler")
    def test_start_scheduler_adds_job(self, mock_scheduler: MagicMock, cv_store: CvStore) -> None:
        from app.scheduler.jobs import SWEEP_JOB_ID, start_scheduler

        records = MagicMock()
        started = start_scheduler(records, cv_store, _settings(CV_SWEEP_INTERVAL_MINUTES=30))

        assert started is True
        call = mock_scheduler.add_job.call_args
        assert call.kwargs.get("id") == SWEEP_JOB_ID
        assert call.kwargs.get("replace_existing") is True
        assert call.kwargs["kwargs"]["min_age_seconds"] == 600
        mock_scheduler.start.assert_called_once()

    @patch("app.scheduler.jobs.scheduler")
    def test_disabled_interval_does_not_start(
        self, mock_scheduler: MagicMock, cv_store: CvStore
    ) -> None:
        from app.scheduler.jobs import start_scheduler

        assert start_scheduler(MagicMock(), cv_store, _settings(CV_SWEEP_INTERVAL_MINUTES=0)) is False
        mock_scheduler.add_job.assert_not_called()
        mock_scheduler.start.assert_not_called()

    @patch("app.scheduler.jobs.scheduler")
    def test_shutdown_scheduler(self, mock_scheduler: MagicMock) -> None:
        from app.scheduler.jobs import shutdown_scheduler

        mock_scheduler.running = True
        shutdown_scheduler()

        mock_scheduler.shutdown.assert_called_once_with(wait=False)

    @patch("app.scheduler.jobs.scheduler")
    def test_shutdown_not_running_noop(self, mock_scheduler: MagicMock) -> None:
        from app.scheduler.jobs import shutdown_scheduler

        mock_scheduler.running = False
        shutdown_scheduler()

        mock_scheduler.shutdown.assert_not_called()
