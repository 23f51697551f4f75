"""Sweep concurrency lock using threading.Lock.

Prevents two orphan CV sweeps from running at once.  Uses a non-blocking
acquire: if the lock is already held the caller gets False and skips.
"""

from __future__ import annotations

import threading
from datetime import datetime

_sweep_lock = threading.Lock()
_sweep_started_at: datetime | None = None


def acquire_sweep_lock(started_at: datetime) -> bool:
    """Try to acquire the sweep lock.

    Returns True if the lock was acquired, False if already held.
    """
    global _sweep_started_at
    if _sweep_lock.acquire(blocking=False):
        _sweep_started_at = started_at
        return True
    return False


def release_sweep_lock() -> None:
    """Release the sweep lock.  Safe to call when not held."""
    global _sweep_started_at
    _sweep_started_at = None
    try:
        _sweep_lock.release()
    except RuntimeError:
        pass  # not held


def get_sweep_started_at() -> datetime | None:
    """Return when the running sweep started, or None."""
    return _sweep_started_at


def is_sweep_running() -> bool:
    """Check if a sweep is currently running."""
    return _sweep_started_at is not None
