"""Filesystem store for uploaded CV files.

Files live flat inside ``root``.  A *reference* is the bare file name
returned by :meth:`CvStore.save`; it is what the candidate row keeps in
its ``cv`` column.
"""

from __future__ import annotations

import logging
import re
import secrets
import shutil
import time
from pathlib import Path
from stat import S_ISREG
from typing import BinaryIO

logger = logging.getLogger(__name__)

_SUFFIX_RE = re.compile(r"^\.[a-z0-9]{1,10}$")


class CvStoreError(RuntimeError):
    """A CV file could not be written or removed."""


def _safe_suffix(filename: str | None) -> str:
    """Return the lower-cased extension of *filename*, or ``""`` if unusable."""
    suffix = Path(filename or "").suffix.lower()
    return suffix if _SUFFIX_RE.match(suffix) else ""


class CvStore:
    """Save, resolve, delete and enumerate CV files under *root*."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def open(self) -> None:
        """Create the root directory if needed."""
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CvStoreError(f"Cannot create upload folder {self.root}: {exc}") from exc
        logger.info("cv_store_opened", extra={"root": str(self.root)})

    def close(self) -> None:
        logger.info("cv_store_closed", extra={"root": str(self.root)})

    def _resolve(self, reference: str) -> Path | None:
        # References are bare names; anything with a path component is rejected.
        if not reference or Path(reference).name != reference or reference in (".", ".."):
            return None
        return self.root / reference

    def save(self, stream: BinaryIO, filename: str | None, prefix: str) -> str:
        """Copy *stream* into a new file and return its reference.

        The name is ``<prefix>-<8 random hex><extension of filename>``.
        """
        reference = f"{prefix}-{secrets.token_hex(4)}{_safe_suffix(filename)}"
        target = self.root / reference
        try:
            with target.open("xb") as out:
                shutil.copyfileobj(stream, out)
        except OSError as exc:
            target.unlink(missing_ok=True)
            raise CvStoreError(f"Cannot store CV file: {exc}") from exc

        logger.info(
            "cv_stored",
            extra={"reference": reference, "original_filename": filename},
        )
        return reference

    def path_for(self, reference: str) -> Path | None:
        """Return the path of a stored file, or ``None`` if it does not exist."""
        path = self._resolve(reference)
        if path is None or not path.is_file():
            return None
        return path

    def delete(self, reference: str) -> bool:
        """Remove a stored file.  Returns ``False`` if there was nothing to remove."""
        path = self._resolve(reference)
        if path is None or not path.exists():
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise CvStoreError(f"Cannot delete CV file {reference}: {exc}") from exc
        logger.info("cv_deleted", extra={"reference": reference})
        return True

    def list_references(self, min_age_seconds: float = 0) -> list[str]:
        """Return references of stored files last modified at least
        *min_age_seconds* ago, sorted by name."""
        if not self.root.is_dir():
            return []
        cutoff = time.time() - min_age_seconds
        references: list[str] = []
        for path in self.root.iterdir():
            if path.name.startswith("."):
                continue
            try:
                stat = path.stat()
            except FileNotFoundError:
                continue  # removed since iterdir()
            if S_ISREG(stat.st_mode) and stat.st_mtime <= cutoff:
                references.append(path.name)
        return sorted(references)

    def is_writable(self) -> bool:
        """Check the root directory exists and accepts new files."""
        if not self.root.is_dir():
            return False
        probe = self.root / f".probe-{secrets.token_hex(4)}"
        try:
            probe.touch()
            probe.unlink()
        except OSError:
            return False
        return True
