"""Canonical worklog document storage with a single-slot backup.

The document lives at ``{data_dir}/worklog.md``. Before every commit the
current text is copied to ``{data_dir}/backups/worklog-backup.md``; the
existence of that file is what makes undo possible, so a backup of an
empty document is an empty file, not a missing one.

All writes go through :func:`atomic_write` so a crash or a full disk never
leaves a truncated document behind.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
import threading
from collections.abc import Iterator
from pathlib import Path

from worklog.errors import NoPriorVersion, StorageError

logger = logging.getLogger(__name__)

BACKUP_DIRNAME = "backups"
BACKUP_FILENAME = "worklog-backup.md"


def atomic_write(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` via a temp file and ``os.replace``.

    The temp file is created in the target directory so the final rename
    never crosses filesystems. On failure the temp file is removed and the
    original file, if any, is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


class WorklogStore:
    """Owns the worklog document and its one backup slot.

    Mutations are serialized with a re-entrant lock. Callers that need a
    read-modify-write sequence to be atomic (the entry organizer) hold
    :meth:`locked` around the whole sequence.
    """

    def __init__(self, data_dir: Path, document_name: str = "worklog.md") -> None:
        self._data_dir = data_dir
        self._document_path = data_dir / document_name
        self._backup_path = data_dir / BACKUP_DIRNAME / BACKUP_FILENAME
        self._lock = threading.RLock()

    @property
    def document_path(self) -> Path:
        return self._document_path

    @property
    def backup_path(self) -> Path:
        return self._backup_path

    @contextlib.contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the store's mutation lock for the duration of the block."""
        with self._lock:
            yield

    def read(self) -> str:
        """Return the current document text, or ``""`` if none exists yet.

        Raises:
            StorageError: If the document exists but cannot be read.
        """
        return self._read_or_none(self._document_path, "worklog") or ""

    def has_backup(self) -> bool:
        return self._backup_path.exists()

    def commit(self, new_text: str) -> None:
        """Back up the current document, then replace it with ``new_text``.

        If writing the new document fails, the backup slot is put back the
        way it was before the call and the old document stays in place.

        Raises:
            StorageError: If the backup or the document cannot be written.
        """
        with self._lock:
            current = self.read()
            previous_backup = self._read_or_none(self._backup_path, "backup")

            try:
                atomic_write(self._backup_path, current)
            except OSError as exc:
                raise StorageError(f"Failed to create backup: {exc}") from exc

            try:
                atomic_write(self._document_path, new_text)
            except OSError as exc:
                self._reset_backup(previous_backup)
                raise StorageError(f"Failed to write updated worklog: {exc}") from exc

            logger.info(
                "Committed worklog (%d -> %d chars)", len(current), len(new_text)
            )

    def undo(self) -> str:
        """Restore the backup over the document and clear the backup slot.

        The backup is moved out of the slot before the document is
        rewritten, so a restored version can never be restored twice.

        Returns:
            The restored document text.

        Raises:
            NoPriorVersion: If there is no backup.
            StorageError: If the restore cannot be written. The backup slot
                is put back in that case.
        """
        with self._lock:
            backup = self._read_or_none(self._backup_path, "backup")
            if backup is None:
                raise NoPriorVersion()

            claimed = self._backup_path.with_name(f".{BACKUP_FILENAME}.used")
            try:
                os.replace(self._backup_path, claimed)
            except OSError as exc:
                raise StorageError(f"Failed to claim backup: {exc}") from exc

            try:
                atomic_write(self._document_path, backup)
            except OSError as exc:
                try:
                    os.replace(claimed, self._backup_path)
                except OSError:
                    logger.error("Could not return backup to %s", self._backup_path)
                raise StorageError(f"Failed to restore from backup: {exc}") from exc

            try:
                claimed.unlink()
            except OSError as exc:
                logger.warning("Could not remove used backup %s: %s", claimed, exc)

            logger.info("Restored worklog from backup (%d chars)", len(backup))
            return backup

    def _read_or_none(self, path: Path, label: str) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f"Failed to read {label} at {path}: {exc}") from exc

    def _reset_backup(self, previous: str | None) -> None:
        """Return the backup slot to ``previous`` after a failed commit."""
        try:
            if previous is None:
                self._backup_path.unlink(missing_ok=True)
            else:
                atomic_write(self._backup_path, previous)
        except OSError:
            logger.error(
                "Could not reset backup slot at %s after failed commit",
                self._backup_path,
            )
