"""
Ledger storage - single JSON document with rolling backups

The scores document is only ever replaced through write-to-temp + os.replace,
so readers (including the backup copier) never see a half-written file.

Backups are byte copies named `<stem>_<label>_<timestamp><suffix>` inside the
backup directory, where the timestamp is UTC ISO-8601 with ':' swapped for '-'
so the name is valid on every filesystem. Listing order is newest first by
that embedded timestamp; files in the directory that do not follow the naming
scheme are never listed, rotated or recovered from.

Failure policy:
- load() never raises; it walks the backups newest-first and finally returns
  an empty ledger.
- save(), create_backup() and restore_from_backup() log and return False on
  I/O errors. restore_from_backup() also returns False for a backup that does
  not parse, and raises BackupNotFoundError for an entry that no longer exists.
"""

import json
import logging
import os
import re
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional, Union

from bo7_scoreboard.constants import BackupConstants
from bo7_scoreboard.data_models.ledger import BackupEntry, Ledger
from bo7_scoreboard.utils.ledger_exceptions import BackupNotFoundError, StorageReadError

logger = logging.getLogger(__name__)

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S.%fZ"
_BACKUP_NAME = re.compile(
    r"^(?P<stem>.+)_(?P<label>[a-z\-]+)_(?P<stamp>\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.\d{6}Z)$"
)


class LedgerRepository:
    """Loads and saves the ledger document and manages its backups."""

    def __init__(
        self,
        data_file: Union[str, Path],
        backup_dir: Union[str, Path],
        max_backups: int = BackupConstants.DEFAULT_MAX_BACKUPS
    ):
        self.data_file = Path(data_file)
        self.backup_dir = Path(backup_dir)
        self.max_backups = max_backups

    # ------------------------------------------------------------------
    # Primary document
    # ------------------------------------------------------------------

    def load(self) -> Ledger:
        """
        Read the ledger, recovering from the newest readable backup on failure.

        A missing primary file is not an error and yields an empty ledger.
        A recovered backup is written back as the new primary file.
        """
        if not self.data_file.exists():
            logger.debug(f"No ledger file at {self.data_file}, starting empty")
            return Ledger()

        try:
            return self._read_document(self.data_file)
        except StorageReadError as e:
            logger.error(f"Failed to load ledger: {e}", exc_info=True)

        for entry in self.list_backups():
            try:
                ledger = self._read_document(entry.path)
            except StorageReadError as e:
                logger.warning(f"Backup {entry.name} is unreadable, trying an older one: {e}")
                continue

            logger.warning(f"Recovered ledger from backup {entry.name}")
            if not self.save(ledger):
                logger.error("Recovered ledger could not be written back to primary storage")
            return ledger

        logger.error("No readable backup found, falling back to an empty ledger")
        return Ledger()

    def save(self, ledger: Ledger) -> bool:
        """Serialize and atomically replace the primary file. Returns False on failure."""
        try:
            payload = json.dumps(ledger.to_dict(), indent=2, ensure_ascii=False)
            self._atomic_write(self.data_file, payload.encode("utf-8"))
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving ledger to {self.data_file}: {e}", exc_info=True)
            return False
        return True

    def _read_document(self, path: Path) -> Ledger:
        try:
            content = path.read_bytes()
        except OSError as e:
            raise StorageReadError(path, str(e)) from e
        return self._parse_document(path, content)

    @staticmethod
    def _parse_document(path: Path, content: bytes) -> Ledger:
        try:
            return Ledger.from_dict(json.loads(content.decode("utf-8")))
        except (UnicodeDecodeError, ValueError, TypeError, KeyError) as e:
            raise StorageReadError(path, str(e)) from e

    @staticmethod
    def _atomic_write(path: Path, content: bytes):
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(tmp_fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except BaseException:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    def create_backup(self, label: str = BackupConstants.SCHEDULED_LABEL) -> Optional[BackupEntry]:
        """
        Copy the primary file into the backup directory, then rotate.

        Returns:
            The new BackupEntry, or None if there was nothing to copy or the copy failed
        """
        if not self.data_file.exists():
            logger.warning(f"Skipping backup: {self.data_file} does not exist")
            return None

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            target = self._next_backup_path(label)
            content = self.data_file.read_bytes()
            self._atomic_write(target, content)
        except OSError as e:
            logger.error(f"Error creating backup of {self.data_file}: {e}", exc_info=True)
            return None

        logger.info(f"Backup created: {target.name}")
        self.rotate_backups()
        return self._entry_for(target)

    def _next_backup_path(self, label: str) -> Path:
        now = datetime.now(timezone.utc)
        while True:
            name = f"{self.data_file.stem}_{label}_{now.strftime(_TIMESTAMP_FORMAT)}{self.data_file.suffix}"
            target = self.backup_dir / name
            if not target.exists():
                return target
            now += timedelta(microseconds=1)

    def rotate_backups(self, max_count: Optional[int] = None) -> int:
        """Delete every backup beyond the newest max_count. Returns how many were removed."""
        max_count = self.max_backups if max_count is None else max_count
        removed = 0
        for entry in self.list_backups()[max(max_count, 0):]:
            try:
                entry.path.unlink()
                removed += 1
                logger.info(f"Deleted old backup: {entry.name}")
            except OSError as e:
                logger.error(f"Error deleting old backup {entry.name}: {e}")
        return removed

    def list_backups(self) -> List[BackupEntry]:
        """All backups of this ledger, newest first."""
        if not self.backup_dir.is_dir():
            return []

        entries = []
        for path in self.backup_dir.iterdir():
            if not path.is_file():
                continue
            entry = self._entry_for(path)
            if entry is not None:
                entries.append(entry)

        entries.sort(key=lambda entry: (entry.created_at, entry.name), reverse=True)
        return entries

    def get_backup(self, name: str) -> BackupEntry:
        """Look up a backup by file name."""
        # Names come from users; never let them point outside the backup directory
        if Path(name).name != name:
            raise BackupNotFoundError(name)
        entry = self._entry_for(self.backup_dir / name)
        if entry is None:
            raise BackupNotFoundError(name)
        return entry

    def _entry_for(self, path: Path) -> Optional[BackupEntry]:
        match = _BACKUP_NAME.match(path.stem)
        if not match or match.group("stem") != self.data_file.stem or path.suffix != self.data_file.suffix:
            return None

        try:
            stat = path.stat()
        except OSError:
            return None

        try:
            created_at = datetime.strptime(match.group("stamp"), _TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            return None
        return BackupEntry(
            name=path.name, path=path, created_at=created_at, label=match.group("label"), size=stat.st_size
        )

    def restore_from_backup(self, entry: Union[BackupEntry, str]) -> bool:
        """
        Replace the primary file with a backup's bytes.

        The backup must parse as a ledger; otherwise nothing is touched and False
        is returned. The current primary file is then saved as a pre-restore
        backup; failing to do so is logged but does not stop the restore.

        Raises:
            BackupNotFoundError: If the backup no longer exists
        """
        name = entry if isinstance(entry, str) else entry.name
        source = self.get_backup(name)

        try:
            # Read first: rotation after the pre-restore snapshot may delete the source
            content = source.path.read_bytes()
        except FileNotFoundError:
            raise BackupNotFoundError(name)
        except OSError as e:
            logger.error(f"Error reading backup {name}: {e}", exc_info=True)
            return False

        try:
            self._parse_document(source.path, content)
        except StorageReadError as e:
            logger.error(f"Refusing to restore unreadable backup {name}: {e}")
            return False

        if self.data_file.exists():
            if self.create_backup(label=BackupConstants.PRE_RESTORE_LABEL) is None:
                logger.warning("Pre-restore backup failed, restoring anyway")

        try:
            self._atomic_write(self.data_file, content)
        except OSError as e:
            logger.error(f"Error restoring backup {name}: {e}", exc_info=True)
            return False

        logger.info(f"Restored ledger from backup {name}")
        return True
