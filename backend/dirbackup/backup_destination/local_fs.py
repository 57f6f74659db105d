import os
from datetime import datetime
from pathlib import Path
from typing import Optional

from dirbackup.base import BaseBackupDestinationManager
from dirbackup.exceptions import (
    BackupError,
    BackupNotFound,
    BackupOutsideDestination,
    DestinationNotFound,
    DestinationUnwritable,
)
from dirbackup.logger import get_logger
from dirbackup.models.structs import BACKUP_EXTENSION, BACKUP_PREFIX, BackupDetails
from dirbackup.utils import parse_timestamp

logger = get_logger("backup_destination")


class LocalFSBackupDestination(BaseBackupDestinationManager):
    def __init__(self, backup_dir: str, create: bool = True) -> None:
        super().__init__(backup_dir)
        self.backup_dir = self.backup_dir.expanduser()
        if create:
            self._ensure_backup_dir_exists()
        elif not self.backup_dir.is_dir():
            raise DestinationNotFound(
                f"Backup directory does not exist: {self.backup_dir}",
                path=str(self.backup_dir),
            )

    def _ensure_backup_dir_exists(self) -> None:
        """Ensure backup directory exists and is writable, create if necessary"""
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DestinationUnwritable(
                f"Cannot create backup directory {self.backup_dir}: {e}",
                path=str(self.backup_dir),
            ) from e

        if not os.access(self.backup_dir, os.W_OK | os.X_OK):
            raise DestinationUnwritable(
                f"Backup directory is not writable: {self.backup_dir}",
                path=str(self.backup_dir),
            )

    def build_backup_path(self, timestamp: str) -> Path:
        return self.backup_dir / f"{BACKUP_PREFIX}{timestamp}{BACKUP_EXTENSION}"

    def list_backups(self) -> list[BackupDetails]:
        """List all backups stored in the local filesystem

        Files not named like a backup are ignored.

        Returns:
            list[BackupDetails]: List of backup details, newest first
        """
        backups = []

        if not self.backup_dir.exists():
            return backups

        for filename in os.listdir(self.backup_dir):
            filepath = self.backup_dir / filename

            # Skip directories and dangling links
            if not filepath.is_file():
                continue

            try:
                info = self._parse_filename(filename)
            except ValueError:
                continue

            try:
                stat_info = filepath.stat()
            except OSError as e:
                logger.warning("backup_stat_failed", path=str(filepath), error=str(e))
                continue

            backups.append(
                BackupDetails(
                    name=filename,
                    path=str(filepath),
                    size=stat_info.st_size,
                    created_at=parse_timestamp(info["timestamp"]),
                    modified=datetime.fromtimestamp(stat_info.st_mtime).isoformat(),
                )
            )

        # Timestamps in names sort chronologically (newest first)
        backups.sort(key=lambda x: (x.created_at, x.name), reverse=True)

        return backups

    def _resolve_backup_path(self, backup_path: str) -> Path:
        path = Path(backup_path)
        if not path.is_absolute():
            path = self.backup_dir / path
        return path

    def delete_backup(self, backup_path: str) -> None:
        """Delete specified backup from local filesystem

        Args:
            backup_path: Backup file name or path inside the backup directory
        """
        path = self._resolve_backup_path(backup_path)

        # Resolve the parent only so a linked backup is judged by where it sits
        if not path.parent.resolve().is_relative_to(self.backup_dir.resolve()):
            raise BackupOutsideDestination(
                f"Backup path is outside backup directory: {backup_path}", path=str(path)
            )

        if not path.is_file():
            raise BackupNotFound(f"Backup file not found: {path}", path=str(path))

        path.unlink()

    def delete_extra_backups(self, keep_n: int = 5, keep: Optional[Path] = None) -> list[str]:
        """Delete extra backups from local filesystem, keeping only the most recent N

        Args:
            keep_n: Number of backups to keep (default: 5)
            keep: Backup that is never deleted and takes one of the keep_n slots,
                even when other names sort after it

        Returns:
            list[str]: Paths that were deleted
        """
        deleted = []
        backups = self.list_backups()

        if keep is not None:
            pinned = [b for b in backups if Path(b.path) == Path(keep)]
            backups = [b for b in backups if Path(b.path) != Path(keep)]
            keep_n = max(keep_n - len(pinned), 0)

        # Backups are already sorted newest first
        for backup in backups[keep_n:]:
            try:
                self.delete_backup(backup.path)
                deleted.append(backup.path)
            except (OSError, BackupError) as e:
                logger.warning("backup_deletion_failed", path=backup.path, error=str(e))

        return deleted

    def test_connection(self) -> bool:
        """Test whether the local filesystem backup directory is accessible

        Returns:
            bool: True if directory is accessible and writable, False otherwise
        """
        if not self.backup_dir.is_dir():
            logger.warning("destination_missing", path=str(self.backup_dir))
            return False

        if not os.access(self.backup_dir, os.R_OK):
            logger.warning("destination_not_readable", path=str(self.backup_dir))
            return False

        if not os.access(self.backup_dir, os.W_OK):
            logger.warning("destination_not_writable", path=str(self.backup_dir))
            return False

        return True
