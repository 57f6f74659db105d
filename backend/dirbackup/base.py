import inspect
import os
import re
from pathlib import Path
from typing import Optional

from dirbackup.models.structs import BackupDetails


class BaseBackupManager:
    def __init__(self, source_path: str) -> None:
        self.source_path = Path(source_path)

    def create_backup(self, backup_path: Path) -> list[str]:
        """Write an archive of the source to backup_path

        Returns:
            list[str]: Names of the archived members, in write order
        """
        raise NotImplementedError(
            f"Method {inspect.currentframe().f_code.co_name} is not implemented"  # type: ignore
        )

    def restore_from_backup(self, backup_path: Path, target_dir: Path) -> None:
        """Restore source contents from a backup

        Args:
            backup_path: Path to the backup file to restore from
            target_dir: Directory the contents should be restored into
        """
        raise NotImplementedError(
            f"Method {inspect.currentframe().f_code.co_name} is not implemented"  # type: ignore
        )

    def test_connection(self) -> bool:
        """Tests whether the source is readable"""
        raise NotImplementedError(
            f"Method {inspect.currentframe().f_code.co_name} is not implemented"  # type: ignore
        )


class BaseBackupDestinationManager:
    def __init__(self, backup_dir: str) -> None:
        self.backup_dir = Path(backup_dir)

    def build_backup_path(self, timestamp: str) -> Path:
        """Path the backup taken at timestamp is stored under"""
        raise NotImplementedError(
            f"Method {inspect.currentframe().f_code.co_name} is not implemented"  # type: ignore
        )

    def list_backups(self) -> list[BackupDetails]:
        """List all backups stored in the destination

        Returns:
            list[BackupDetails]: Backups stored at the destination, newest first
        """
        raise NotImplementedError(
            f"Method {inspect.currentframe().f_code.co_name} is not implemented"  # type: ignore
        )

    def delete_backup(self, backup_path: str) -> None:
        """Delete specified backup from the destination

        Args:
            backup_path: Path of the backup to delete
        """
        raise NotImplementedError(
            f"Method {inspect.currentframe().f_code.co_name} is not implemented"  # type: ignore
        )

    def delete_extra_backups(self, keep_n: int = 5, keep: Optional[Path] = None) -> list[str]:
        """Delete extra backups from destination, keeping only the most recent N backups

        Args:
            keep_n: Number of backups to keep (default: 5)
            keep: Backup that must survive regardless of its name
        """
        raise NotImplementedError(
            f"Method {inspect.currentframe().f_code.co_name} is not implemented"  # type: ignore
        )

    def test_connection(self) -> bool:
        """Tests whether the destination is writable"""
        raise NotImplementedError(
            f"Method {inspect.currentframe().f_code.co_name} is not implemented"  # type: ignore
        )

    @staticmethod
    def _parse_filename(filename: str):
        """Parse backup filename and extract info"""
        filename = os.path.basename(filename)

        pattern = r'^backup_(\d{8}_\d{6})\.(tar\.gz)$'

        match = re.match(pattern, filename)

        if not match:
            raise ValueError(f"Invalid backup filename format: {filename}")

        timestamp, extension = match.groups()

        return {
            'timestamp': timestamp,
            'extension': extension
        }
