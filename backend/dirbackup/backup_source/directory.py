import gzip
import os
import tarfile
from pathlib import Path

from dirbackup.base import BaseBackupManager
from dirbackup.exceptions import (
    ArchiveFailed,
    BackupError,
    BackupNotFound,
    RestoreFailed,
    SourceNotFound,
    SourcePermissionDenied,
)
from dirbackup.logger import get_logger

logger = get_logger("backup_source")


class DirectoryBackupManager(BaseBackupManager):
    def validate(self) -> Path:
        """Check that the source is a readable directory

        Returns:
            Path: Resolved source path
        """
        source = self.source_path.expanduser()

        if not source.is_dir():
            raise SourceNotFound(
                f"Source directory not found: {source}", path=str(source)
            )

        if not os.access(source, os.R_OK | os.X_OK):
            raise SourcePermissionDenied(
                f"Source directory is not readable: {source}", path=str(source)
            )

        return source.resolve()

    def test_connection(self) -> bool:
        """Test whether the source directory can be archived

        Returns:
            bool: True if the directory exists and is readable, False otherwise
        """
        try:
            self.validate()
            return True
        except BackupError as e:
            logger.warning("source_unavailable", reason=e.message)
            return False

    def create_backup(self, backup_path: Path) -> list[str]:
        """Archive the contents of the source directory into a tar.gz file

        Top-level entries are stored under their own names, so extracting the
        archive yields the contents without a wrapping directory.

        Args:
            backup_path: File to write, overwritten if it exists

        Returns:
            list[str]: Archived member names in write order
        """
        source = self.validate()
        members: list[str] = []

        def _track(tarinfo: tarfile.TarInfo) -> tarfile.TarInfo:
            members.append(tarinfo.name)
            logger.debug("member_archived", member=tarinfo.name)
            return tarinfo

        try:
            with tarfile.open(backup_path, "w:gz") as tar:
                for entry in sorted(os.listdir(source)):
                    tar.add(source / entry, arcname=entry, filter=_track)
        except (OSError, tarfile.TarError) as e:
            raise ArchiveFailed(
                f"Archiving {source} failed: {e}", path=str(backup_path)
            ) from e

        return members

    def verify_backup(self, backup_path: Path) -> list[str]:
        """Re-read a closed archive end to end

        Returns:
            list[str]: Member names found in the archive
        """
        try:
            # Full decompression checks the gzip CRC and length trailer
            with gzip.open(backup_path, "rb") as stream:
                while stream.read(1024 * 1024):
                    pass

            with tarfile.open(backup_path, "r:gz") as tar:
                return tar.getnames()
        except (OSError, EOFError, tarfile.TarError) as e:
            raise ArchiveFailed(
                f"Archive verification failed: {e}", path=str(backup_path)
            ) from e

    def restore_from_backup(self, backup_path: Path, target_dir: Path) -> None:
        """Extract a backup into target_dir

        Leading slashes are stripped, members resolving outside the target are
        refused and symbolic links are restored as stored.

        Args:
            backup_path: Path to the tar.gz file
            target_dir: Directory to extract into, created if missing
        """
        backup_path = Path(backup_path)
        target_dir = Path(target_dir)

        if not backup_path.is_file():
            raise BackupNotFound(
                f"Backup file not found: {backup_path}", path=str(backup_path)
            )

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            with tarfile.open(backup_path, "r:gz") as tar:
                tar.extractall(target_dir, filter="tar")
        except (OSError, EOFError, tarfile.TarError) as e:
            raise RestoreFailed(
                f"Restoring {backup_path} failed: {e}", path=str(backup_path)
            ) from e
