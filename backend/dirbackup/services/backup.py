from pathlib import Path
from typing import Optional

from dirbackup.backup_destination import LocalFSBackupDestination
from dirbackup.backup_source import DirectoryBackupManager
from dirbackup.exceptions import ArchiveFailed, BackupError
from dirbackup.logger import backup_context, get_logger
from dirbackup.models.structs import BackupArtifact, BackupDetails, BackupRequest, BackupStatus
from dirbackup.utils import make_timestamp, parse_timestamp

logger = get_logger("backup")


def _file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return 0


def create_backup(
    source_path: str,
    destination_dir: str,
    keep_n: Optional[int] = None,
    verify: bool = True,
) -> BackupArtifact:
    """Archive the contents of source_path into destination_dir

    Args:
        source_path: Directory whose contents are archived
        destination_dir: Directory receiving backup_<timestamp>.tar.gz, created if missing
        keep_n: When set, keep only the newest keep_n backups after a successful run
        verify: Re-read the written archive before reporting success

    Returns:
        BackupArtifact: The finalized artifact with status success

    Raises:
        SourceNotFound, SourcePermissionDenied, DestinationUnwritable, ArchiveFailed
    """
    timestamp = make_timestamp()

    with backup_context(source=source_path, destination=destination_dir):
        logger.info("backup_started", timestamp=timestamp)

        backup_manager = DirectoryBackupManager(source_path)
        try:
            source = backup_manager.validate()
            backup_destination = LocalFSBackupDestination(destination_dir)
        except BackupError as e:
            logger.error("backup_failed", error=e.message)
            raise

        request = BackupRequest(
            source_path=source,
            destination_dir=backup_destination.backup_dir,
            timestamp=timestamp,
        )
        backup_path = backup_destination.build_backup_path(request.timestamp)
        created_at = parse_timestamp(request.timestamp)

        try:
            logger.info("creating_archive", backup_path=str(backup_path))
            members = backup_manager.create_backup(backup_path)

            if verify:
                backup_manager.verify_backup(backup_path)

        except ArchiveFailed as e:
            # Partial archives stay on disk
            e.artifact = BackupArtifact(
                file_path=backup_path,
                created_at=created_at,
                status=BackupStatus.FAILURE,
                size=_file_size(backup_path),
            )
            logger.error("backup_failed", error=e.message, backup_path=str(backup_path), exc_info=True)
            raise

        artifact = BackupArtifact(
            file_path=backup_path,
            created_at=created_at,
            status=BackupStatus.SUCCESS,
            size=_file_size(backup_path),
            entries=members,
        )
        logger.info(
            "backup_completed",
            backup_path=str(artifact.file_path),
            size=artifact.size,
            entries=len(artifact.entries),
        )

        if keep_n:
            deleted = backup_destination.delete_extra_backups(keep_n, keep=artifact.file_path)
            if deleted:
                logger.info("old_backups_deleted", count=len(deleted), keep_n=keep_n)

        return artifact


def list_backups(destination_dir: str) -> list[BackupDetails]:
    backup_destination = LocalFSBackupDestination(destination_dir, create=False)
    return backup_destination.list_backups()


def delete_backup(destination_dir: str, backup_path: str) -> None:
    backup_destination = LocalFSBackupDestination(destination_dir, create=False)
    backup_destination.delete_backup(backup_path)
    logger.info("backup_deleted", destination=destination_dir, backup_path=backup_path)


def restore_from_backup(backup_path: str, target_dir: str) -> None:
    """Extract a backup into target_dir, creating it if needed"""
    with backup_context(source=backup_path, destination=target_dir):
        logger.info("restore_started")
        try:
            DirectoryBackupManager(target_dir).restore_from_backup(Path(backup_path), Path(target_dir))
        except BackupError as e:
            logger.error("restore_failed", error=e.message, exc_info=True)
            raise
        logger.info("restore_completed")
