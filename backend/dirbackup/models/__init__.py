from dirbackup.models.structs import (
    BACKUP_EXTENSION,
    BACKUP_PREFIX,
    BackupArtifact,
    BackupDetails,
    BackupRequest,
    BackupStatus,
)
