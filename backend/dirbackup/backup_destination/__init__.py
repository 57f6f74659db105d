from dirbackup.backup_destination.local_fs import LocalFSBackupDestination
