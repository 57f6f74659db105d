from dirbackup.backup_source.directory import DirectoryBackupManager
