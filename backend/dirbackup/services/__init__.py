from dirbackup.services.backup import (
    create_backup,
    delete_backup,
    list_backups,
    restore_from_backup,
)
