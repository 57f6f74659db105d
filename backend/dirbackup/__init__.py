from dirbackup.logger import backup_context, configure_logger, get_logger
from dirbackup.services import create_backup, delete_backup, list_backups, restore_from_backup

__version__ = "0.1.0"
