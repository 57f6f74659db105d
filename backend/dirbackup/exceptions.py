"""Errors raised by the backup services.

Every error maps to exit status 1 in the CLI; nothing is retried.
"""
from typing import Optional


class BackupError(Exception):
    """Base class for all backup failures"""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path


class SourceNotFound(BackupError):
    """Source path does not exist or is not a directory"""


class SourcePermissionDenied(BackupError):
    """Source directory exists but cannot be read or traversed"""


class DestinationUnwritable(BackupError):
    """Destination directory cannot be created or written to"""


class DestinationNotFound(BackupError):
    """Destination directory does not exist"""


class ArchiveFailed(BackupError):
    """Writing or verifying the archive failed"""

    def __init__(self, message: str, path: Optional[str] = None, artifact=None):
        super().__init__(message, path)
        self.artifact = artifact


class BackupNotFound(BackupError):
    """Requested backup file does not exist"""


class BackupOutsideDestination(BackupError):
    """Backup path points outside the backup directory"""


class RestoreFailed(BackupError):
    """Backup could not be extracted"""
