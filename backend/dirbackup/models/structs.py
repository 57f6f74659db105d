from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


BACKUP_PREFIX = "backup_"
BACKUP_EXTENSION = ".tar.gz"


class BackupStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class BackupRequest(BaseModel):
    source_path: Path
    destination_dir: Path
    timestamp: str = Field(pattern=r"^\d{8}_\d{6}$")


class BackupArtifact(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_path: Path
    created_at: datetime
    status: BackupStatus
    size: int = 0
    entries: list[str] = Field(default_factory=list)


class BackupDetails(BaseModel):
    name: str
    path: str
    size: int
    created_at: datetime
    modified: str
