import os
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator


class Settings(BaseModel):
    log_level: str = "WARNING"
    log_format: Literal["json", "console"] = "json"
    keep_n: Optional[int] = Field(default=None, ge=1)

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from DIRBACKUP_* environment variables"""
        values = {
            "log_level": os.getenv("DIRBACKUP_LOG_LEVEL"),
            "log_format": os.getenv("DIRBACKUP_LOG_FORMAT"),
            "keep_n": os.getenv("DIRBACKUP_KEEP_N") or None,
        }
        return cls(**{k: v for k, v in values.items() if v is not None})
