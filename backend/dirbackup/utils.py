from datetime import datetime
from typing import Optional

TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


def make_timestamp(moment: Optional[datetime] = None) -> str:
    return (moment or datetime.now()).strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> datetime:
    return datetime.strptime(value, TIMESTAMP_FORMAT)


def prompt_for_path(label: str, value: Optional[str] = None) -> str:
    """Ask for a path on stdin unless one was already given"""
    while not value:
        value = input(f"Please enter the path to {label}: ").strip()
    return value
