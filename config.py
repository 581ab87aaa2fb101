import logging
import os
from pathlib import Path

from utils.errors import UsageError

LOG_FILE_NAME = "punch.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(module)s: %(message)s"


def get_punch_home() -> Path:
    return Path(os.environ.get("PUNCH_HOME", Path.home() / ".punch")).expanduser()


def get_log_path() -> Path:
    override = os.environ.get("PUNCH_LOG_FILE")
    if override:
        return Path(override).expanduser()
    return get_punch_home() / LOG_FILE_NAME


def get_log_level() -> str:
    level = os.environ.get("PUNCH_LOG_LEVEL", "WARNING").upper()
    if not isinstance(logging.getLevelName(level), int):
        raise UsageError(f"unknown PUNCH_LOG_LEVEL {level!r}")
    return level
