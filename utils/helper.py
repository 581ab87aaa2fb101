import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from models.schema import PunchEvent, PunchKind
from utils.errors import StorageError

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"
TIMESTAMP_LENGTH = 19


def format_punch_line(event: PunchEvent) -> str:
    return f"{event.timestamp.strftime(TIMESTAMP_FORMAT)}_{event.kind.value}\n"


def parse_punch_line(line: str) -> PunchEvent:
    stamp, sep, marker = line.strip().rpartition("_")
    if not sep:
        raise ValueError(f"missing kind marker in {line.strip()!r}")
    try:
        kind = PunchKind(marker)
    except ValueError:
        raise ValueError(f"unknown kind marker {marker!r}") from None
    if len(stamp) != TIMESTAMP_LENGTH:
        raise ValueError(f"timestamp {stamp!r} is not in YYYY-MM-DDTHH:MM:SS form")
    timestamp = datetime.strptime(stamp, TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    return PunchEvent(timestamp=timestamp, kind=kind)


def load_punches(path: Path) -> List[PunchEvent]:
    path = Path(path)
    if not path.exists():
        logging.debug(f"No punch log at {path}, starting empty")
        return []

    try:
        with path.open("r", encoding="utf-8") as f:
            lines = f.readlines()
    except (OSError, UnicodeDecodeError) as e:
        logging.error(f"Could not read punch log {path}: {e}")
        raise StorageError(f"could not read {path}: {e}") from e

    punches = []
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            punch = parse_punch_line(line)
        except ValueError as e:
            logging.error(f"Corrupt entry in {path} line {number}: {e}")
            raise StorageError(f"{path} line {number} is corrupt: {e}") from e
        if punches and punch.timestamp < punches[-1].timestamp:
            logging.warning(f"Out-of-order entry in {path} line {number}")
        punches.append(punch)

    logging.debug(f"Loaded {len(punches)} punches from {path}")
    return punches


def get_last_punch(path: Path) -> Optional[PunchEvent]:
    punches = load_punches(path)
    if punches:
        return punches[-1]
    return None


def save_punches(path: Path, punches: List[PunchEvent]) -> None:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.writelines(format_punch_line(p) for p in punches)
                f.flush()
                os.fsync(f.fileno())
            if path.exists():
                os.chmod(tmp_name, path.stat().st_mode)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
    except OSError as e:
        logging.error(f"Could not write punch log {path}: {e}")
        raise StorageError(f"could not write {path}: {e}") from e
    logging.debug(f"Persisted {len(punches)} punches to {path}")


def append_punch(path: Path, punch: PunchEvent) -> List[PunchEvent]:
    punches = load_punches(path)
    if punches and punch.timestamp < punches[-1].timestamp:
        last = punches[-1].timestamp.strftime(TIMESTAMP_FORMAT)
        logging.error(f"Refusing punch older than last entry {last}")
        raise StorageError(f"punch at {punch.timestamp.strftime(TIMESTAMP_FORMAT)} is older than last entry {last}")
    punches.append(punch)
    save_punches(path, punches)
    return punches
