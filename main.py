import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional

from models.schema import PunchEvent, PunchKind, Session
from utils.errors import AlreadyPunchedIn, AlreadyPunchedOut
from utils.helper import append_punch, load_punches


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: Optional[datetime]) -> datetime:
    if moment is None:
        return utc_now()
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def current_state(punches: List[PunchEvent]) -> PunchKind:
    if not punches:
        return PunchKind.OUT
    return punches[-1].kind


def _record_punch(log_path: Path, kind: PunchKind, now: Optional[datetime]) -> PunchEvent:
    punches = load_punches(log_path)
    state = current_state(punches)

    if state == kind == PunchKind.IN:
        since = punches[-1].timestamp
        logging.warning(f"Duplicate IN punch, already in since {since.isoformat()}")
        raise AlreadyPunchedIn("Already punched in, punch out first!")
    if state == kind == PunchKind.OUT:
        logging.warning("Duplicate OUT punch, not punched in")
        raise AlreadyPunchedOut("Already punched out, punch in first!")

    new_punch = PunchEvent(timestamp=as_utc(now), kind=kind)
    append_punch(log_path, new_punch)
    logging.info(f"Recorded {kind.name} punch at {new_punch.timestamp.isoformat()}")
    return new_punch


def punch_in(log_path: Path, now: Optional[datetime] = None) -> PunchEvent:
    return _record_punch(log_path, PunchKind.IN, now)


def punch_out(log_path: Path, now: Optional[datetime] = None) -> PunchEvent:
    return _record_punch(log_path, PunchKind.OUT, now)


def sessions(punches: List[PunchEvent], now: Optional[datetime] = None) -> Iterator[Session]:
    """Pair each IN with the next OUT.

    A trailing IN without an OUT yields an open session ending at ``now``.
    A repeated IN keeps the earlier start, and an OUT with nothing open is
    skipped; both are logged as warnings.
    """
    last_in = None

    for punch in punches:
        if punch.kind == PunchKind.IN:
            if last_in is not None:
                logging.warning(f"Ignoring repeated IN at {punch.timestamp.isoformat()}, "
                                f"already in since {last_in.isoformat()}")
                continue
            last_in = punch.timestamp
        elif last_in is None:
            logging.warning(f"Ignoring OUT at {punch.timestamp.isoformat()} without a matching IN")
        else:
            yield Session(start=last_in, end=max(punch.timestamp, last_in))
            last_in = None

    if last_in is not None:
        end = as_utc(now)
        yield Session(start=last_in, end=max(end, last_in), is_open=True)


def last_session(punches: List[PunchEvent], now: Optional[datetime] = None) -> Optional[Session]:
    found = None
    for session in sessions(punches, now):
        found = session
    return found
