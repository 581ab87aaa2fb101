import logging
from collections import defaultdict
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional

from main import as_utc, last_session, sessions
from models.schema import DailyDuration, PeriodSummary, PunchEvent, Session
from utils.errors import StateError


def format_duration(duration: timedelta) -> str:
    minutes = max(int(duration.total_seconds()) // 60, 0)
    return f"{minutes // 60:02d}h{minutes % 60:02d}m"


def format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")


def card(punches: List[PunchEvent], now: Optional[datetime] = None) -> str:
    session = last_session(punches, now)
    if session is None:
        raise StateError("No punches recorded yet - punch in first!")

    if session.is_open:
        return f"Punched in since {format_timestamp(session.start)} ({format_duration(session.duration)})"
    return (
        f"Previously punched in between {format_timestamp(session.start)} "
        f"and {format_timestamp(session.end)} ({format_duration(session.duration)})"
    )


def period_start(now: datetime, period: str) -> datetime:
    midnight = now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "week":
        return midnight - timedelta(days=midnight.weekday())
    if period == "month":
        return midnight.replace(day=1)
    raise ValueError(f"Unknown period: {period}")


def daily_durations(intervals: Iterable[Session], since: datetime, until: datetime) -> List[DailyDuration]:
    """Split sessions at UTC midnight and total the overlap per calendar day.

    Only the part of each session inside ``[since, until]`` counts. Seconds
    are summed exactly; rounding to minutes happens when rendering.
    """
    seconds: Dict[date, float] = defaultdict(float)

    for session in intervals:
        start = max(session.start, since)
        end = min(session.end, until)
        while start < end:
            next_midnight = start.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)
            piece_end = min(end, next_midnight)
            seconds[start.date()] += (piece_end - start).total_seconds()
            start = piece_end

    return [
        DailyDuration(day=day, duration=timedelta(seconds=total))
        for day, total in sorted(seconds.items())
        if total > 0
    ]


def summarize(punches: List[PunchEvent], period: str, now: Optional[datetime] = None) -> PeriodSummary:
    now = as_utc(now)
    start = period_start(now, period)
    days = daily_durations(sessions(punches, now), start, now)
    total = sum((d.duration for d in days), timedelta(0))
    logging.debug(f"{period} summary since {start.isoformat()}: {len(days)} days, {total}")
    return PeriodSummary(start=start, days=days, total=total)


def render_summary(summary: PeriodSummary) -> str:
    lines = [f"{d.day.isoformat()}: {format_duration(d.duration)}" for d in summary.days]
    lines.append("")
    lines.append(f"Total: {format_duration(summary.total)}")
    return "\n".join(lines)


def card_week(punches: List[PunchEvent], now: Optional[datetime] = None) -> str:
    return render_summary(summarize(punches, "week", now))


def card_month(punches: List[PunchEvent], now: Optional[datetime] = None) -> str:
    return render_summary(summarize(punches, "month", now))
