from datetime import datetime, date, timedelta, timezone
from enum import Enum
from typing import List

from pydantic import BaseModel, field_validator


class PunchKind(str, Enum):
    IN = "I"
    OUT = "O"


class PunchEvent(BaseModel):
    timestamp: datetime
    kind: PunchKind

    @field_validator("timestamp")
    @classmethod
    def as_utc_seconds(cls, value: datetime) -> datetime:
        # the log stores whole seconds in UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).replace(microsecond=0)


class Session(BaseModel):
    start: datetime
    end: datetime
    is_open: bool = False

    @property
    def duration(self) -> timedelta:
        return max(self.end - self.start, timedelta(0))


class DailyDuration(BaseModel):
    day: date
    duration: timedelta


class PeriodSummary(BaseModel):
    start: datetime
    days: List[DailyDuration]
    total: timedelta
