"""
Time-of-day arithmetic for slots and working hours.

Every time of day is handled as minutes since midnight, so ordering and
containment never depend on how a string happens to be formatted.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from ..config import SCHEDULER_TIMEZONE

LAST_MINUTE_OF_DAY = 23 * 60 + 59

_HHMM_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


class InvalidTimeFormat(ValueError):
    """Raised when a time of day is not a valid HH:MM between 00:00 and 23:59"""

    def __init__(self, value):
        self.value = value
        super().__init__(
            f"Invalid time format: {value!r}. Expected HH:MM between 00:00 and 23:59"
        )


def to_minutes(value: str) -> int:
    """Parse ``HH:MM`` into minutes since midnight.

    >>> to_minutes("08:30")
    510
    """
    if not isinstance(value, str):
        raise InvalidTimeFormat(value)

    match = _HHMM_PATTERN.match(value.strip())
    if not match:
        raise InvalidTimeFormat(value)

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(value)

    return hours * 60 + minutes


def format_minutes(minutes: int) -> str:
    """Render minutes since midnight as zero-padded ``HH:MM``"""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_12h(minutes: int) -> str:
    hours, mins = divmod(minutes, 60)
    period = "AM" if hours < 12 else "PM"
    display_hour = hours % 12 or 12
    return f"{display_hour}:{mins:02d} {period}"


def generate_time_label(start_minute: int, end_minute: int) -> str:
    """Human label for a slot, e.g. ``8:00 AM - 10:00 AM``"""
    return f"{format_12h(start_minute)} - {format_12h(end_minute)}"


@dataclass(frozen=True)
class TimeWindow:
    """A closed [start, end] interval of minutes within a single day"""

    start: int
    end: int

    def __post_init__(self):
        for bound in (self.start, self.end):
            if not 0 <= bound <= LAST_MINUTE_OF_DAY:
                raise InvalidTimeFormat(bound)
        if self.start >= self.end:
            raise ValueError(
                f"Window start {format_minutes(self.start)} must be before end {format_minutes(self.end)}"
            )

    @classmethod
    def parse(cls, start: str, end: str) -> "TimeWindow":
        return cls(to_minutes(start), to_minutes(end))

    def contains(self, inner: "TimeWindow") -> bool:
        return contains(self, inner)

    def has_ended(self, now_minutes: int) -> bool:
        return has_ended(self, now_minutes)

    def __str__(self) -> str:
        return f"{format_minutes(self.start)}-{format_minutes(self.end)}"


def contains(outer: TimeWindow, inner: TimeWindow) -> bool:
    """True when ``inner`` lies entirely within ``outer`` (bounds inclusive)"""
    return outer.start <= inner.start and inner.end <= outer.end


def has_ended(window: TimeWindow, now_minutes: int) -> bool:
    """True once the clock is strictly past the window's end minute"""
    return window.end < now_minutes


def local_now() -> datetime:
    """Current wall-clock time as a naive datetime in the scheduling timezone"""
    if SCHEDULER_TIMEZONE:
        return datetime.now(ZoneInfo(SCHEDULER_TIMEZONE)).replace(tzinfo=None)
    return datetime.now()


def minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute
