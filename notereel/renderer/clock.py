"""Wall-clock helpers: today's date and weekday in the configured timezone."""
from __future__ import annotations

import datetime
from typing import Callable
from zoneinfo import ZoneInfo

WEEKDAYS: tuple[str, ...] = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

Clock = Callable[[], datetime.datetime]


def system_clock() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def local_now(tz: str, clock: Clock = system_clock) -> datetime.datetime:
    """Current time converted to *tz* (IANA name, e.g. "Asia/Tokyo")."""
    return clock().astimezone(ZoneInfo(tz))


def weekday_code(moment: datetime.datetime) -> str:
    """3-letter lower-case weekday ("mon" … "sun")."""
    return WEEKDAYS[moment.weekday()]


def date_stamp(moment: datetime.datetime) -> str:
    return moment.strftime("%Y-%m-%d")
