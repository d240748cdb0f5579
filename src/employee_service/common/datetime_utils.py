from __future__ import annotations

from datetime import date, datetime, time, tzinfo
from typing import Protocol

import pytz

from ..core.constants import DEFAULT_TIMEZONE_OFFSET_MINUTES


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock:
    """Wall clock. Wrapped so tests can inject a fixed time."""

    def now(self) -> datetime:
        return datetime.now(pytz.utc)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def load_timezone(name: str) -> tzinfo:
    """Resolve an IANA zone name; unknown names fall back to a fixed UTC+7."""
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        return pytz.FixedOffset(DEFAULT_TIMEZONE_OFFSET_MINUTES)


def localize(moment: datetime, tz: tzinfo) -> datetime:
    """Express `moment` in `tz`. Naive datetimes are taken to be UTC."""
    if moment.tzinfo is None:
        moment = pytz.utc.localize(moment)
    return moment.astimezone(tz)


def at_local(day: date, tz: tzinfo, at: time = time(0, 0)) -> datetime:
    return tz.localize(datetime.combine(day, at))


def day_bucket(moment: datetime, tz: tzinfo) -> datetime:
    """Truncate `moment` to 00:00 of its calendar day in `tz`."""
    return at_local(localize(moment, tz).date(), tz)
