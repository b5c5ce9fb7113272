# -*- coding: utf-8 -*-
"""Time-of-day arithmetic shared by the break resolver and payroll.

Times arrive from the API as ``HH:MM`` / ``HH:MM:SS`` strings or in a loose
12-hour form (``2:30 PM``, ``230pm``). Shifts never wrap past midnight.
"""
from __future__ import annotations

import re
from datetime import date, time, timedelta
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum


ZERO = Decimal("0")
SECONDS_PER_HOUR = Decimal(3600)

_HH_MM = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_12H = re.compile(r"^(\d{1,2}):?(\d{2})(AM|PM)$")

WEEKDAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def D(value) -> Decimal:
    """Exact Decimal of a number, string or Decimal; None is zero."""
    if value is None:
        return ZERO
    return Decimal(str(value))


class InvalidTimeFormat(ValueError):
    pass


class DayType(str, Enum):
    WEEKDAY = "weekday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"
    PUBLIC_HOLIDAY = "public_holiday"


# ---------- parsing / formatting ----------
def parse_time(value) -> time | None:
    """Parse a clock time; empty input means "not recorded yet"."""
    if value is None:
        return None
    if isinstance(value, time):
        return value
    s = str(value).strip()
    if not s:
        return None

    m = _HH_MM.match(s)
    if m:
        h, mi, sec = int(m.group(1)), int(m.group(2)), int(m.group(3) or 0)
        if h <= 23 and mi <= 59 and sec <= 59:
            return time(h, mi, sec)
        raise InvalidTimeFormat(f"time out of range: {value!r}")

    m = _12H.match(re.sub(r"\s", "", s).upper())
    if m:
        h, mi, period = int(m.group(1)), int(m.group(2)), m.group(3)
        if 1 <= h <= 12 and mi <= 59:
            return time(h % 12 + (12 if period == "PM" else 0), mi)
    raise InvalidTimeFormat(f"unrecognised time: {value!r}")


def parse_date(value) -> date:
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise InvalidTimeFormat(f"unrecognised date: {value!r}") from None


def format_hhmm(t: time | None) -> str:
    return t.strftime("%H:%M") if t else ""


def format_12h(t: time | None) -> str:
    """14:30 -> '2:30 PM'"""
    if t is None:
        return ""
    h12 = t.hour % 12 or 12
    return f"{h12}:{t.minute:02d} {'PM' if t.hour >= 12 else 'AM'}"


def to_24h(hours: int, minutes: int, period: str) -> str:
    period = period.upper()
    h24 = hours % 12 + (12 if period == "PM" else 0)
    return f"{h24:02d}:{minutes:02d}"


# ---------- durations ----------
def _seconds(t: time) -> int:
    return t.hour * 3600 + t.minute * 60 + t.second


def raw_hours(start: time, end: time) -> Decimal:
    """Wall-clock hours between two same-day times; negative if end < start."""
    return Decimal(_seconds(end) - _seconds(start)) / SECONDS_PER_HOUR


def quantize(value, places: str = "0.01") -> Decimal:
    return D(value).quantize(Decimal(places), rounding=ROUND_HALF_UP)


# ---------- calendar ----------
def day_type(d: date, holidays=()) -> DayType:
    if d in holidays:
        return DayType.PUBLIC_HOLIDAY
    wd = d.weekday()  # Mon=0 .. Sun=6
    if wd == 5:
        return DayType.SATURDAY
    if wd == 6:
        return DayType.SUNDAY
    return DayType.WEEKDAY


def week_bounds(d: date) -> tuple[date, date]:
    """Monday..Sunday week containing ``d``."""
    start = d - timedelta(days=d.weekday())
    return start, start + timedelta(days=6)


def date_range(start: date, end: date):
    for i in range((end - start).days + 1):
        yield start + timedelta(days=i)
