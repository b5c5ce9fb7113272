# -*- coding: utf-8 -*-
"""Payroll aggregation over stored timesheets.

Everything here reads the persisted, break-adjusted ``total_hours`` of each
timesheet. Breaks are never recomputed at this stage. Sums are kept as
``Decimal`` and only rounded by :meth:`PayrollSummary.to_dict` and the CSV
export.
"""
from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, time
from decimal import Decimal
from enum import Enum
from typing import Iterable

from .timeutil import (
    D, ZERO, DayType, WEEKDAY_NAMES,
    date_range, day_type, format_hhmm, quantize, raw_hours,
)


class PayType(str, Enum):
    HOURLY = "hourly"
    DAY_RATE = "day_rate"


@dataclass(frozen=True)
class RateCard:
    weekday: Decimal
    saturday: Decimal
    sunday: Decimal
    public_holiday: Decimal
    pay_type: PayType = PayType.HOURLY

    @classmethod
    def of(cls, employee) -> "RateCard":
        if isinstance(employee, RateCard):
            return employee
        weekday = D(employee.weekday_rate)
        holiday = getattr(employee, "public_holiday_rate", None)
        return cls(
            weekday=weekday,
            saturday=D(employee.saturday_rate),
            sunday=D(employee.sunday_rate),
            # no holiday premium configured -> ordinary weekday rate
            public_holiday=D(holiday) if holiday is not None else weekday,
            pay_type=PayType(getattr(employee, "pay_type", None) or PayType.HOURLY),
        )

    def rate_for(self, kind: DayType) -> Decimal:
        return {
            DayType.WEEKDAY: self.weekday,
            DayType.SATURDAY: self.saturday,
            DayType.SUNDAY: self.sunday,
            DayType.PUBLIC_HOLIDAY: self.public_holiday,
        }[kind]


def bucket_pay(pay_type: PayType, hours: Decimal, rate: Decimal) -> Decimal:
    """Pay for one day-type bucket.

    ``day_rate`` employees are stored with their per-day rates but are still
    paid per hour here, exactly like ``hourly`` ones. Paying them by days
    worked needs a business decision on partial days first; this is the one
    place to change when that is made.
    """
    if pay_type is PayType.DAY_RATE:
        return hours * rate
    return hours * rate


def paid_hours(ts) -> Decimal:
    """Stored total hours of an entry; negative legacy values count as zero."""
    h = D(getattr(ts, "total_hours", None))
    return h if h > 0 else ZERO


def _raw(ts) -> Decimal:
    start, end = getattr(ts, "start_time", None), getattr(ts, "end_time", None)
    if start is None or end is None:
        return ZERO
    return max(raw_hours(start, end), ZERO)


@dataclass
class PayrollSummary:
    weekday_hours: Decimal = ZERO
    saturday_hours: Decimal = ZERO
    sunday_hours: Decimal = ZERO
    holiday_hours: Decimal = ZERO
    total_pay: Decimal = ZERO
    raw_hours: Decimal = ZERO
    break_minutes: int = 0
    days_worked: int = 0

    @property
    def total_hours(self) -> Decimal:
        return self.weekday_hours + self.saturday_hours + self.sunday_hours + self.holiday_hours

    def to_dict(self) -> dict:
        return {
            "weekday_hours": str(quantize(self.weekday_hours)),
            "saturday_hours": str(quantize(self.saturday_hours)),
            "sunday_hours": str(quantize(self.sunday_hours)),
            "holiday_hours": str(quantize(self.holiday_hours)),
            "total_hours": str(quantize(self.total_hours)),
            "total_pay": str(quantize(self.total_pay)),
            "raw_hours": str(quantize(self.raw_hours)),
            "break_minutes": self.break_minutes,
            "days_worked": self.days_worked,
        }


def aggregate(timesheets: Iterable, employee, holidays=()) -> PayrollSummary:
    """Roll one employee's timesheets into day-type buckets and pay.

    Order of ``timesheets`` does not matter. Date range and employee scoping
    are the caller's job.
    """
    rates = RateCard.of(employee)
    hours: dict[DayType, Decimal] = defaultdict(lambda: ZERO)
    raw = ZERO
    breaks = 0
    worked: set[date] = set()

    for ts in timesheets:
        h = paid_hours(ts)
        hours[day_type(ts.work_date, holidays)] += h
        raw += _raw(ts)
        breaks += int(getattr(ts, "break_minutes", 0) or 0)
        if h > 0:
            worked.add(ts.work_date)

    pay = sum(
        (bucket_pay(rates.pay_type, hours[k], rates.rate_for(k)) for k in DayType),
        ZERO,
    )
    return PayrollSummary(
        weekday_hours=hours[DayType.WEEKDAY],
        saturday_hours=hours[DayType.SATURDAY],
        sunday_hours=hours[DayType.SUNDAY],
        holiday_hours=hours[DayType.PUBLIC_HOLIDAY],
        total_pay=pay,
        raw_hours=raw,
        break_minutes=breaks,
        days_worked=len(worked),
    )


@dataclass
class DayLine:
    day: date
    kind: DayType
    start_time: time | None = None
    end_time: time | None = None
    raw_hours: Decimal = ZERO
    break_minutes: int = 0
    total_hours: Decimal = ZERO
    rate: Decimal = ZERO
    pay: Decimal = ZERO
    timesheet_id: int | None = None

    @property
    def day_name(self) -> str:
        return WEEKDAY_NAMES[self.day.weekday()]

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "day_name": self.day_name,
            "day_type": self.kind.value,
            "start_time": format_hhmm(self.start_time),
            "end_time": format_hhmm(self.end_time),
            "raw_hours": str(quantize(self.raw_hours)),
            "break_minutes": self.break_minutes,
            "total_hours": str(quantize(self.total_hours)),
            "rate": str(quantize(self.rate)),
            "pay": str(quantize(self.pay)),
            "timesheet_id": self.timesheet_id,
        }


def daily_breakdown(timesheets: Iterable, employee, start: date, end: date, holidays=()) -> list[DayLine]:
    """One line per calendar day in ``start..end``; empty days show zeros."""
    rates = RateCard.of(employee)
    by_day = {ts.work_date: ts for ts in timesheets}
    lines: list[DayLine] = []
    for d in date_range(start, end):
        kind = day_type(d, holidays)
        rate = rates.rate_for(kind)
        line = DayLine(day=d, kind=kind, rate=rate)
        ts = by_day.get(d)
        # in-progress entries are listed without hours until clocked out
        if ts is not None:
            line.timesheet_id = getattr(ts, "id", None)
            line.start_time = ts.start_time
            line.end_time = ts.end_time
            if ts.start_time is not None and ts.end_time is not None:
                line.raw_hours = _raw(ts)
                line.break_minutes = int(ts.break_minutes or 0)
                line.total_hours = paid_hours(ts)
                line.pay = bucket_pay(rates.pay_type, line.total_hours, rate)
        lines.append(line)
    return lines


@dataclass
class EmployeePayroll:
    employee: object
    summary: PayrollSummary = field(default_factory=PayrollSummary)

    @property
    def sort_name(self) -> str:
        e = self.employee
        return f"{getattr(e, 'first_name', '')} {getattr(e, 'last_name', '')}".strip().lower()


def client_payroll(employees: Iterable, timesheets: Iterable, holidays=()) -> list[EmployeePayroll]:
    """Summaries for every employee, highest pay first."""
    per_emp: dict[object, list] = defaultdict(list)
    for ts in timesheets:
        per_emp[ts.employee_id].append(ts)
    rows = [EmployeePayroll(e, aggregate(per_emp.get(e.id, ()), e, holidays)) for e in employees]
    rows.sort(key=lambda r: (-r.summary.total_pay, r.sort_name))
    return rows


def totals(rows: Iterable[EmployeePayroll]) -> PayrollSummary:
    """Column sums across employees for dashboard footers."""
    out = PayrollSummary()
    for r in rows:
        s = r.summary
        out.weekday_hours += s.weekday_hours
        out.saturday_hours += s.saturday_hours
        out.sunday_hours += s.sunday_hours
        out.holiday_hours += s.holiday_hours
        out.total_pay += s.total_pay
        out.raw_hours += s.raw_hours
        out.break_minutes += s.break_minutes
        out.days_worked += s.days_worked
    return out
